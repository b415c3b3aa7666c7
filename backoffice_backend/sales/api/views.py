# sales/api/views.py

"""
SALES & RECEIPTS API

Capabilities:
- create / quote / mark printed:   pos.sell
- reprint:                         receipts.reprint
- list / detail:                   pos.sell OR reports.view
- audit log / receipt reports:     reports.view

Errors from the checkout service use the envelope
{"error": {"code", "message"}}.
"""

from __future__ import annotations

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_POS_SELL,
    CAP_RECEIPTS_REPRINT,
    CAP_REPORTS_VIEW,
    HasAnyCapability,
)
from sales.api.serializers import (
    CartQuoteInputSerializer,
    ReceiptReprintSerializer,
    ReprintInputSerializer,
    SaleCreateInputSerializer,
    SaleSerializer,
)
from sales.models import Sale
from sales.services.receipts import (
    ReceiptError,
    daily_receipt_stats,
    log_receipt_reprint,
    mark_receipt_printed,
    receipt_audit_log,
    receipt_history,
    receipt_statistics,
)
from sales.services.sale_service import SaleError, create_sale, quote_cart
from store.services.periods import PeriodError, filter_period

PERIOD_PARAMS = [
    OpenApiParameter("start_date", str, required=False, description="YYYY-MM-DD"),
    OpenApiParameter("end_date", str, required=False, description="YYYY-MM-DD"),
]

ACTION_CAPABILITIES = {
    "list": {CAP_POS_SELL, CAP_REPORTS_VIEW},
    "retrieve": {CAP_POS_SELL, CAP_REPORTS_VIEW},
    "create": {CAP_POS_SELL},
    "quote": {CAP_POS_SELL},
    "mark_printed": {CAP_POS_SELL},
    "reprint": {CAP_RECEIPTS_REPRINT},
    "audit_log": {CAP_REPORTS_VIEW},
    "receipt_statistics": {CAP_REPORTS_VIEW},
    "receipt_history": {CAP_POS_SELL, CAP_REPORTS_VIEW},
    "daily_stats": {CAP_POS_SELL, CAP_REPORTS_VIEW},
}


# =====================================================
# API ERROR NORMALIZATION
# =====================================================
def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def _client_ip(request) -> str | None:
    forwarded = (request.META.get("HTTP_X_FORWARDED_FOR") or "").split(",")[0].strip()
    return forwarded or request.META.get("REMOTE_ADDR") or None


class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Sales are created through the checkout service only; there is no
    update or delete.

    List query params:
    - start_date / end_date (YYYY-MM-DD)
    - payment_method, payment_status, return_status, customer
    """

    serializer_class = SaleSerializer
    lookup_value_regex = r"[0-9a-f-]{36}"
    permission_classes = [IsAuthenticated, HasAnyCapability]
    filterset_fields = ["payment_method", "payment_status", "return_status", "customer"]

    def get_permissions(self):
        self.required_any_capabilities = ACTION_CAPABILITIES.get(self.action, set())
        return super().get_permissions()

    def get_queryset(self):
        return (
            Sale.objects.select_related("customer")
            .prefetch_related("items")
            .order_by("-sale_date")
        )

    @extend_schema(tags=["sales"], parameters=PERIOD_PARAMS)
    def list(self, request, *args, **kwargs):
        try:
            qs = filter_period(
                self.filter_queryset(self.get_queryset()),
                "sale_date",
                request.query_params.get("start_date"),
                request.query_params.get("end_date"),
            )
        except PeriodError as exc:
            return error_response(code="invalid_period", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SaleSerializer(page, many=True).data)
        return Response(SaleSerializer(qs, many=True).data)

    @extend_schema(tags=["sales"], request=SaleCreateInputSerializer, responses={201: SaleSerializer})
    def create(self, request, *args, **kwargs):
        s = SaleCreateInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            sale = create_sale(
                items=s.to_service_items(),
                payment_method=data["payment_method"],
                customer=data.get("customer_id"),
                global_discount=data["global_discount"],
                global_discount_type=data["global_discount_type"],
                amount_tendered=data.get("amount_tendered"),
                notes=data.get("notes", ""),
                user=request.user,
                cashier_name=data.get("cashier_name", ""),
            )
        except SaleError as exc:
            return error_response(code=exc.code, message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)

        sale = self.get_queryset().get(pk=sale.pk)
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["sales"], request=CartQuoteInputSerializer)
    @action(detail=False, methods=["post"], url_path="quote")
    def quote(self, request):
        s = CartQuoteInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            totals = quote_cart(
                items=s.to_service_items(),
                global_discount=data["global_discount"],
                global_discount_type=data["global_discount_type"],
            )
        except SaleError as exc:
            return error_response(code=exc.code, message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)

        return Response(totals, status=status.HTTP_200_OK)

    @extend_schema(tags=["receipts"], request=None, responses=SaleSerializer)
    @action(detail=True, methods=["post"], url_path="mark-printed")
    def mark_printed(self, request, pk=None):
        sale = mark_receipt_printed(sale=self.get_object())
        return Response(SaleSerializer(sale).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["receipts"], request=ReprintInputSerializer, responses={201: ReceiptReprintSerializer})
    @action(detail=True, methods=["post"], url_path="reprint")
    def reprint(self, request, pk=None):
        s = ReprintInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        reprinted_by = (data.get("reprinted_by") or "").strip()
        if not reprinted_by:
            reprinted_by = getattr(request.user, "display_name", "") or request.user.email

        try:
            reprint = log_receipt_reprint(
                sale_id=pk,
                receipt_number=data["receipt_number"],
                reprinted_by=reprinted_by,
                reason=data.get("reason", ""),
                user_ip=_client_ip(request),
                user_agent=request.META.get("HTTP_USER_AGENT", ""),
                user=request.user,
            )
        except ReceiptError as exc:
            return error_response(code="receipt_not_found", message=str(exc), http_status=status.HTTP_404_NOT_FOUND)

        return Response(ReceiptReprintSerializer(reprint).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["receipts"],
        parameters=[
            *PERIOD_PARAMS,
            OpenApiParameter("receipt_number", str, required=False),
            OpenApiParameter("reprinted_by", str, required=False),
        ],
    )
    @action(detail=False, methods=["get"], url_path="audit-log")
    def audit_log(self, request):
        params = request.query_params
        try:
            rows = receipt_audit_log(
                receipt_number=params.get("receipt_number"),
                start=params.get("start_date"),
                end=params.get("end_date"),
                reprinted_by=params.get("reprinted_by"),
            )
        except PeriodError as exc:
            return error_response(code="invalid_period", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)

        return Response(rows, status=status.HTTP_200_OK)

    @extend_schema(tags=["receipts"], parameters=PERIOD_PARAMS)
    @action(detail=False, methods=["get"], url_path="receipt-statistics")
    def receipt_statistics(self, request):
        try:
            data = receipt_statistics(
                start=request.query_params.get("start_date"),
                end=request.query_params.get("end_date"),
            )
        except PeriodError as exc:
            return error_response(code="invalid_period", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)

        return Response(data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["receipts"],
        parameters=[
            *PERIOD_PARAMS,
            OpenApiParameter("search", str, required=False),
            OpenApiParameter("payment_method", str, required=False, description="method or 'digital'"),
            OpenApiParameter("limit", int, required=False),
        ],
        responses=SaleSerializer(many=True),
    )
    @action(detail=False, methods=["get"], url_path="receipt-history")
    def receipt_history(self, request):
        params = request.query_params
        try:
            limit = int(params.get("limit") or 100)
        except ValueError:
            return error_response(code="invalid_limit", message="limit must be an integer", http_status=status.HTTP_400_BAD_REQUEST)

        try:
            sales = receipt_history(
                search=params.get("search"),
                start=params.get("start_date"),
                end=params.get("end_date"),
                payment_method=params.get("payment_method"),
                limit=limit,
            )
        except PeriodError as exc:
            return error_response(code="invalid_period", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)

        return Response(SaleSerializer(sales, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["receipts"], parameters=[OpenApiParameter("date", str, required=False)])
    @action(detail=False, methods=["get"], url_path="daily-stats")
    def daily_stats(self, request):
        raw = (request.query_params.get("date") or "").strip()
        day = None
        if raw:
            day = parse_date(raw)
            if day is None:
                return error_response(
                    code="invalid_date",
                    message="Invalid date format (YYYY-MM-DD)",
                    http_status=status.HTTP_400_BAD_REQUEST,
                )

        return Response(daily_receipt_stats(day=day), status=status.HTTP_200_OK)
