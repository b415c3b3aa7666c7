# returns/api/views.py

"""
RETURNS API

- search / eligibility / returnable items: pos.sell OR pos.refund
- process:                                pos.refund
- list / detail:                          pos.refund OR reports.view
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import SAFE_METHODS, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import (
    CAP_POS_REFUND,
    CAP_POS_SELL,
    CAP_REPORTS_VIEW,
    HasAnyCapability,
)
from returns.api.serializers import (
    ProcessReturnInputSerializer,
    ReturnableItemSerializer,
    ReturnSearchResultSerializer,
    ReturnSerializer,
)
from returns.models import Return
from returns.services.eligibility import check_return_eligibility, returnable_items
from returns.services.processing import ReturnError, process_return_and_refund
from returns.services.search import search_sales_for_returns
from sales.models import Sale
from store.services.periods import PeriodError, filter_period

LOOKUP_CAPS = {CAP_POS_SELL, CAP_POS_REFUND}
HISTORY_CAPS = {CAP_POS_REFUND, CAP_REPORTS_VIEW}


class ReturnSearchView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = LOOKUP_CAPS
    serializer_class = ReturnSearchResultSerializer

    @extend_schema(
        tags=["returns"],
        parameters=[
            OpenApiParameter("q", str, required=False, description="receipt, invoice, customer name/phone/email"),
            OpenApiParameter("start_date", str, required=False),
            OpenApiParameter("end_date", str, required=False),
        ],
    )
    def get(self, request):
        try:
            sales = search_sales_for_returns(
                query=request.query_params.get("q") or "",
                start=request.query_params.get("start_date"),
                end=request.query_params.get("end_date"),
            )
        except PeriodError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self.get_serializer(sales, many=True).data, status=status.HTTP_200_OK)


class ReturnEligibilityView(APIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = LOOKUP_CAPS

    @extend_schema(tags=["returns"])
    def get(self, request, sale_id):
        return Response(check_return_eligibility(sale_id), status=status.HTTP_200_OK)


class ReturnableItemsView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = LOOKUP_CAPS
    serializer_class = ReturnableItemSerializer

    @extend_schema(tags=["returns"])
    def get(self, request, sale_id):
        sale = get_object_or_404(Sale, id=sale_id)
        return Response(self.get_serializer(returnable_items(sale), many=True).data, status=status.HTTP_200_OK)


class ReturnListCreateView(GenericAPIView):
    """
    GET:  processed returns (filters: refund_method, sale, customer, date range)
    POST: process a return and its refund
    """

    permission_classes = [IsAuthenticated, HasAnyCapability]
    serializer_class = ProcessReturnInputSerializer
    filterset_fields = ["refund_method", "sale", "customer"]

    def get_permissions(self):
        self.required_any_capabilities = HISTORY_CAPS if self.request.method in SAFE_METHODS else {CAP_POS_REFUND}
        return super().get_permissions()

    def get_queryset(self):
        return (
            Return.objects.select_related("sale", "customer", "processed_by", "refund")
            .prefetch_related("items__sale_item")
            .order_by("-created_at")
        )

    @extend_schema(tags=["returns"], responses=ReturnSerializer(many=True))
    def get(self, request):
        try:
            qs = filter_period(
                self.filter_queryset(self.get_queryset()),
                "created_at",
                request.query_params.get("start_date"),
                request.query_params.get("end_date"),
            )
        except PeriodError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ReturnSerializer(page, many=True).data)
        return Response(ReturnSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["returns"], request=ProcessReturnInputSerializer, responses={201: ReturnSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            ret = process_return_and_refund(
                sale_id=data["sale_id"],
                items=[dict(line) for line in data["items"]],
                refund_method=data["refund_method"],
                reason=data["reason"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except ReturnError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        ret = self.get_queryset().get(pk=ret.pk)
        return Response(ReturnSerializer(ret).data, status=status.HTTP_201_CREATED)


class ReturnDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = HISTORY_CAPS
    serializer_class = ReturnSerializer

    @extend_schema(tags=["returns"])
    def get(self, request, return_id):
        ret = get_object_or_404(
            Return.objects.select_related("sale", "customer", "processed_by", "refund").prefetch_related(
                "items__sale_item"
            ),
            id=return_id,
        )
        return Response(self.get_serializer(ret).data, status=status.HTTP_200_OK)
