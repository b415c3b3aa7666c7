# bnpl/api/views.py

"""
BNPL API

Capabilities:
- reads:      bnpl.collect OR reports.view
- payments:   bnpl.collect
- overdue:    reports.view (manager job)

Payment writes are all-or-nothing; failures return 400 {"detail": ...}.
"""

from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bnpl.api.serializers import (
    BnplPaymentInputSerializer,
    BnplPaymentSerializer,
    BnplTransactionDetailSerializer,
    BnplTransactionSerializer,
    CustomerPaymentInputSerializer,
    MarkOverdueInputSerializer,
)
from bnpl.models import BnplPayment, BnplTransaction
from bnpl.services.summary import bnpl_overview, customer_bnpl_summary
from bnpl.services.transactions import (
    BnplPaymentError,
    apply_customer_payment,
    mark_overdue_transactions,
    process_bnpl_payment,
)
from customers.models import Customer
from permissions.roles import (
    CAP_BNPL_COLLECT,
    CAP_REPORTS_VIEW,
    HasAnyCapability,
    HasCapability,
)

READ_CAPS = {CAP_BNPL_COLLECT, CAP_REPORTS_VIEW}


class BnplTransactionListView(GenericAPIView):
    """
    Query params:
    - customer: customer id
    - status: pending | partially_paid | paid | overdue
    - overdue: true -> past due date and not paid
    - open: true -> not paid
    """

    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = READ_CAPS
    serializer_class = BnplTransactionSerializer
    filterset_fields = ["customer", "status"]

    def get_queryset(self):
        return BnplTransaction.objects.select_related("customer", "sale").order_by("due_date", "created_at")

    @extend_schema(
        tags=["bnpl"],
        parameters=[
            OpenApiParameter("overdue", bool, required=False),
            OpenApiParameter("open", bool, required=False),
        ],
    )
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())

        if (request.query_params.get("overdue") or "").lower() in ("1", "true", "yes"):
            qs = qs.filter(due_date__lt=timezone.localdate()).exclude(status=BnplTransaction.STATUS_PAID)
        if (request.query_params.get("open") or "").lower() in ("1", "true", "yes"):
            qs = qs.exclude(status=BnplTransaction.STATUS_PAID)

        search = (request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(customer__name__icontains=search)
                | Q(customer__phone__icontains=search)
                | Q(sale__receipt_number__icontains=search)
            )

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data, status=status.HTTP_200_OK)


class BnplTransactionDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = READ_CAPS
    serializer_class = BnplTransactionDetailSerializer

    @extend_schema(tags=["bnpl"])
    def get(self, request, transaction_id):
        txn = get_object_or_404(
            BnplTransaction.objects.select_related("customer", "sale").prefetch_related("payments__received_by"),
            id=transaction_id,
        )
        return Response(self.get_serializer(txn).data, status=status.HTTP_200_OK)


class BnplTransactionPayView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BNPL_COLLECT
    serializer_class = BnplPaymentInputSerializer

    @extend_schema(tags=["bnpl"], request=BnplPaymentInputSerializer, responses={201: BnplPaymentSerializer})
    def post(self, request, transaction_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            payment = process_bnpl_payment(
                transaction_id=transaction_id,
                amount=data["amount"],
                payment_method=data["payment_method"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except BnplPaymentError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BnplPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class CustomerPaymentView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BNPL_COLLECT
    serializer_class = CustomerPaymentInputSerializer

    @extend_schema(tags=["bnpl"], request=CustomerPaymentInputSerializer, responses={201: BnplPaymentSerializer(many=True)})
    def post(self, request, customer_id):
        customer = get_object_or_404(Customer, id=customer_id)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            payments = apply_customer_payment(
                customer=customer,
                amount=data["amount"],
                transaction_ids=data.get("transaction_ids"),
                payment_method=data["payment_method"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except BnplPaymentError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        customer.refresh_from_db()
        return Response(
            {
                "payments": BnplPaymentSerializer(payments, many=True).data,
                "total_applied": str(sum((p.amount for p in payments))),
                "remaining_dues": str(customer.total_outstanding_dues),
            },
            status=status.HTTP_201_CREATED,
        )


class CustomerBnplSummaryView(APIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = READ_CAPS

    @extend_schema(tags=["bnpl"])
    def get(self, request, customer_id):
        customer = get_object_or_404(Customer, id=customer_id)
        return Response(customer_bnpl_summary(customer=customer), status=status.HTTP_200_OK)


class BnplOverviewView(APIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = READ_CAPS

    @extend_schema(tags=["bnpl"])
    def get(self, request):
        return Response(bnpl_overview(), status=status.HTTP_200_OK)


class MarkOverdueView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW
    serializer_class = MarkOverdueInputSerializer

    @extend_schema(tags=["bnpl"], request=MarkOverdueInputSerializer)
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        today = s.validated_data.get("date")
        updated = mark_overdue_transactions(today=today)
        return Response({"updated": updated}, status=status.HTTP_200_OK)


class BnplPaymentListView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = READ_CAPS
    serializer_class = BnplPaymentSerializer
    filterset_fields = ["customer", "transaction", "payment_method"]

    def get_queryset(self):
        return BnplPayment.objects.select_related("received_by").order_by("-created_at")

    @extend_schema(tags=["bnpl"])
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data, status=status.HTTP_200_OK)
