# accounting/api/views.py

"""
EXPENSES & CASH LEDGER API

GET  endpoints: reports.view
POST endpoints: accounting.post

Date range params: start_date / end_date (YYYY-MM-DD, inclusive).
"""

from django.utils import timezone
from django.utils.dateparse import parse_datetime
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.serializers import (
    CashEntryCreateSerializer,
    CashLedgerEntrySerializer,
    ExpenseCreateSerializer,
    ExpenseSerializer,
)
from accounting.models import CashLedgerEntry, Expense
from accounting.services.cash_ledger import CashLedgerError, get_cash_balance, record_manual_entry
from accounting.services.expense_service import ExpenseError, create_expense
from accounting.services.financial_summary import (
    cash_flow_summary,
    expense_breakdown,
    get_financial_summary,
)
from permissions.roles import (
    CAP_ACCOUNTING_POST,
    CAP_REPORTS_VIEW,
    HasCapability,
    read_write_capabilities,
)
from store.services.periods import PeriodError, filter_period

ACCOUNTING_CAPS = read_write_capabilities(CAP_REPORTS_VIEW, CAP_ACCOUNTING_POST)

PERIOD_PARAMS = [
    OpenApiParameter("start_date", str, required=False, description="YYYY-MM-DD"),
    OpenApiParameter("end_date", str, required=False, description="YYYY-MM-DD"),
]


def _period(request):
    return request.query_params.get("start_date"), request.query_params.get("end_date")


class ExpenseListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability_by_method = ACCOUNTING_CAPS
    serializer_class = ExpenseCreateSerializer
    filterset_fields = ["category", "payment_method"]

    def get_queryset(self):
        return Expense.objects.select_related("created_by").order_by("-expense_date", "-created_at")

    @extend_schema(tags=["accounting"], parameters=PERIOD_PARAMS, responses=ExpenseSerializer(many=True))
    def get(self, request):
        try:
            qs = filter_period(self.filter_queryset(self.get_queryset()), "expense_date", *_period(request))
        except PeriodError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ExpenseSerializer(page, many=True).data)
        return Response(ExpenseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=ExpenseCreateSerializer, responses={201: ExpenseSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            expense = create_expense(
                category=data["category"],
                description=data["description"],
                amount=data["amount"],
                expense_date=data.get("expense_date"),
                payment_method=data["payment_method"],
                reference=data.get("reference", ""),
                user=request.user,
            )
        except ExpenseError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class CashLedgerView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability_by_method = ACCOUNTING_CAPS
    serializer_class = CashEntryCreateSerializer
    filterset_fields = ["entry_type", "reference_type"]

    def get_queryset(self):
        return CashLedgerEntry.objects.order_by("-created_at")

    @extend_schema(tags=["accounting"], parameters=PERIOD_PARAMS, responses=CashLedgerEntrySerializer(many=True))
    def get(self, request):
        try:
            qs = filter_period(self.filter_queryset(self.get_queryset()), "created_at", *_period(request))
        except PeriodError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CashLedgerEntrySerializer(page, many=True).data)
        return Response(CashLedgerEntrySerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=CashEntryCreateSerializer, responses={201: CashLedgerEntrySerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            entry = record_manual_entry(
                entry_type=data["entry_type"],
                amount=data["amount"],
                description=data.get("description", ""),
                user=request.user,
            )
        except CashLedgerError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(CashLedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class CashBalanceView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(
        tags=["accounting"],
        parameters=[OpenApiParameter("at", str, required=False, description="ISO datetime; defaults to now")],
    )
    def get(self, request):
        at = timezone.now()
        raw = (request.query_params.get("at") or "").strip()
        if raw:
            at = parse_datetime(raw)
            if at is None:
                return Response({"detail": "Invalid at (ISO datetime)"}, status=status.HTTP_400_BAD_REQUEST)
            if timezone.is_naive(at):
                at = timezone.make_aware(at)

        return Response({"at": at, "balance": get_cash_balance(at=at)}, status=status.HTTP_200_OK)


class _PeriodReportView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW
    report = None

    @extend_schema(tags=["accounting"], parameters=PERIOD_PARAMS)
    def get(self, request):
        start, end = _period(request)
        try:
            data = self.report(start=start, end=end)
        except PeriodError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(data, status=status.HTTP_200_OK)


class FinancialSummaryView(_PeriodReportView):
    report = staticmethod(get_financial_summary)


class ExpenseBreakdownView(_PeriodReportView):
    report = staticmethod(expense_breakdown)


class CashFlowSummaryView(_PeriodReportView):
    report = staticmethod(cash_flow_summary)
