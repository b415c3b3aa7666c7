# reports/api/views.py

"""
REPORTS API (GET only, capability reports.view)

Date range params: start_date / end_date (YYYY-MM-DD, inclusive).
"""

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from reports.services.dashboard import dashboard_summary
from reports.services.sales_analytics import (
    daily_sales,
    sales_summary_metrics,
    sales_trend,
    top_products,
)
from store.services.periods import PeriodError

PERIOD_PARAMS = [
    OpenApiParameter("start_date", str, required=False, description="YYYY-MM-DD"),
    OpenApiParameter("end_date", str, required=False, description="YYYY-MM-DD"),
]


class _ReportView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    def build(self, request):
        raise NotImplementedError

    def get(self, request):
        try:
            data = self.build(request)
        except PeriodError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(data, status=status.HTTP_200_OK)


def _period(request) -> dict:
    return {
        "start": request.query_params.get("start_date"),
        "end": request.query_params.get("end_date"),
    }


def _day(request):
    raw = (request.query_params.get("date") or "").strip()
    if not raw:
        return None
    day = parse_date(raw)
    if day is None:
        raise PeriodError("Invalid date format (YYYY-MM-DD)")
    return day


class DashboardView(_ReportView):
    @extend_schema(tags=["reports"], parameters=[OpenApiParameter("date", str, required=False)])
    def get(self, request):
        return super().get(request)

    def build(self, request):
        return dashboard_summary(today=_day(request))


class SalesTrendView(_ReportView):
    @extend_schema(
        tags=["reports"],
        parameters=[*PERIOD_PARAMS, OpenApiParameter("group_by", str, required=False, enum=["hour", "day", "month"])],
    )
    def get(self, request):
        return super().get(request)

    def build(self, request):
        return sales_trend(**_period(request), group_by=request.query_params.get("group_by") or "day")


class SalesSummaryView(_ReportView):
    @extend_schema(tags=["reports"], parameters=PERIOD_PARAMS)
    def get(self, request):
        return super().get(request)

    def build(self, request):
        return sales_summary_metrics(**_period(request))


class TopProductsView(_ReportView):
    @extend_schema(tags=["reports"], parameters=[*PERIOD_PARAMS, OpenApiParameter("limit", int, required=False)])
    def get(self, request):
        return super().get(request)

    def build(self, request):
        try:
            limit = int(request.query_params.get("limit") or 10)
        except ValueError as exc:
            raise PeriodError("limit must be an integer") from exc
        return top_products(**_period(request), limit=limit)


class DailySalesView(_ReportView):
    @extend_schema(tags=["reports"], parameters=[OpenApiParameter("date", str, required=False)])
    def get(self, request):
        return super().get(request)

    def build(self, request):
        return daily_sales(day=_day(request))
