# customers/api/views.py

"""
CUSTOMERS API

- reads + credit check: pos.sell OR bnpl.collect OR reports.view
- create / update:      pos.sell
- DELETE deactivates (customers are referenced by sales and BNPL history)
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from customers.api.serializers import CreditCheckInputSerializer, CustomerSerializer
from customers.models import Customer
from customers.services.credit import check_customer_credit
from customers.services.summary import customer_financial_summary
from permissions.roles import (
    CAP_BNPL_COLLECT,
    CAP_POS_SELL,
    CAP_REPORTS_VIEW,
    HasAnyCapability,
)

READ_CAPS = {CAP_POS_SELL, CAP_BNPL_COLLECT, CAP_REPORTS_VIEW}
WRITE_CAPS = {CAP_POS_SELL}

READ_ACTIONS = {"list", "retrieve", "credit_check", "summary"}


class CustomerViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = CustomerSerializer
    lookup_value_regex = r"[0-9a-f-]{36}"
    permission_classes = [IsAuthenticated, HasAnyCapability]
    filterset_fields = ["is_active"]

    def get_permissions(self):
        self.required_any_capabilities = READ_CAPS if self.action in READ_ACTIONS else WRITE_CAPS
        return super().get_permissions()

    def get_queryset(self):
        qs = Customer.objects.order_by("name")

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(name__icontains=search) | Q(phone__icontains=search) | Q(email__icontains=search)
            )

        if (self.request.query_params.get("has_dues") or "").lower() in ("1", "true", "yes"):
            qs = qs.filter(total_outstanding_dues__gt=0)

        return qs

    @extend_schema(
        tags=["customers"],
        parameters=[
            OpenApiParameter("search", str, required=False, description="name / phone / email contains"),
            OpenApiParameter("has_dues", bool, required=False),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        customer = self.get_object()
        customer.is_active = False
        customer.save(update_fields=["is_active", "updated_at"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["customers"], request=CreditCheckInputSerializer)
    @action(detail=True, methods=["post"], url_path="credit-check")
    def credit_check(self, request, pk=None):
        customer = self.get_object()
        s = CreditCheckInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        amount = s.validated_data["amount"]

        return Response(
            {
                "customer_id": customer.id,
                "amount": str(amount),
                "available_credit": str(customer.available_credit),
                "approved": check_customer_credit(customer=customer, amount=amount),
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["customers"])
    @action(detail=True, methods=["get"], url_path="summary")
    def summary(self, request, pk=None):
        customer = self.get_object()
        return Response(customer_financial_summary(customer=customer), status=status.HTTP_200_OK)
