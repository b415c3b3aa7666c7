# purchases/api/views.py

"""
SUPPLIERS & PURCHASE ORDERS API

All endpoints require purchasing.manage.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_PURCHASING_MANAGE, HasCapability
from purchases.api.serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    ReceiveItemSerializer,
    SupplierSerializer,
)
from purchases.models import PurchaseOrder, Supplier
from purchases.services.purchase_orders import (
    PurchaseOrderError,
    cancel_purchase_order,
    create_purchase_order,
    receive_purchase_item,
    receive_purchase_order,
)


def _order_queryset():
    return PurchaseOrder.objects.select_related("supplier").prefetch_related("items", "items__product")


def _order_response(order, http_status=status.HTTP_200_OK):
    order = _order_queryset().get(id=order.id)
    return Response(PurchaseOrderSerializer(order).data, status=http_status)


class SupplierListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PURCHASING_MANAGE
    serializer_class = SupplierSerializer

    @extend_schema(
        tags=["purchases"],
        parameters=[OpenApiParameter("include_inactive", bool, required=False)],
        responses=SupplierSerializer(many=True),
    )
    def get(self, request):
        qs = Supplier.objects.order_by("name")
        if (request.query_params.get("include_inactive") or "").lower() not in {"1", "true", "yes"}:
            qs = qs.filter(is_active=True)
        return Response(SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=SupplierSerializer, responses={201: SupplierSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        supplier = s.save()
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)


class PurchaseOrderListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PURCHASING_MANAGE
    serializer_class = PurchaseOrderCreateSerializer
    filterset_fields = ["status", "supplier"]

    def get_queryset(self):
        return _order_queryset().order_by("-created_at")

    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer(many=True))
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PurchaseOrderSerializer(page, many=True).data)
        return Response(PurchaseOrderSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=PurchaseOrderCreateSerializer,
        responses={201: PurchaseOrderSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            order = create_purchase_order(
                supplier=data["supplier_id"],
                items=[
                    {
                        "product": line["product_id"],
                        "quantity": line["quantity"],
                        "unit_cost": line["unit_cost"],
                    }
                    for line in data["items"]
                ],
                order_date=data.get("order_date"),
                expected_date=data.get("expected_date"),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except PurchaseOrderError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return _order_response(order, status.HTTP_201_CREATED)


class PurchaseOrderDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PURCHASING_MANAGE
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer)
    def get(self, request, order_id):
        order = _order_queryset().filter(id=order_id).first()
        if order is None:
            return Response({"detail": "Purchase order not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_200_OK)


class PurchaseOrderReceiveView(GenericAPIView):
    """Receive every outstanding line of the order."""

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PURCHASING_MANAGE
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], request=None, responses=PurchaseOrderSerializer)
    def post(self, request, order_id):
        try:
            order = receive_purchase_order(order_id=order_id, user=request.user)
        except PurchaseOrderError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return _order_response(order)


class PurchaseItemReceiveView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PURCHASING_MANAGE
    serializer_class = ReceiveItemSerializer

    @extend_schema(tags=["purchases"], request=ReceiveItemSerializer, responses=PurchaseOrderSerializer)
    def post(self, request, item_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            order = receive_purchase_item(
                item_id=item_id,
                quantity=s.validated_data["quantity"],
                user=request.user,
            )
        except PurchaseOrderError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return _order_response(order)


class PurchaseOrderCancelView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PURCHASING_MANAGE
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], request=None, responses=PurchaseOrderSerializer)
    def post(self, request, order_id):
        try:
            order = cancel_purchase_order(order_id=order_id, user=request.user)
        except PurchaseOrderError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return _order_response(order)
