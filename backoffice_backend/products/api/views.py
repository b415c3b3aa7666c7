# products/api/views.py

"""
PRODUCTS & INVENTORY API

Capabilities:
- read:            inventory.view
- catalog writes:  inventory.edit
- stock receive:   inventory.edit
- stock adjust / damage review: inventory.adjust

Stock never changes through plain model writes; every stock-affecting
endpoint calls products.services.*.
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.generics import GenericAPIView, ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasCapability,
    read_write_capabilities,
)
from products.api.serializers import (
    CategorySerializer,
    DamageReportCreateSerializer,
    DamageReportSerializer,
    DamageReviewSerializer,
    InventoryReceiptSerializer,
    ProductImportSerializer,
    ProductSerializer,
    ProfitAnalysisSerializer,
    StockAdjustSerializer,
    StockMovementSerializer,
    StockReceiveSerializer,
)
from products.models import (
    Category,
    DamageReport,
    InventoryReceipt,
    Product,
    ProfitAnalysis,
    StockMovement,
)
from products.services import stock_status
from products.services.damage import (
    DamageReportError,
    approve_damage_report,
    create_damage_report,
    reject_damage_report,
)
from products.services.inventory import InventoryError, adjust_stock, receive_stock
from products.services.product_import import import_products
from products.services.profit import refresh_profit_analysis

INVENTORY_CAPS = read_write_capabilities(CAP_INVENTORY_VIEW, CAP_INVENTORY_EDIT)


class CategoryViewSet(viewsets.ModelViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    lookup_value_regex = r"[0-9a-f-]{36}"
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability_by_method = INVENTORY_CAPS

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        if category.products.exists():
            return Response(
                {"detail": "Category has products and cannot be deleted"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().destroy(request, *args, **kwargs)


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product catalog.

    Query params (list):
    - search: name / sku / barcode contains
    - category: category id
    - is_active: true/false
    - stock_state: low | out | near_expiry | expired

    DELETE deactivates (products are referenced by sales history).
    """

    serializer_class = ProductSerializer
    lookup_value_regex = r"[0-9a-f-]{36}"
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability_by_method = INVENTORY_CAPS
    filterset_fields = ["category", "is_active"]

    def get_queryset(self):
        qs = Product.objects.select_related("category").order_by("name")

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(name__icontains=search) | Q(sku__icontains=search) | Q(barcode__icontains=search)
            )

        state = self.request.query_params.get("stock_state")
        if state:
            qs = stock_status.filter_by_stock_state(qs, state)

        return qs

    def get_permissions(self):
        if self.action == "adjust":
            self.required_capability_by_method = {"POST": CAP_INVENTORY_ADJUST}
        return super().get_permissions()

    def perform_create(self, serializer):
        opening_stock = int(serializer.validated_data.get("opening_stock") or 0)
        product = serializer.save()

        if opening_stock > 0:
            receive_stock(
                product=product,
                quantity=opening_stock,
                unit_cost=product.cost_price,
                user=self.request.user,
                notes="Opening stock",
            )
            product.refresh_from_db()
        else:
            refresh_profit_analysis(product)

        serializer.instance = product

    def perform_update(self, serializer):
        product = serializer.save()
        refresh_profit_analysis(product)

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        product.is_active = False
        product.save(update_fields=["is_active", "updated_at"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["inventory"], request=StockReceiveSerializer, responses=InventoryReceiptSerializer)
    @action(detail=True, methods=["post"], url_path="receive")
    def receive(self, request, pk=None):
        product = self.get_object()
        s = StockReceiveSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            receipt = receive_stock(
                product=product,
                quantity=data["quantity"],
                unit_cost=data["unit_cost"],
                user=request.user,
                supplier_name=data.get("supplier_name", ""),
                reference=data.get("reference", ""),
                notes=data.get("notes", ""),
            )
        except InventoryError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(InventoryReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["inventory"], request=StockAdjustSerializer, responses=ProductSerializer)
    @action(detail=True, methods=["post"], url_path="adjust")
    def adjust(self, request, pk=None):
        product = self.get_object()
        s = StockAdjustSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            adjust_stock(
                product=product,
                new_quantity=s.validated_data["new_quantity"],
                user=request.user,
                notes=s.validated_data.get("notes", ""),
            )
        except InventoryError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        product.refresh_from_db()
        return Response(ProductSerializer(product).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], responses=StockMovementSerializer(many=True))
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        product = self.get_object()
        qs = product.stock_movements.order_by("-created_at")
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StockMovementSerializer(page, many=True).data)
        return Response(StockMovementSerializer(qs, many=True).data)


class StockMovementListView(ListAPIView):
    serializer_class = StockMovementSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW
    filterset_fields = ["product", "movement_type", "reference_type"]

    def get_queryset(self):
        return StockMovement.objects.select_related("product").order_by("-created_at")


class InventoryReceiptListView(ListAPIView):
    serializer_class = InventoryReceiptSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW
    filterset_fields = ["product"]

    def get_queryset(self):
        return InventoryReceipt.objects.select_related("product").order_by("-created_at")


class DamageReportListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability_by_method = INVENTORY_CAPS
    serializer_class = DamageReportCreateSerializer

    @extend_schema(
        tags=["inventory"],
        parameters=[OpenApiParameter("status", str, required=False)],
        responses=DamageReportSerializer(many=True),
    )
    def get(self, request):
        qs = DamageReport.objects.select_related("product").order_by("-created_at")
        status_param = (request.query_params.get("status") or "").strip().upper()
        if status_param:
            qs = qs.filter(status=status_param)
        return Response(DamageReportSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["inventory"],
        request=DamageReportCreateSerializer,
        responses={201: DamageReportSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        product = Product.objects.filter(id=data["product_id"]).first()
        if product is None:
            return Response({"detail": "Product not found"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            report = create_damage_report(
                product=product,
                quantity=data["quantity"],
                reason=data["reason"],
                user=request.user,
            )
        except DamageReportError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(DamageReportSerializer(report).data, status=status.HTTP_201_CREATED)


class _DamageReviewView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_ADJUST
    serializer_class = DamageReviewSerializer
    review = None

    @extend_schema(tags=["inventory"], request=DamageReviewSerializer, responses=DamageReportSerializer)
    def post(self, request, report_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            report = self.review(
                report_id=report_id,
                user=request.user,
                notes=s.validated_data.get("notes", ""),
            )
        except DamageReportError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(DamageReportSerializer(report).data, status=status.HTTP_200_OK)


class DamageReportApproveView(_DamageReviewView):
    review = staticmethod(approve_damage_report)


class DamageReportRejectView(_DamageReviewView):
    review = staticmethod(reject_damage_report)


class ProfitAnalysisListView(ListAPIView):
    serializer_class = ProfitAnalysisSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW

    def get_queryset(self):
        return ProfitAnalysis.objects.select_related("product").order_by("-profit_margin")


class InventoryStatusView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW
    serializer_class = ProductSerializer

    @extend_schema(tags=["inventory"])
    def get(self, request):
        def rows(qs):
            return ProductSerializer(qs.select_related("category")[:100], many=True).data

        low = stock_status.low_stock()
        out = stock_status.out_of_stock()
        near = stock_status.near_expiry()
        gone = stock_status.expired()

        return Response(
            {
                "counts": {
                    "low_stock": low.count(),
                    "out_of_stock": out.count(),
                    "near_expiry": near.count(),
                    "expired": gone.count(),
                },
                "low_stock": rows(low),
                "out_of_stock": rows(out),
                "near_expiry": rows(near),
                "expired": rows(gone),
            },
            status=status.HTTP_200_OK,
        )


class ProductImportView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_EDIT
    serializer_class = ProductImportSerializer

    @extend_schema(tags=["inventory"], request=ProductImportSerializer)
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = import_products(s.validated_data["rows"], user=request.user)
        http_status = status.HTTP_201_CREATED if result.created else status.HTTP_400_BAD_REQUEST
        return Response(result.as_dict(), status=http_status)
