# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    PurchaseItemReceiveView,
    PurchaseOrderCancelView,
    PurchaseOrderDetailView,
    PurchaseOrderListCreateView,
    PurchaseOrderReceiveView,
    SupplierListCreateView,
)

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="purchase-suppliers"),
    path("orders/", PurchaseOrderListCreateView.as_view(), name="purchase-orders"),
    path("orders/<uuid:order_id>/", PurchaseOrderDetailView.as_view(), name="purchase-order-detail"),
    path(
        "orders/<uuid:order_id>/receive/",
        PurchaseOrderReceiveView.as_view(),
        name="purchase-order-receive",
    ),
    path(
        "orders/<uuid:order_id>/cancel/",
        PurchaseOrderCancelView.as_view(),
        name="purchase-order-cancel",
    ),
    path(
        "items/<uuid:item_id>/receive/",
        PurchaseItemReceiveView.as_view(),
        name="purchase-item-receive",
    ),
]
