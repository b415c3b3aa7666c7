# returns/api/urls.py

from django.urls import path

from returns.api.views import (
    ReturnableItemsView,
    ReturnDetailView,
    ReturnEligibilityView,
    ReturnListCreateView,
    ReturnSearchView,
)

urlpatterns = [
    path("", ReturnListCreateView.as_view(), name="returns"),
    path("search/", ReturnSearchView.as_view(), name="returns-search"),
    path("sales/<uuid:sale_id>/eligibility/", ReturnEligibilityView.as_view(), name="returns-eligibility"),
    path("sales/<uuid:sale_id>/items/", ReturnableItemsView.as_view(), name="returns-returnable-items"),
    path("<uuid:return_id>/", ReturnDetailView.as_view(), name="return-detail"),
]
