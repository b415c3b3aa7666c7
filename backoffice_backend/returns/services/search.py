# returns/services/search.py

from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from sales.models import Sale
from store.services.periods import filter_period

SEARCH_LIMIT = 50


def search_sales_for_returns(*, query: str = "", start=None, end=None, limit: int = SEARCH_LIMIT):
    """
    Recent sales with items, newest first.

    query matches receipt / invoice number and customer name, phone or email
    (case-insensitive). Only sales from the last RETURN_SEARCH_DAYS days.
    """
    since = timezone.now() - timedelta(days=int(settings.RETURN_SEARCH_DAYS))
    qs = (
        Sale.objects.filter(sale_date__gte=since, items__isnull=False)
        .select_related("customer")
        .prefetch_related("items")
        .distinct()
    )

    query = (query or "").strip()
    if query:
        qs = qs.filter(
            Q(receipt_number__icontains=query)
            | Q(invoice_number__icontains=query)
            | Q(customer__name__icontains=query)
            | Q(customer__phone__icontains=query)
            | Q(customer__email__icontains=query)
        )

    qs = filter_period(qs, "sale_date", start, end)
    return list(qs.order_by("-sale_date")[: min(int(limit), SEARCH_LIMIT)])
