# sales/services/numbering.py

from __future__ import annotations

import re
import secrets

from django.utils import timezone

from sales.models import Sale
from store.services.numbering import next_sequence_value

RECEIPT_PREFIX = "RCP-"
RECEIPT_COUNTER = "RCP"
_RECEIPT_RE = re.compile(r"^RCP-(\d+)$")


def generate_invoice_number(now=None) -> str:
    """INV-<YYYYMMDDHHMMSS>-<4 hex>"""
    now = timezone.localtime(now or timezone.now())
    return f"INV-{now:%Y%m%d%H%M%S}-{secrets.token_hex(2).upper()}"


def highest_issued_receipt() -> int:
    """Numeric maximum over existing RCP-n receipt numbers (0 when none)."""
    highest = 0
    numbers = Sale.objects.filter(receipt_number__startswith=RECEIPT_PREFIX).values_list(
        "receipt_number", flat=True
    )
    for number in numbers.iterator():
        match = _RECEIPT_RE.match(number or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def next_receipt_number() -> str:
    """
    RCP-%06d from the locked RCP sequence counter. The counter is seeded
    from the highest receipt already issued the first time it is used.
    """
    n = next_sequence_value(prefix=RECEIPT_COUNTER, start_after=highest_issued_receipt)
    return f"{RECEIPT_PREFIX}{n:06d}"
