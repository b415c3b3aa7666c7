# store/services/settings.py

"""
RUNTIME STORE SETTINGS

- StoreInfo is a singleton row created on first read.
- Setting rows override env defaults from django.conf.settings
  (e.g. tax_rate overrides DEFAULT_TAX_RATE).
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings as django_settings
from django.db import transaction

from store.models import Setting, StoreInfo

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

TAX_RATE_KEY = "tax_rate"


class SettingError(ValueError):
    pass


def get_store_info() -> StoreInfo:
    info, _ = StoreInfo.objects.get_or_create(pk=StoreInfo.SINGLETON_PK)
    return info


@transaction.atomic
def update_store_info(**fields) -> StoreInfo:
    info = get_store_info()
    for name, value in fields.items():
        setattr(info, name, value)
    info.save()
    logger.info("Store info updated", extra={"fields": sorted(fields)})
    return info


def get_setting(key: str, default: str | None = None) -> str | None:
    row = Setting.objects.filter(key=key).values_list("value", flat=True).first()
    return default if row is None else row


@transaction.atomic
def set_setting(*, key: str, value, description: str = "") -> Setting:
    key = (key or "").strip()
    if not key:
        raise SettingError("Setting key is required")

    if key == TAX_RATE_KEY:
        _parse_tax_rate(value)

    row, _ = Setting.objects.select_for_update().get_or_create(key=key)
    row.value = str(value)
    if description:
        row.description = description
    row.save()

    logger.info("Setting saved", extra={"key": key})
    return row


def _parse_tax_rate(value) -> Decimal:
    try:
        rate = Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise SettingError("tax_rate must be a number") from exc

    if rate < 0 or rate > 100:
        raise SettingError("tax_rate must be between 0 and 100")
    return rate


def get_tax_rate() -> Decimal:
    """Percentage applied to the discounted subtotal of a sale."""
    raw = get_setting(TAX_RATE_KEY)
    if raw is None or str(raw).strip() == "":
        raw = getattr(django_settings, "DEFAULT_TAX_RATE", "0")
    return _parse_tax_rate(raw)
