# products/services/damage.py

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from products.models import DamageReport, Product, StockMovement
from products.services.inventory import InsufficientStockError, deduct_stock

logger = logging.getLogger(__name__)

NOT_FOUND_OR_PROCESSED = "Damage report not found or already processed"


class DamageReportError(ValueError):
    pass


@transaction.atomic
def create_damage_report(*, product: Product, quantity: int, reason: str, user=None) -> DamageReport:
    if int(quantity or 0) <= 0:
        raise DamageReportError("quantity must be greater than zero")

    reason = (reason or "").strip()
    if not reason:
        raise DamageReportError("reason is required")

    report = DamageReport(product=product, quantity=int(quantity), reason=reason, reported_by=user)
    report.full_clean()
    report.save()

    logger.info(
        "Damage report filed",
        extra={"report_id": str(report.id), "product_id": str(product.id), "quantity": report.quantity},
    )
    return report


def _lock_pending(report_id) -> DamageReport:
    report = (
        DamageReport.objects.select_for_update()
        .select_related("product")
        .filter(id=report_id, status=DamageReport.STATUS_PENDING)
        .first()
    )
    if report is None:
        raise DamageReportError(NOT_FOUND_OR_PROCESSED)
    return report


@transaction.atomic
def approve_damage_report(*, report_id, user=None, notes: str = "") -> DamageReport:
    """
    Write the damaged units off stock. Fails without side effects when stock
    no longer covers the reported quantity.
    """
    report = _lock_pending(report_id)

    try:
        deduct_stock(
            product=report.product,
            quantity=report.quantity,
            reference_type=StockMovement.Reference.DAMAGE,
            reference_id=str(report.id),
            user=user,
            notes=f"Damage: {report.reason}"[:255],
        )
    except InsufficientStockError as exc:
        raise DamageReportError(str(exc)) from exc

    report.status = DamageReport.STATUS_APPROVED
    report.reviewed_by = user
    report.reviewed_at = timezone.now()
    report.review_notes = notes or ""
    report.save(update_fields=["status", "reviewed_by", "reviewed_at", "review_notes"])

    logger.info("Damage report approved", extra={"report_id": str(report.id)})
    return report


@transaction.atomic
def reject_damage_report(*, report_id, user=None, notes: str = "") -> DamageReport:
    report = _lock_pending(report_id)

    report.status = DamageReport.STATUS_REJECTED
    report.reviewed_by = user
    report.reviewed_at = timezone.now()
    report.review_notes = notes or ""
    report.save(update_fields=["status", "reviewed_by", "reviewed_at", "review_notes"])

    logger.info("Damage report rejected", extra={"report_id": str(report.id)})
    return report
