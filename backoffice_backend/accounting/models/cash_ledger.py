# accounting/models/cash_ledger.py

"""
CASH LEDGER (CASH DRAWER / TILL)

Append-only. amount is signed:
- positive: cash in (sale, bnpl_payment, in, opening)
- negative: cash out (expense, refund, out)

Balance at time T = SUM(amount WHERE created_at <= T).
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class CashLedgerEntry(models.Model):
    TYPE_SALE = "sale"
    TYPE_BNPL_PAYMENT = "bnpl_payment"
    TYPE_EXPENSE = "expense"
    TYPE_REFUND = "refund"
    TYPE_IN = "in"
    TYPE_OUT = "out"
    TYPE_OPENING = "opening"

    ENTRY_TYPES = [
        (TYPE_SALE, "Cash Sale"),
        (TYPE_BNPL_PAYMENT, "BNPL Payment"),
        (TYPE_EXPENSE, "Expense"),
        (TYPE_REFUND, "Refund"),
        (TYPE_IN, "Cash In"),
        (TYPE_OUT, "Cash Out"),
        (TYPE_OPENING, "Opening Balance"),
    ]

    INFLOW_TYPES = {TYPE_SALE, TYPE_BNPL_PAYMENT, TYPE_IN, TYPE_OPENING}
    OUTFLOW_TYPES = {TYPE_EXPENSE, TYPE_REFUND, TYPE_OUT}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    entry_type = models.CharField(max_length=20, choices=ENTRY_TYPES)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    description = models.CharField(max_length=255, blank=True, default="")

    reference_type = models.CharField(max_length=30, blank=True, default="")
    reference_id = models.CharField(max_length=64, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_ledger_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "Cash ledger entries"
        indexes = [
            models.Index(fields=["created_at"], name="accounting__created_5d2b71_idx"),
            models.Index(fields=["entry_type"], name="accounting__entry_t_9a4e23_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="accounting__referen_e17c48_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["entry_type", "reference_type", "reference_id"],
                condition=~models.Q(reference_id=""),
                name="uniq_cash_entry_per_reference",
            ),
        ]

    def clean(self):
        if self.amount is None or self.amount == 0:
            raise ValidationError("amount cannot be zero")
        if self.entry_type in self.INFLOW_TYPES and self.amount < 0:
            raise ValidationError(f"{self.entry_type} entries must be positive")
        if self.entry_type in self.OUTFLOW_TYPES and self.amount > 0:
            raise ValidationError(f"{self.entry_type} entries must be negative")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Cash ledger entries are immutable")
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Cash ledger entries cannot be deleted")

    def __str__(self):
        return f"{self.entry_type} {self.amount}"
