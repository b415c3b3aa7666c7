# accounting/models/expense.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Expense(models.Model):
    """
    Operating expense (rent, utilities, wages, ...).

    Cash expenses are mirrored in the cash ledger exactly once
    (see accounting.services.expense_service).
    """

    PAYMENT_CASH = "cash"
    PAYMENT_CARD = "card"
    PAYMENT_BANK = "bank_transfer"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_CARD, "Card"),
        (PAYMENT_BANK, "Bank Transfer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.CharField(max_length=100, db_index=True)
    description = models.CharField(max_length=255)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    expense_date = models.DateField(default=timezone.localdate)

    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHODS, default=PAYMENT_CASH)
    reference = models.CharField(max_length=100, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expenses",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-expense_date", "-created_at"]
        indexes = [
            models.Index(fields=["expense_date"], name="accounting__expense_3c1f0a_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name="chk_expense_amount_positive"),
        ]

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Expense {self.category} - {self.amount} ({self.expense_date})"
