# bnpl/models/payment.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class BnplPayment(models.Model):
    """
    Immutable record of one repayment applied to one BNPL transaction.
    A multi-transaction customer payment produces one row per transaction.
    """

    METHOD_CASH = "cash"
    METHOD_CARD = "card"
    METHOD_JAZZCASH = "jazzcash"
    METHOD_EASYPAISA = "easypaisa"
    METHOD_SADAPAY = "sadapay"
    METHOD_NAYAPAY = "nayapay"
    METHOD_BANK_TRANSFER = "bank_transfer"

    METHODS = [
        (METHOD_CASH, "Cash"),
        (METHOD_CARD, "Card"),
        (METHOD_JAZZCASH, "JazzCash"),
        (METHOD_EASYPAISA, "EasyPaisa"),
        (METHOD_SADAPAY, "SadaPay"),
        (METHOD_NAYAPAY, "NayaPay"),
        (METHOD_BANK_TRANSFER, "Bank Transfer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    transaction = models.ForeignKey(
        "bnpl.BnplTransaction",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="bnpl_payments",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=METHODS, default=METHOD_CASH)

    confirmation_number = models.CharField(max_length=40, unique=True)
    receipt_number = models.CharField(max_length=40, unique=True)

    amount_due_after = models.DecimalField(max_digits=12, decimal_places=2)
    status_after = models.CharField(max_length=20)

    notes = models.TextField(blank=True, default="")

    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bnpl_payments_received",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer", "created_at"], name="bnpl_bnplp_custome_91f4a2_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="chk_bnpl_payment_amount_positive"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("BNPL payments are immutable")
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("BNPL payments cannot be deleted")

    def __str__(self):
        return f"{self.confirmation_number} {self.amount}"
