# returns/models/refund_transaction.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class RefundTransaction(models.Model):
    """
    Money leg of a return. Exactly one per Return.
    reference: ledger entry id (cash / bank transfer) or the customer id
    credited (store credit / exchange).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    return_record = models.OneToOneField(
        "returns.Return",
        on_delete=models.PROTECT,
        related_name="refund",
    )
    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="refund_transactions",
    )
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="refund_transactions",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    refund_method = models.CharField(max_length=20)
    reference = models.CharField(max_length=64, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="chk_refund_amount_positive"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Refund transactions are immutable")
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Refund transactions cannot be deleted")

    def __str__(self):
        return f"Refund {self.amount} ({self.refund_method})"
