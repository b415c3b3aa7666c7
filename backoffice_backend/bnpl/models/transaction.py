# bnpl/models/transaction.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class BnplTransaction(models.Model):
    """
    Credit extended on one BNPL sale.

    INVARIANTS (DB + clean()):
    - amount_paid + amount_due == original_amount
    - all amounts >= 0
    - status == paid  <=>  amount_due == 0

    Rows change only through bnpl.services.transactions.
    """

    STATUS_PENDING = "pending"
    STATUS_PARTIALLY_PAID = "partially_paid"
    STATUS_PAID = "paid"
    STATUS_OVERDUE = "overdue"

    STATUSES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PARTIALLY_PAID, "Partially Paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_OVERDUE, "Overdue"),
    ]

    OPEN_STATUSES = (STATUS_PENDING, STATUS_PARTIALLY_PAID, STATUS_OVERDUE)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.OneToOneField(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="bnpl_transaction",
    )
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="bnpl_transactions",
    )

    original_amount = models.DecimalField(max_digits=12, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount_due = models.DecimalField(max_digits=12, decimal_places=2)

    due_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date", "created_at"]
        indexes = [
            models.Index(fields=["customer", "status"], name="bnpl_bnplt_custome_0c6d11_idx"),
            models.Index(fields=["due_date"], name="bnpl_bnplt_due_dat_5a7e38_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(original_amount__gte=0) & Q(amount_paid__gte=0) & Q(amount_due__gte=0),
                name="chk_bnpl_amounts_non_negative",
            ),
            models.CheckConstraint(
                condition=(Q(status="paid") & Q(amount_due=0)) | (~Q(status="paid") & Q(amount_due__gt=0)),
                name="chk_bnpl_paid_iff_settled",
            ),
        ]

    def clean(self):
        paid = Decimal(self.amount_paid or 0)
        due = Decimal(self.amount_due or 0)
        original = Decimal(self.original_amount or 0)

        if paid < 0 or due < 0 or original < 0:
            raise ValidationError("BNPL amounts cannot be negative")
        if paid + due != original:
            raise ValidationError("amount_paid + amount_due must equal original_amount")
        if (self.status == self.STATUS_PAID) != (due == 0):
            raise ValidationError("status must be 'paid' exactly when nothing is due")

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def is_open(self) -> bool:
        return self.status != self.STATUS_PAID

    def __str__(self):
        return f"BNPL {self.sale_id} due {self.amount_due} ({self.status})"
