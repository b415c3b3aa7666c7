# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    A completed POS transaction.

    GUARANTEES:
    - Financial fields are frozen once the row exists
    - Stock moves only through products.services.inventory
    - payment_status / return_status / receipt flags are the only
      fields that change after creation
    """

    PAYMENT_CASH = "cash"
    PAYMENT_CARD = "card"
    PAYMENT_BNPL = "bnpl"
    PAYMENT_JAZZCASH = "jazzcash"
    PAYMENT_EASYPAISA = "easypaisa"
    PAYMENT_SADAPAY = "sadapay"
    PAYMENT_NAYAPAY = "nayapay"
    PAYMENT_BANK_TRANSFER = "bank_transfer"
    PAYMENT_STORE_CREDIT = "store_credit"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_CARD, "Card"),
        (PAYMENT_BNPL, "Buy Now Pay Later"),
        (PAYMENT_JAZZCASH, "JazzCash"),
        (PAYMENT_EASYPAISA, "EasyPaisa"),
        (PAYMENT_SADAPAY, "SadaPay"),
        (PAYMENT_NAYAPAY, "NayaPay"),
        (PAYMENT_BANK_TRANSFER, "Bank Transfer"),
        (PAYMENT_STORE_CREDIT, "Store Credit"),
    ]

    DIGITAL_METHODS = {
        PAYMENT_JAZZCASH,
        PAYMENT_EASYPAISA,
        PAYMENT_SADAPAY,
        PAYMENT_NAYAPAY,
        PAYMENT_BANK_TRANSFER,
    }

    PAYMENT_STATUS_PAID = "paid"
    PAYMENT_STATUS_PARTIALLY_PAID = "partially_paid"
    PAYMENT_STATUS_PENDING = "pending"

    PAYMENT_STATUSES = [
        (PAYMENT_STATUS_PAID, "Paid"),
        (PAYMENT_STATUS_PARTIALLY_PAID, "Partially Paid"),
        (PAYMENT_STATUS_PENDING, "Pending"),
    ]

    RETURN_NONE = "none"
    RETURN_PARTIAL = "partially_returned"
    RETURN_FULL = "fully_returned"

    RETURN_STATUSES = [
        (RETURN_NONE, "None"),
        (RETURN_PARTIAL, "Partially Returned"),
        (RETURN_FULL, "Fully Returned"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_number = models.CharField(max_length=64, unique=True)
    receipt_number = models.CharField(max_length=20, unique=True)

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )

    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Sum of line totals after item discounts",
    )
    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Cart-level discount applied to the subtotal",
    )
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    amount_tendered = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    change_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHODS, default=PAYMENT_CASH)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUSES, default=PAYMENT_STATUS_PAID)
    return_status = models.CharField(max_length=20, choices=RETURN_STATUSES, default=RETURN_NONE)

    loyalty_points_earned = models.PositiveIntegerField(default=0)

    cashier = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )
    cashier_name = models.CharField(max_length=255, blank=True, default="")

    receipt_printed = models.BooleanField(default=False)
    receipt_printed_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, default="")

    sale_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-sale_date"]
        indexes = [
            models.Index(fields=["sale_date"], name="sales_sale_sale_da_4f1b2c_idx"),
            models.Index(fields=["payment_method", "sale_date"], name="sales_sale_payment_8d3e41_idx"),
            models.Index(fields=["payment_status"], name="sales_sale_payment_a52c07_idx"),
            models.Index(fields=["customer", "sale_date"], name="sales_sale_custome_e6b913_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(subtotal__gte=0)
                & models.Q(discount_amount__gte=0)
                & models.Q(tax_amount__gte=0)
                & models.Q(total_amount__gte=0),
                name="chk_sale_amounts_non_negative",
            ),
        ]

    _IMMUTABLE_FIELDS = (
        "invoice_number",
        "receipt_number",
        "customer_id",
        "subtotal",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "payment_method",
        "sale_date",
    )

    def _validate_immutable(self, previous: "Sale"):
        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValidationError(f"Sale field '{field}' cannot be changed after creation.")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def is_bnpl(self) -> bool:
        return self.payment_method == self.PAYMENT_BNPL

    @property
    def payment_group(self) -> str:
        if self.payment_method in self.DIGITAL_METHODS:
            return "digital"
        return self.payment_method

    def __str__(self):
        return f"{self.receipt_number} | {self.total_amount}"
