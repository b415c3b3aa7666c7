# customers/models/customer.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Customer(models.Model):
    """
    Customer with a store credit line.

    CREDIT MODEL:
    - current_balance: what the customer currently owes on credit (BNPL)
    - total_outstanding_dues: unpaid BNPL amounts (mirrors open BNPL rows)
    - available_credit = credit_limit - current_balance (derived on save)
    - store_credit: refund value the customer can spend on a later sale

    Balances only move through customers.services / bnpl.services / returns.services.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    phone = models.CharField(max_length=50, blank=True, db_index=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)

    credit_limit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    current_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    available_credit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_outstanding_dues = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    store_credit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    loyalty_points = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="customers_c_name_a1c2d3_idx"),
            models.Index(fields=["phone"], name="customers_c_phone_b4e5f6_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(credit_limit__gte=0)
                & Q(current_balance__gte=0)
                & Q(total_outstanding_dues__gte=0)
                & Q(store_credit__gte=0),
                name="chk_customer_balances_non_negative",
            ),
        ]

    def clean(self):
        if self.credit_limit is not None and self.credit_limit < 0:
            raise ValidationError("credit_limit cannot be negative")
        if self.current_balance is not None and self.current_balance < 0:
            raise ValidationError("current_balance cannot be negative")
        if self.total_outstanding_dues is not None and self.total_outstanding_dues < 0:
            raise ValidationError("total_outstanding_dues cannot be negative")
        if self.store_credit is not None and self.store_credit < 0:
            raise ValidationError("store_credit cannot be negative")

    def save(self, *args, **kwargs):
        self.available_credit = Decimal(self.credit_limit or 0) - Decimal(self.current_balance or 0)

        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "available_credit" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "available_credit"]

        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.phone})" if self.phone else self.name
