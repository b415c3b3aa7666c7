# store/models/loyalty_rule.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class LoyaltyRule(models.Model):
    """
    Points earned per currency unit spent, for purchases of at least
    min_purchase_amount. The most specific active rule (highest threshold
    that the purchase reaches) wins.
    """

    name = models.CharField(max_length=100)
    points_per_currency = models.DecimalField(max_digits=8, decimal_places=4, default=Decimal("1.0000"))
    min_purchase_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-min_purchase_amount", "name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(points_per_currency__gte=0) & Q(min_purchase_amount__gte=0),
                name="chk_loyalty_rule_non_negative",
            ),
        ]

    def clean(self):
        if self.points_per_currency is not None and self.points_per_currency < 0:
            raise ValidationError("points_per_currency cannot be negative")
        if self.min_purchase_amount is not None and self.min_purchase_amount < 0:
            raise ValidationError("min_purchase_amount cannot be negative")

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.points_per_currency}/unit from {self.min_purchase_amount})"
