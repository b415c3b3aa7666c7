# products/models/profit_analysis.py

from decimal import Decimal

from django.db import models

from .product import Product


class ProfitAnalysis(models.Model):
    """
    Denormalized per-product margin snapshot, refreshed whenever cost,
    price or stock changes through the inventory services.
    """

    product = models.OneToOneField(Product, on_delete=models.CASCADE, related_name="profit_analysis")

    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    sale_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    stock_quantity = models.IntegerField(default=0)

    stock_value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    profit_per_unit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    profit_margin = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-profit_margin"]
        verbose_name_plural = "Profit analysis"

    def __str__(self):
        return f"{self.product_id}: {self.profit_margin}%"
