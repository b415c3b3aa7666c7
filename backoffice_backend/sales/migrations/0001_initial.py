import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


PAYMENT_METHOD_CHOICES = [
    ("cash", "Cash"),
    ("card", "Card"),
    ("bnpl", "Buy Now Pay Later"),
    ("jazzcash", "JazzCash"),
    ("easypaisa", "EasyPaisa"),
    ("sadapay", "SadaPay"),
    ("nayapay", "NayaPay"),
    ("bank_transfer", "Bank Transfer"),
    ("store_credit", "Store Credit"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("invoice_number", models.CharField(max_length=64, unique=True)),
                ("receipt_number", models.CharField(max_length=20, unique=True)),
                (
                    "subtotal",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Sum of line totals after item discounts",
                        max_digits=12,
                    ),
                ),
                (
                    "discount_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Cart-level discount applied to the subtotal",
                        max_digits=12,
                    ),
                ),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount_tendered", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("change_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("payment_method", models.CharField(choices=PAYMENT_METHOD_CHOICES, default="cash", max_length=20)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("paid", "Paid"), ("partially_paid", "Partially Paid"), ("pending", "Pending")],
                        default="paid",
                        max_length=20,
                    ),
                ),
                (
                    "return_status",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("partially_returned", "Partially Returned"),
                            ("fully_returned", "Fully Returned"),
                        ],
                        default="none",
                        max_length=20,
                    ),
                ),
                ("loyalty_points_earned", models.PositiveIntegerField(default=0)),
                ("cashier_name", models.CharField(blank=True, default="", max_length=255)),
                ("receipt_printed", models.BooleanField(default=False)),
                ("receipt_printed_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("sale_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "cashier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to="customers.customer",
                    ),
                ),
            ],
            options={
                "ordering": ["-sale_date"],
                "indexes": [
                    models.Index(fields=["sale_date"], name="sales_sale_sale_da_4f1b2c_idx"),
                    models.Index(fields=["payment_method", "sale_date"], name="sales_sale_payment_8d3e41_idx"),
                    models.Index(fields=["payment_status"], name="sales_sale_payment_a52c07_idx"),
                    models.Index(fields=["customer", "sale_date"], name="sales_sale_custome_e6b913_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("subtotal__gte", 0),
                            ("discount_amount__gte", 0),
                            ("tax_amount__gte", 0),
                            ("total_amount__gte", 0),
                        ),
                        name="chk_sale_amounts_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("product_name", models.CharField(blank=True, default="", max_length=255)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("returned_quantity", models.PositiveIntegerField(default=0)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_items",
                        to="products.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="chk_sale_item_quantity_positive"),
                    models.CheckConstraint(
                        condition=models.Q(("returned_quantity__lte", models.F("quantity"))),
                        name="chk_sale_item_returned_lte_sold",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReceiptReprint",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("receipt_number", models.CharField(db_index=True, max_length=20)),
                ("authorization_code", models.CharField(max_length=64, unique=True)),
                ("reason", models.CharField(default="Customer request", max_length=255)),
                ("reprinted_by", models.CharField(max_length=255)),
                ("user_ip", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.TextField(blank=True, default="")),
                ("reprint_count", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "reprinted_by_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="receipt_reprints",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reprints",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="sales_recei_created_27c9d4_idx"),
                ],
            },
        ),
    ]
