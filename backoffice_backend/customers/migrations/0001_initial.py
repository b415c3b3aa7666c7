import uuid
from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("phone", models.CharField(blank=True, db_index=True, max_length=50)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("address", models.TextField(blank=True)),
                ("credit_limit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("current_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("available_credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "total_outstanding_dues",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12),
                ),
                ("store_credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("loyalty_points", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="customers_c_name_a1c2d3_idx"),
                    models.Index(fields=["phone"], name="customers_c_phone_b4e5f6_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("credit_limit__gte", 0),
                            ("current_balance__gte", 0),
                            ("total_outstanding_dues__gte", 0),
                            ("store_credit__gte", 0),
                        ),
                        name="chk_customer_balances_non_negative",
                    ),
                ],
            },
        ),
    ]
