# customers/api/serializers.py

from decimal import Decimal

from rest_framework import serializers

from customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    """
    Balances are owned by the credit / BNPL / returns services and are
    read-only here. credit_limit is the only money field staff edit.
    """

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "phone",
            "email",
            "address",
            "credit_limit",
            "current_balance",
            "available_credit",
            "total_outstanding_dues",
            "store_credit",
            "loyalty_points",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = (
            "id",
            "current_balance",
            "available_credit",
            "total_outstanding_dues",
            "store_credit",
            "loyalty_points",
            "created_at",
            "updated_at",
        )

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_credit_limit(self, value):
        if value < Decimal("0.00"):
            raise serializers.ValidationError("credit_limit cannot be negative")
        return value

    def validate(self, attrs):
        limit = attrs.get("credit_limit")
        if self.instance is not None and limit is not None and limit < self.instance.current_balance:
            raise serializers.ValidationError(
                {"credit_limit": "credit_limit cannot be below the customer's current balance"}
            )
        return attrs


class CreditCheckInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
