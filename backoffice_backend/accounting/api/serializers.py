# accounting/api/serializers.py

from rest_framework import serializers

from accounting.models import CashLedgerEntry, Expense
from accounting.services.cash_ledger import MANUAL_ENTRY_TYPES


class ExpenseSerializer(serializers.ModelSerializer):
    created_by_email = serializers.EmailField(source="created_by.email", read_only=True, default=None)

    class Meta:
        model = Expense
        fields = [
            "id",
            "category",
            "description",
            "amount",
            "expense_date",
            "payment_method",
            "reference",
            "created_by_email",
            "created_at",
        ]
        read_only_fields = fields


class ExpenseCreateSerializer(serializers.Serializer):
    category = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    expense_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=Expense.PAYMENT_METHODS, default=Expense.PAYMENT_CASH)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True)


class CashLedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = CashLedgerEntry
        fields = [
            "id",
            "entry_type",
            "amount",
            "description",
            "reference_type",
            "reference_id",
            "created_at",
        ]
        read_only_fields = fields


class CashEntryCreateSerializer(serializers.Serializer):
    entry_type = serializers.ChoiceField(choices=sorted(MANUAL_ENTRY_TYPES))
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
