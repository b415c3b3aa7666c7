# bnpl/api/serializers.py

from rest_framework import serializers

from bnpl.models import BnplPayment, BnplTransaction


class BnplPaymentSerializer(serializers.ModelSerializer):
    transaction_id = serializers.UUIDField(read_only=True)
    customer_id = serializers.UUIDField(read_only=True)
    received_by_email = serializers.EmailField(source="received_by.email", read_only=True, default=None)

    class Meta:
        model = BnplPayment
        fields = [
            "id",
            "transaction_id",
            "customer_id",
            "amount",
            "payment_method",
            "confirmation_number",
            "receipt_number",
            "amount_due_after",
            "status_after",
            "notes",
            "received_by_email",
            "created_at",
        ]
        read_only_fields = fields


class BnplTransactionSerializer(serializers.ModelSerializer):
    sale_id = serializers.UUIDField(read_only=True)
    customer_id = serializers.UUIDField(read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    customer_phone = serializers.CharField(source="customer.phone", read_only=True)
    receipt_number = serializers.CharField(source="sale.receipt_number", read_only=True)
    invoice_number = serializers.CharField(source="sale.invoice_number", read_only=True)

    class Meta:
        model = BnplTransaction
        fields = [
            "id",
            "sale_id",
            "receipt_number",
            "invoice_number",
            "customer_id",
            "customer_name",
            "customer_phone",
            "original_amount",
            "amount_paid",
            "amount_due",
            "due_date",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BnplTransactionDetailSerializer(BnplTransactionSerializer):
    payments = BnplPaymentSerializer(many=True, read_only=True)

    class Meta(BnplTransactionSerializer.Meta):
        fields = [*BnplTransactionSerializer.Meta.fields, "payments"]
        read_only_fields = fields


class BnplPaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(choices=BnplPayment.METHODS, default=BnplPayment.METHOD_CASH)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CustomerPaymentInputSerializer(BnplPaymentInputSerializer):
    """
    transaction_ids omitted: every open transaction of the customer.
    """

    transaction_ids = serializers.ListField(child=serializers.UUIDField(), required=False, allow_empty=False)


class MarkOverdueInputSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
