# store/api/serializers.py

from rest_framework import serializers

from store.models import LoyaltyRule, Setting, StoreInfo


class StoreInfoSerializer(serializers.ModelSerializer):
    class Meta:
        model = StoreInfo
        fields = [
            "name",
            "address",
            "phone",
            "email",
            "tax_number",
            "receipt_footer",
            "updated_at",
        ]
        read_only_fields = ("updated_at",)


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ["key", "value", "description", "updated_at"]
        read_only_fields = ("updated_at",)


class SettingUpdateSerializer(serializers.Serializer):
    value = serializers.CharField(allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class LoyaltyRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyRule
        fields = "__all__"
        read_only_fields = ("id", "created_at")
