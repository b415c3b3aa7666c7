# store/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_POS_SELL, CAP_SETTINGS_MANAGE, HasCapability
from store.api.serializers import (
    LoyaltyRuleSerializer,
    SettingSerializer,
    SettingUpdateSerializer,
    StoreInfoSerializer,
)
from store.models import LoyaltyRule, Setting
from store.services.settings import (
    SettingError,
    get_store_info,
    get_tax_rate,
    set_setting,
    update_store_info,
)


class StoreInfoView(GenericAPIView):
    """
    GET: any staff (receipt header data)
    PUT: settings.manage
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability_by_method = {"GET": CAP_POS_SELL, "PUT": CAP_SETTINGS_MANAGE}
    serializer_class = StoreInfoSerializer

    @extend_schema(tags=["store"], responses=StoreInfoSerializer)
    def get(self, request):
        data = StoreInfoSerializer(get_store_info()).data
        data["tax_rate"] = str(get_tax_rate())
        return Response(data, status=status.HTTP_200_OK)

    @extend_schema(tags=["store"], request=StoreInfoSerializer, responses=StoreInfoSerializer)
    def put(self, request):
        s = self.get_serializer(get_store_info(), data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        info = update_store_info(**s.validated_data)
        return Response(StoreInfoSerializer(info).data, status=status.HTTP_200_OK)


class SettingListView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTINGS_MANAGE
    serializer_class = SettingSerializer

    @extend_schema(tags=["store"], responses=SettingSerializer(many=True))
    def get(self, request):
        qs = Setting.objects.order_by("key")
        return Response(SettingSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class SettingDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTINGS_MANAGE
    serializer_class = SettingUpdateSerializer

    @extend_schema(tags=["store"], responses=SettingSerializer)
    def get(self, request, key):
        row = Setting.objects.filter(key=key).first()
        if row is None:
            return Response({"detail": "Setting not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(SettingSerializer(row).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["store"], request=SettingUpdateSerializer, responses=SettingSerializer)
    def put(self, request, key):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            row = set_setting(key=key, value=data["value"], description=data.get("description", ""))
        except SettingError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SettingSerializer(row).data, status=status.HTTP_200_OK)


class LoyaltyRuleViewSet(viewsets.ModelViewSet):
    queryset = LoyaltyRule.objects.all()
    serializer_class = LoyaltyRuleSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTINGS_MANAGE
    filterset_fields = ["is_active"]
