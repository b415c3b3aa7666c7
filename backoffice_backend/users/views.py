# users/views.py

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_SETTINGS_MANAGE, HasCapability
from users.serializers import StaffCreateSerializer, UserSerializer

User = get_user_model()


class MeView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer

    @extend_schema(
        tags=["auth"],
        responses={200: UserSerializer},
        description="Get current authenticated user profile",
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)


class StaffListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTINGS_MANAGE
    serializer_class = StaffCreateSerializer

    @extend_schema(tags=["auth"], responses=UserSerializer(many=True))
    def get(self, request):
        qs = User.objects.order_by("email")
        return Response(UserSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["auth"],
        request=StaffCreateSerializer,
        responses={201: UserSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = s.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
