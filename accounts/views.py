from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsAdmin
from stores.serializers import StoreSerializer

from . import services
from .principals import current_principal
from .serializers import (
    EmailQuerySerializer,
    LoginSerializer,
    RegisterOwnerSerializer,
    RegisterSerializer,
    RoleChangeSerializer,
    UserSerializer,
    UserUpdateSerializer,
    auth_payload,
)


class RegisterView(APIView):
    """Register a new customer."""

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, token = services.register_customer(**serializer.validated_data)
        return Response(
            auth_payload(user, token, "Registration successful."),
            status=status.HTTP_201_CREATED,
        )


class RegisterOwnerView(APIView):
    """Register a store owner together with the store."""

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterOwnerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, store, token = services.register_owner(**serializer.validated_data)
        payload = auth_payload(user, token, "Store registration successful.")
        payload["store"] = StoreSerializer(store).data
        return Response(payload, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """Exchange email and password for a bearer token."""

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, token = services.login(request=request, **serializer.validated_data)
        return Response(auth_payload(user, token, "Login successful."))


class MeView(APIView):
    """Current principal, re-resolved on every request."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(current_principal(request)).data)


class EmailExistsView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = EmailQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return Response({"exists": services.email_exists(serializer.validated_data["email"])})


class UserViewSet(viewsets.GenericViewSet):
    """
    GET /api/users/ - ADMIN only.
    GET/PUT/PATCH/DELETE /api/users/{id}/ - the user themselves or ADMIN.
    PUT /api/users/{id}/role/ - ADMIN only.
    """

    serializer_class = UserSerializer
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        if self.action in ("list", "role"):
            return [IsAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        return services.list_users(current_principal(self.request))

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(UserSerializer(page, many=True).data)

    def retrieve(self, request, pk=None):
        user = services.get_user_for(current_principal(request), pk)
        return Response(UserSerializer(user).data)

    def update(self, request, pk=None, partial=False):
        serializer = UserUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        user = services.update_profile(current_principal(request), pk, **serializer.validated_data)
        return Response(UserSerializer(user).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request, pk=None):
        services.delete_user(current_principal(request), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["put", "patch"], url_path="role")
    def role(self, request, pk=None):
        serializer = RoleChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.change_role(current_principal(request), pk, **serializer.validated_data)
        return Response(UserSerializer(user).data)
