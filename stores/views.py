"""Store endpoints. Reads are public; writes go through stores.services."""
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.principals import current_principal
from core.permissions import CanManageStore

from . import services
from .models import Store
from .serializers import (
    DomainQuerySerializer,
    StoreCreateSerializer,
    StoreSerializer,
    StoreUpdateSerializer,
    ThemeSettingsSerializer,
)


class StoreViewSet(viewsets.ModelViewSet):
    """
    GET /api/stores/ - list stores.
    POST /api/stores/ - create a store; the caller becomes its owner.
    GET/PUT/PATCH/DELETE /api/stores/{id}/ - ADMIN or the owner for writes.
    """

    queryset = Store.objects.select_related("owner")
    serializer_class = StoreSerializer
    lookup_value_regex = r"\d+"
    store_lookup_kwarg = "pk"

    def get_permissions(self):
        if self.action == "create":
            return [IsAuthenticated()]
        if self.action in ("list", "retrieve", "by_domain", "domain_exists"):
            return [AllowAny()]
        return [CanManageStore()]

    def create(self, request, *args, **kwargs):
        serializer = StoreCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = services.create_store(current_principal(request), **serializer.validated_data)
        return Response(StoreSerializer(store).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = StoreUpdateSerializer(data=request.data, partial=kwargs.get("partial", False))
        serializer.is_valid(raise_exception=True)
        store = services.update_store(
            current_principal(request), self.kwargs["pk"], **serializer.validated_data
        )
        return Response(StoreSerializer(store).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_store(current_principal(request), self.kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["put", "patch"], url_path="theme")
    def theme(self, request, pk=None):
        """PUT /api/stores/{id}/theme/ - replace theme settings."""
        serializer = ThemeSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = services.update_theme_settings(
            current_principal(request), pk, serializer.validated_data["theme_settings"]
        )
        return Response(StoreSerializer(store).data)

    @action(detail=False, methods=["get"], url_path=r"domain/(?P<domain>[^/]+)")
    def by_domain(self, request, domain=None):
        """GET /api/stores/domain/{domain}/ - storefront lookup."""
        store = services.get_store_by_domain(domain)
        return Response(StoreSerializer(store).data)

    @action(detail=False, methods=["get"], url_path="domain-exists")
    def domain_exists(self, request):
        """GET /api/stores/domain-exists/?domain=... - availability check."""
        serializer = DomainQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        exists = services.domain_exists(serializer.validated_data["domain"])
        return Response({"exists": exists})
