"""
Catalog endpoints nested under /api/stores/{store_id}/.

Reads are public. Writes need the caller to be staff of the store in the URL;
that check runs before any lookup.
"""
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.principals import current_principal
from core.permissions import CanManageStoreOrReadOnly

from . import services
from .filters import ProductFilter
from .serializers import (
    CategorySerializer,
    CategoryWriteSerializer,
    ProductSerializer,
    ProductWriteSerializer,
    SlugQuerySerializer,
    VisibilitySerializer,
)


class StoreScopedViewSet(viewsets.ModelViewSet):
    """Base for resources living inside one store (store_id comes from the URL)."""

    permission_classes = [CanManageStoreOrReadOnly]
    lookup_value_regex = r"\d+"

    @property
    def store_id(self):
        return self.kwargs["store_id"]

    def _slug_param(self, request):
        serializer = SlugQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data["slug"]


class CategoryViewSet(StoreScopedViewSet):
    serializer_class = CategorySerializer

    def get_queryset(self):
        return services.list_categories(self.store_id)

    def retrieve(self, request, *args, **kwargs):
        category = services.get_category(self.store_id, kwargs["pk"])
        return Response(CategorySerializer(category).data)

    def create(self, request, *args, **kwargs):
        serializer = CategoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = services.create_category(
            current_principal(request), self.store_id, **serializer.validated_data
        )
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = CategoryWriteSerializer(data=request.data, partial=kwargs.get("partial", False))
        serializer.is_valid(raise_exception=True)
        category = services.update_category(
            current_principal(request), self.store_id, kwargs["pk"], **serializer.validated_data
        )
        return Response(CategorySerializer(category).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_category(current_principal(request), self.store_id, kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[^/]+)")
    def by_slug(self, request, store_id=None, slug=None):
        category = services.get_category_by_slug(self.store_id, slug)
        return Response(CategorySerializer(category).data)

    @action(detail=False, methods=["get"], url_path="slug-exists")
    def slug_exists(self, request, store_id=None):
        exists = services.category_slug_exists(self.store_id, self._slug_param(request))
        return Response({"exists": exists})


class ProductViewSet(StoreScopedViewSet):
    """
    GET /api/stores/{store_id}/products/?category=&is_visible=&search=&min_price=&max_price=
    """

    serializer_class = ProductSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = ProductFilter

    def get_queryset(self):
        return services.list_products(self.store_id)

    def retrieve(self, request, *args, **kwargs):
        product = services.get_product(self.store_id, kwargs["pk"])
        return Response(ProductSerializer(product).data)

    def create(self, request, *args, **kwargs):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = services.create_product(
            current_principal(request), self.store_id, **serializer.validated_data
        )
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = ProductWriteSerializer(data=request.data, partial=kwargs.get("partial", False))
        serializer.is_valid(raise_exception=True)
        product = services.update_product(
            current_principal(request), self.store_id, kwargs["pk"], **serializer.validated_data
        )
        return Response(ProductSerializer(product).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_product(current_principal(request), self.store_id, kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"], url_path="visibility")
    def visibility(self, request, store_id=None, pk=None):
        """PATCH /api/stores/{store_id}/products/{id}/visibility/ - show or hide."""
        serializer = VisibilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = services.set_visibility(
            current_principal(request), self.store_id, pk, serializer.validated_data["is_visible"]
        )
        return Response(ProductSerializer(product).data)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[^/]+)")
    def by_slug(self, request, store_id=None, slug=None):
        product = services.get_product_by_slug(self.store_id, slug)
        return Response(ProductSerializer(product).data)

    @action(detail=False, methods=["get"], url_path="slug-exists")
    def slug_exists(self, request, store_id=None):
        exists = services.product_slug_exists(self.store_id, self._slug_param(request))
        return Response({"exists": exists})
