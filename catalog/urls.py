"""Catalog routes; included by stores.urls under <int:store_id>/."""
from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CategoryViewSet, ProductViewSet

router = SimpleRouter()
router.register(r"categories", CategoryViewSet, basename="store-category")
router.register(r"products", ProductViewSet, basename="store-product")

urlpatterns = [
    path("", include(router.urls)),
]
