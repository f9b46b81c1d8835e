"""URL configuration for stores app. Catalog routes nest under stores/<store_id>/."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import StoreViewSet

router = DefaultRouter()
router.register(r"", StoreViewSet, basename="store")

urlpatterns = [
    path("<int:store_id>/", include("catalog.urls")),
    path("", include(router.urls)),
]
