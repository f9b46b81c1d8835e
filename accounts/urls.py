from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import (
    EmailExistsView,
    LoginView,
    MeView,
    RegisterOwnerView,
    RegisterView,
    UserViewSet,
)

router = SimpleRouter()
router.register(r"users", UserViewSet, basename="user")

urlpatterns = [
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/register-owner/", RegisterOwnerView.as_view(), name="register-owner"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/me/", MeView.as_view(), name="me"),
    path("auth/email-exists/", EmailExistsView.as_view(), name="email-exists"),
    path("", include(router.urls)),
]
