"""URL configuration and startup import order."""
import os
import subprocess
import sys
from pathlib import Path

from django.test import SimpleTestCase
from django.urls import resolve
from rest_framework.settings import api_settings

from accounts.authentication import BearerTokenAuthentication
from catalog.views import ProductViewSet
from stores.views import StoreViewSet

ROOT_DIR = Path(__file__).resolve().parent.parent


class UrlConfTest(SimpleTestCase):
    def test_api_routes_resolve(self):
        self.assertIs(resolve("/api/stores/").func.cls, StoreViewSet)
        self.assertIs(resolve("/api/stores/3/products/").func.cls, ProductViewSet)
        self.assertEqual(resolve("/api/auth/login/").url_name, "login")

    def test_bearer_authentication_is_default(self):
        self.assertIn(BearerTokenAuthentication, api_settings.DEFAULT_AUTHENTICATION_CLASSES)

    def test_fresh_interpreter_loads_urlconf(self):
        script = (
            "import django; django.setup(); "
            "from django.urls import resolve; "
            "print(resolve('/api/stores/').func.cls.__name__)"
        )
        env = dict(os.environ, DJANGO_SETTINGS_MODULE="config.settings")
        result = subprocess.run(
            [sys.executable, "-c", script],
            cwd=ROOT_DIR,
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )
        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(result.stdout.strip(), "StoreViewSet")
