"""Category and product API tests."""
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import Role, User
from accounts.tokens import issue_token
from stores.models import Store

from . import services
from .models import Category, Product

PASSWORD = "s3cret-pass!"


class OwnerProductFlowTestCase(TestCase):
    """Register, log in, build a catalog, then try the same as a customer."""

    def setUp(self):
        self.client = APIClient()

    def _login(self, email):
        r = self.client.post("/api/auth/login/", {"email": email, "password": PASSWORD}, format="json")
        self.assertEqual(r.status_code, 200)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.json()['token']}")

    def test_owner_builds_catalog_customer_is_denied(self):
        r = self.client.post(
            "/api/auth/register-owner/",
            {"email": "owner@x.com", "password": PASSWORD, "domain": "shop1"},
            format="json",
        )
        self.assertEqual(r.status_code, 201)
        store_id = r.json()["store"]["id"]

        self._login("owner@x.com")
        r = self.client.post(
            f"/api/stores/{store_id}/categories/", {"name": "Tea", "slug": "tea"}, format="json"
        )
        self.assertEqual(r.status_code, 201)
        category = r.json()

        payload = {
            "category_id": category["id"],
            "name": "Green tea",
            "slug": "green-tea",
            "price": "4.50",
            "attributes": {"origin": "Japan"},
            "images": ["https://cdn.example.com/green.png"],
        }
        r = self.client.post(f"/api/stores/{store_id}/products/", payload, format="json")
        self.assertEqual(r.status_code, 201)
        product = r.json()
        self.assertEqual(product["store_id"], category["store_id"])
        self.assertEqual(product["store_id"], store_id)

        self.client.credentials()
        self.client.post(
            "/api/auth/register/", {"email": "customer@x.com", "password": PASSWORD}, format="json"
        )
        self._login("customer@x.com")
        payload["slug"] = "green-tea-2"
        r = self.client.post(f"/api/stores/{store_id}/products/", payload, format="json")
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["code"], "FORBIDDEN")
        self.assertEqual(Product.objects.count(), 1)


class CatalogTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.owner = User.objects.create_user(email="owner@x.com", password=PASSWORD, role=Role.OWNER)
        self.store = Store.objects.create(owner=self.owner, domain="shop")
        self.other_owner = User.objects.create_user(email="other@x.com", password=PASSWORD, role=Role.OWNER)
        self.other_store = Store.objects.create(owner=self.other_owner, domain="other")
        self.customer = User.objects.create_user(email="c@x.com", password=PASSWORD)

        self.tea = Category.objects.create(store=self.store, name="Tea", slug="tea")
        self.cups = Category.objects.create(store=self.store, name="Cups", slug="cups")
        self.green = Product.objects.create(
            store=self.store, category=self.tea, name="Green tea", slug="green-tea", price=Decimal("4.50")
        )
        self.black = Product.objects.create(
            store=self.store,
            category=self.tea,
            name="Black tea",
            slug="black-tea",
            price=Decimal("12.00"),
            is_visible=False,
        )
        self.mug = Product.objects.create(
            store=self.store, category=self.cups, name="Mug", slug="mug", price=Decimal("8.00")
        )

    def _as(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")

    def _url(self, path, store=None):
        return f"/api/stores/{(store or self.store).pk}/{path}"

    def test_delete_category_with_products_is_rejected(self):
        self._as(self.owner)
        r = self.client.delete(self._url(f"categories/{self.tea.pk}/"))
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["code"], "RESOURCE_IN_USE")
        self.assertTrue(Category.objects.filter(pk=self.tea.pk).exists())
        self.green.refresh_from_db()
        self.assertEqual(self.green.category_id, self.tea.pk)
        self.assertEqual(Product.objects.filter(category=self.tea).count(), 2)

    def test_delete_empty_category(self):
        empty = Category.objects.create(store=self.store, name="Misc", slug="misc")
        self._as(self.owner)
        self.assertEqual(self.client.delete(self._url(f"categories/{empty.pk}/")).status_code, 204)
        self.assertFalse(Category.objects.filter(pk=empty.pk).exists())

    def test_category_slug_unique_per_store(self):
        self._as(self.owner)
        r = self.client.post(self._url("categories/"), {"name": "Tea 2", "slug": "TEA"}, format="json")
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["code"], "ALREADY_EXISTS")

        self._as(self.other_owner)
        r = self.client.post(
            self._url("categories/", self.other_store), {"name": "Tea", "slug": "tea"}, format="json"
        )
        self.assertEqual(r.status_code, 201)

    def test_product_slug_unique_per_store(self):
        self._as(self.owner)
        r = self.client.post(
            self._url("products/"),
            {"category_id": self.cups.pk, "name": "Mug 2", "slug": "mug", "price": "1.00"},
            format="json",
        )
        self.assertEqual(r.status_code, 409)

    def test_product_category_must_belong_to_url_store(self):
        foreign = Category.objects.create(store=self.other_store, name="Foreign", slug="foreign")
        self._as(self.owner)
        r = self.client.post(
            self._url("products/"),
            {"category_id": foreign.pk, "name": "X", "slug": "x", "price": "1.00"},
            format="json",
        )
        self.assertEqual(r.status_code, 400)
        self.assertFalse(Product.objects.filter(slug="x").exists())

    def test_negative_price_rejected(self):
        self._as(self.owner)
        r = self.client.post(
            self._url("products/"),
            {"category_id": self.tea.pk, "name": "X", "slug": "x", "price": "-1.00"},
            format="json",
        )
        self.assertEqual(r.status_code, 400)
        self.assertIn("price", r.json()["field_errors"])

    def test_model_rejects_cross_store_category(self):
        foreign = Category.objects.create(store=self.other_store, name="Foreign", slug="foreign")
        product = Product(store=self.store, category=foreign, name="X", slug="x", price=Decimal("1"))
        with self.assertRaises(ValidationError):
            product.save()
        self.assertFalse(Product.objects.filter(slug="x").exists())

    def test_service_rejects_negative_price(self):
        with self.assertRaises(ValidationError):
            services.create_product(
                self.owner, self.store.pk, category_id=self.tea.pk, name="X", slug="x", price=Decimal("-5")
            )
        self.assertFalse(Product.objects.filter(slug="x").exists())

        with self.assertRaises(ValidationError):
            services.update_product(self.owner, self.store.pk, self.mug.pk, price=Decimal("-0.01"))
        self.mug.refresh_from_db()
        self.assertEqual(self.mug.price, Decimal("8.00"))

    def test_database_rejects_negative_price(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Product.objects.filter(pk=self.mug.pk).update(price=Decimal("-1"))
        self.mug.refresh_from_db()
        self.assertEqual(self.mug.price, Decimal("8.00"))

    def test_move_product_between_categories(self):
        self._as(self.owner)
        r = self.client.patch(
            self._url(f"products/{self.green.pk}/"), {"category_id": self.cups.pk}, format="json"
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["category_id"], self.cups.pk)
        self.assertEqual(r.json()["store_id"], self.store.pk)

    def test_visibility_toggle(self):
        self._as(self.owner)
        r = self.client.patch(
            self._url(f"products/{self.green.pk}/visibility/"), {"is_visible": False}, format="json"
        )
        self.assertEqual(r.status_code, 200)
        self.green.refresh_from_db()
        self.assertFalse(self.green.is_visible)

    def test_product_filters(self):
        def names(params):
            r = self.client.get(self._url("products/"), params)
            self.assertEqual(r.status_code, 200)
            return sorted(p["name"] for p in r.json()["results"])

        self.assertEqual(names({}), ["Black tea", "Green tea", "Mug"])
        self.assertEqual(names({"category": self.tea.pk}), ["Black tea", "Green tea"])
        self.assertEqual(names({"is_visible": "true"}), ["Green tea", "Mug"])
        self.assertEqual(names({"search": "TEA"}), ["Black tea", "Green tea"])
        self.assertEqual(names({"min_price": "5", "max_price": "10"}), ["Mug"])

    def test_slug_lookups(self):
        r = self.client.get(self._url("products/slug/Green-Tea/"))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["id"], self.green.pk)
        self.assertEqual(self.client.get(self._url("categories/slug/cups/")).json()["id"], self.cups.pk)
        self.assertEqual(
            self.client.get(self._url("products/slug-exists/"), {"slug": "mug"}).json(), {"exists": True}
        )
        self.assertEqual(
            self.client.get(self._url("categories/slug-exists/"), {"slug": "mugs"}).json(),
            {"exists": False},
        )

    def test_products_are_scoped_to_url_store(self):
        r = self.client.get(self._url(f"products/{self.green.pk}/", self.other_store))
        self.assertEqual(r.status_code, 404)
        self.assertEqual(self.client.get(self._url("products/", self.other_store)).json()["count"], 0)

    def test_catalog_of_missing_store(self):
        r = self.client.get("/api/stores/999999/products/")
        self.assertEqual(r.status_code, 404)

    def test_employee_manages_workplace_catalog_only(self):
        employee = User.objects.create_user(
            email="e@x.com", password=PASSWORD, role=Role.EMPLOYEE, employed_at=self.store
        )
        self._as(employee)
        r = self.client.post(self._url("categories/"), {"name": "Pots", "slug": "pots"}, format="json")
        self.assertEqual(r.status_code, 201)
        r = self.client.post(
            self._url("categories/", self.other_store), {"name": "Pots", "slug": "pots"}, format="json"
        )
        self.assertEqual(r.status_code, 403)

    def test_denials_are_uniform_across_resource_kinds(self):
        self._as(self.customer)
        responses = [
            self.client.post(self._url("categories/"), {"name": "A", "slug": "a"}, format="json"),
            self.client.delete(self._url(f"products/{self.mug.pk}/")),
            self.client.delete(self._url("products/999999/")),
            self.client.patch(f"/api/stores/{self.store.pk}/", {"name": "Mine"}, format="json"),
        ]
        bodies = [r.json() for r in responses]
        self.assertEqual({r.status_code for r in responses}, {403})
        self.assertEqual({b["code"] for b in bodies}, {"FORBIDDEN"})
        self.assertEqual(len({b["message"] for b in bodies}), 1)
        self.assertTrue(Product.objects.filter(pk=self.mug.pk).exists())

    def test_admin_manages_any_catalog(self):
        admin = User.objects.create_user(email="admin@x.com", password=PASSWORD, role=Role.ADMIN)
        self._as(admin)
        r = self.client.delete(self._url(f"products/{self.mug.pk}/"))
        self.assertEqual(r.status_code, 204)
        self.assertEqual(self.client.delete(self._url("products/999999/")).status_code, 404)

    def test_anonymous_reads_but_cannot_write(self):
        self.assertEqual(self.client.get(self._url("categories/")).status_code, 200)
        self.assertEqual(self.client.get(self._url(f"products/{self.mug.pk}/")).status_code, 200)
        r = self.client.post(self._url("categories/"), {"name": "A", "slug": "a"}, format="json")
        self.assertEqual(r.status_code, 401)
