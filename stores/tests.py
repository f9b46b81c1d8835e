"""Store registration, uniqueness and tenant-management tests."""
from unittest import mock

from django.test import TestCase
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from accounts import services as account_services
from accounts.models import Role, User
from accounts.tokens import issue_token
from catalog.models import Category
from core.exceptions import AlreadyExists

from . import services
from .models import Store

PASSWORD = "s3cret-pass!"


def register_owner(client, email, domain):
    return client.post(
        "/api/auth/register-owner/",
        {"email": email, "password": PASSWORD, "domain": domain},
        format="json",
    )


class DomainUniquenessTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_domains_differing_by_case_and_space_conflict(self):
        first = register_owner(self.client, "a@x.com", "MyShop")
        second = register_owner(self.client, "b@x.com", " myshop ")
        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.json()["code"], "ALREADY_EXISTS")
        self.assertEqual(Store.objects.count(), 1)
        self.assertFalse(User.objects.filter(email="b@x.com").exists())

    def test_constraint_decides_when_precheck_passes(self):
        with mock.patch("stores.services.domain_exists", return_value=False):
            account_services.register_owner(email="a@x.com", password=PASSWORD, domain="MyShop")
            with self.assertRaises(AlreadyExists):
                account_services.register_owner(email="b@x.com", password=PASSWORD, domain=" myshop ")
        self.assertEqual(Store.objects.count(), 1)
        self.assertEqual(User.objects.count(), 1)

    def test_create_store_race_maps_to_conflict(self):
        owner = User.objects.create_user(email="a@x.com", password=PASSWORD, role=Role.OWNER)
        Store.objects.create(owner=owner, domain="myshop")
        customer = User.objects.create_user(email="c@x.com", password=PASSWORD)
        with mock.patch("stores.services.domain_exists", return_value=False):
            with self.assertRaises(AlreadyExists):
                services.create_store(customer, domain="MYSHOP")
        customer.refresh_from_db()
        self.assertEqual(customer.role, Role.CUSTOMER)

    def test_domain_stored_normalized(self):
        register_owner(self.client, "a@x.com", "  Shop-1 ")
        self.assertTrue(Store.objects.filter(domain="shop-1").exists())

    def test_domain_exists_endpoint(self):
        register_owner(self.client, "a@x.com", "shop1")
        self.assertEqual(
            self.client.get("/api/stores/domain-exists/", {"domain": " SHOP1"}).json(),
            {"exists": True},
        )
        self.assertEqual(
            self.client.get("/api/stores/domain-exists/", {"domain": "shop2"}).json(),
            {"exists": False},
        )

    def test_lookup_by_domain(self):
        register_owner(self.client, "a@x.com", "shop1")
        r = self.client.get("/api/stores/domain/SHOP1/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["domain"], "shop1")
        missing = self.client.get("/api/stores/domain/nowhere/")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["code"], "NOT_FOUND")


class StoreCreationTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.customer = User.objects.create_user(email="c@x.com", password=PASSWORD)

    def _as(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")

    def test_creating_store_promotes_to_owner(self):
        self._as(self.customer)
        r = self.client.post("/api/stores/", {"domain": "corner", "name": "Corner"}, format="json")
        self.assertEqual(r.status_code, 201)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.role, Role.OWNER)
        self.assertEqual(r.json()["owner_id"], self.customer.pk)

    def test_one_store_per_owner(self):
        self._as(self.customer)
        self.client.post("/api/stores/", {"domain": "corner"}, format="json")
        r = self.client.post("/api/stores/", {"domain": "second"}, format="json")
        self.assertEqual(r.status_code, 409)
        self.assertEqual(Store.objects.count(), 1)

    def test_employee_creating_store_leaves_workplace(self):
        owner = User.objects.create_user(email="o@x.com", password=PASSWORD, role=Role.OWNER)
        workplace = Store.objects.create(owner=owner, domain="work")
        employee = User.objects.create_user(
            email="e@x.com", password=PASSWORD, role=Role.EMPLOYEE, employed_at=workplace
        )
        self._as(employee)
        self.assertEqual(self.client.post("/api/stores/", {"domain": "mine"}, format="json").status_code, 201)
        employee.refresh_from_db()
        self.assertEqual(employee.role, Role.OWNER)
        self.assertIsNone(employee.employed_at_id)

    def test_only_admin_creates_for_others(self):
        self._as(self.customer)
        other = User.objects.create_user(email="d@x.com", password=PASSWORD)
        r = self.client.post("/api/stores/", {"domain": "theirs", "owner_id": other.pk}, format="json")
        self.assertEqual(r.status_code, 403)

        admin = User.objects.create_user(email="admin@x.com", password=PASSWORD, role=Role.ADMIN)
        self._as(admin)
        r = self.client.post("/api/stores/", {"domain": "theirs", "owner_id": other.pk}, format="json")
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["owner_id"], other.pk)

    def test_anonymous_cannot_create(self):
        r = self.client.post("/api/stores/", {"domain": "corner"}, format="json")
        self.assertEqual(r.status_code, 401)


class StoreManagementTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        a = register_owner(self.client, "a@x.com", "shop-a").json()
        b = register_owner(self.client, "b@x.com", "shop-b").json()
        self.token_a, self.store_a = a["token"], a["store"]["id"]
        self.token_b, self.store_b = b["token"], b["store"]["id"]

    def _bearer(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def test_owner_cannot_delete_another_owners_store(self):
        self._bearer(self.token_a)
        r = self.client.delete(f"/api/stores/{self.store_b}/")
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["code"], "FORBIDDEN")
        self.assertTrue(Store.objects.filter(pk=self.store_b).exists())

    def test_denial_does_not_reveal_missing_store(self):
        self._bearer(self.token_a)
        self.assertEqual(self.client.delete("/api/stores/999999/").json()["code"], "FORBIDDEN")

    def test_owner_deletes_own_empty_store(self):
        self._bearer(self.token_a)
        self.assertEqual(self.client.delete(f"/api/stores/{self.store_a}/").status_code, 204)
        self.assertFalse(Store.objects.filter(pk=self.store_a).exists())
        self.assertEqual(User.objects.get(email="a@x.com").role, Role.CUSTOMER)

    def test_store_with_categories_cannot_be_deleted(self):
        Category.objects.create(store_id=self.store_a, name="Tea", slug="tea")
        self._bearer(self.token_a)
        r = self.client.delete(f"/api/stores/{self.store_a}/")
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["code"], "RESOURCE_IN_USE")
        self.assertTrue(Store.objects.filter(pk=self.store_a).exists())

    def test_admin_deletes_any_store(self):
        admin = User.objects.create_user(email="admin@x.com", password=PASSWORD, role=Role.ADMIN)
        self._bearer(issue_token(admin))
        self.assertEqual(self.client.delete(f"/api/stores/{self.store_b}/").status_code, 204)
        self.assertEqual(self.client.delete("/api/stores/999999/").status_code, 404)

    def test_employee_cannot_manage_store_record(self):
        employee = User.objects.create_user(
            email="e@x.com", password=PASSWORD, role=Role.EMPLOYEE, employed_at_id=self.store_a
        )
        self._bearer(issue_token(employee))
        self.assertEqual(
            self.client.patch(f"/api/stores/{self.store_a}/", {"name": "Mine"}, format="json").status_code,
            403,
        )
        self.assertEqual(self.client.delete(f"/api/stores/{self.store_a}/").status_code, 403)

    def test_update_store(self):
        self._bearer(self.token_a)
        r = self.client.patch(
            f"/api/stores/{self.store_a}/", {"name": "Shop A", "domain": "Shop-A2"}, format="json"
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["domain"], "shop-a2")

    def test_update_to_taken_domain(self):
        self._bearer(self.token_a)
        r = self.client.patch(f"/api/stores/{self.store_a}/", {"domain": "SHOP-B"}, format="json")
        self.assertEqual(r.status_code, 409)

    def test_blank_name_is_rejected(self):
        self._bearer(self.token_a)
        r = self.client.patch(f"/api/stores/{self.store_a}/", {"name": "  "}, format="json")
        self.assertEqual(r.status_code, 400)
        self.assertIn("name", r.json()["field_errors"])
        self.assertEqual(Store.objects.get(pk=self.store_a).name, "shop-a")

        owner = User.objects.get(email="a@x.com")
        with self.assertRaises(ValidationError):
            services.update_store(owner, self.store_a, name="")
        store = services.update_store(owner, self.store_a, name=" Corner ")
        self.assertEqual(store.name, "Corner")
        self.assertEqual(Store.objects.with_domain(" SHOP-A ").get().name, "Corner")

    def test_theme_settings(self):
        self._bearer(self.token_a)
        theme = {"primary": "#003366", "layout": {"columns": 3}}
        r = self.client.put(f"/api/stores/{self.store_a}/theme/", {"theme_settings": theme}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(Store.objects.get(pk=self.store_a).theme_settings, theme)

        r = self.client.put(f"/api/stores/{self.store_b}/theme/", {"theme_settings": theme}, format="json")
        self.assertEqual(r.status_code, 403)

    def test_stores_are_publicly_listed(self):
        self.client.credentials()
        r = self.client.get("/api/stores/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["count"], 2)
        self.assertEqual(self.client.get(f"/api/stores/{self.store_a}/").status_code, 200)
