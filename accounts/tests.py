"""Registration, login, token and user administration tests."""
from datetime import timedelta
from unittest import mock

from django.test import RequestFactory, TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.exceptions import NoActivePrincipal, PrincipalNotFound
from stores.models import Store

from .authentication import BOUND_PRINCIPAL_ATTR, BearerTokenAuthentication
from .models import Role, User
from .principals import current_principal, resolve
from .tokens import issue_token

PASSWORD = "s3cret-pass!"


class RegistrationAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_customer(self):
        r = self.client.post(
            "/api/auth/register/",
            {"email": " Alice@Example.com ", "password": PASSWORD, "full_name": "Alice"},
            format="json",
        )
        self.assertEqual(r.status_code, 201)
        data = r.json()
        self.assertTrue(data["token"])
        self.assertEqual(data["email"], "alice@example.com")
        self.assertEqual(data["role"], Role.CUSTOMER)
        self.assertIsNone(data["user"]["store_id"])

    def test_register_duplicate_email(self):
        User.objects.create_user(email="alice@example.com", password=PASSWORD)
        r = self.client.post(
            "/api/auth/register/",
            {"email": "ALICE@example.com", "password": PASSWORD},
            format="json",
        )
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["code"], "ALREADY_EXISTS")

    def test_register_validation_error_shape(self):
        r = self.client.post("/api/auth/register/", {"email": "nope"}, format="json")
        self.assertEqual(r.status_code, 400)
        body = r.json()
        self.assertEqual(body["code"], "VALIDATION_FAILED")
        self.assertIn("email", body["field_errors"])
        self.assertIn("password", body["field_errors"])
        self.assertIn("timestamp", body)

    def test_register_owner_creates_store(self):
        r = self.client.post(
            "/api/auth/register-owner/",
            {"email": "owner@example.com", "password": PASSWORD, "domain": " Shop1 "},
            format="json",
        )
        self.assertEqual(r.status_code, 201)
        data = r.json()
        self.assertEqual(data["role"], Role.OWNER)
        self.assertEqual(data["store"]["domain"], "shop1")
        self.assertEqual(data["user"]["store_id"], data["store"]["id"])

    def test_register_owner_invalid_domain(self):
        r = self.client.post(
            "/api/auth/register-owner/",
            {"email": "owner@example.com", "password": PASSWORD, "domain": "my shop"},
            format="json",
        )
        self.assertEqual(r.status_code, 400)
        self.assertIn("domain", r.json()["field_errors"])
        self.assertFalse(User.objects.filter(email="owner@example.com").exists())

    def test_email_exists(self):
        User.objects.create_user(email="alice@example.com", password=PASSWORD)
        r = self.client.get("/api/auth/email-exists/", {"email": "Alice@example.com"})
        self.assertEqual(r.json(), {"exists": True})
        r = self.client.get("/api/auth/email-exists/", {"email": "bob@example.com"})
        self.assertEqual(r.json(), {"exists": False})


class LoginAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="alice@example.com", password=PASSWORD, full_name="Alice"
        )

    def test_login_returns_token(self):
        r = self.client.post(
            "/api/auth/login/", {"email": "Alice@example.com", "password": PASSWORD}, format="json"
        )
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual(data["full_name"], "Alice")
        self.assertEqual(data["role"], Role.CUSTOMER)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")
        me = self.client.get("/api/auth/me/")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["email"], "alice@example.com")

    def test_unknown_email_and_wrong_password_look_the_same(self):
        wrong = self.client.post(
            "/api/auth/login/", {"email": "alice@example.com", "password": "wrong"}, format="json"
        )
        unknown = self.client.post(
            "/api/auth/login/", {"email": "nobody@example.com", "password": PASSWORD}, format="json"
        )
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.json()["code"], "INVALID_CREDENTIALS")
        self.assertEqual(wrong.json()["message"], unknown.json()["message"])
        self.assertEqual(wrong.json()["code"], unknown.json()["code"])

    def test_inactive_user_cannot_login(self):
        self.user.is_active = False
        self.user.save()
        r = self.client.post(
            "/api/auth/login/", {"email": "alice@example.com", "password": PASSWORD}, format="json"
        )
        self.assertEqual(r.status_code, 401)


class TokenLifecycleTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="a@x.com", password=PASSWORD)

    def test_me_requires_token(self):
        r = self.client.get("/api/auth/me/")
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["code"], "UNAUTHENTICATED")

    def test_token_subject_is_email(self):
        from rest_framework_simplejwt.tokens import AccessToken

        token = AccessToken(issue_token(self.user))
        self.assertEqual(token["sub"], "a@x.com")
        self.assertEqual(token["role"], Role.CUSTOMER)

    def test_expired_token_is_anonymous(self):
        issued_at = timezone.now() - timedelta(hours=1, seconds=1)
        token = issue_token(self.user, issued_at=issued_at)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        self.assertEqual(self.client.get("/api/auth/me/").status_code, 401)
        self.assertEqual(self.client.get("/api/stores/").status_code, 200)

    def test_garbled_token_is_anonymous(self):
        for header in ("Bearer not-a-jwt", "Bearer", "Token abc", "Bearer a b"):
            self.client.credentials(HTTP_AUTHORIZATION=header)
            self.assertEqual(self.client.get("/api/stores/").status_code, 200, header)
            self.assertEqual(self.client.get("/api/auth/me/").status_code, 401, header)

    def test_token_for_deleted_user_is_anonymous(self):
        token = issue_token(self.user)
        self.user.delete()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        self.assertEqual(self.client.get("/api/stores/").status_code, 200)
        self.assertEqual(self.client.get("/api/auth/me/").status_code, 401)

    def test_principal_bound_once_per_request(self):
        request = RequestFactory().get("/api/stores/", HTTP_AUTHORIZATION=f"Bearer {issue_token(self.user)}")
        auth = BearerTokenAuthentication()
        with mock.patch("accounts.authentication.resolve", wraps=resolve) as resolver:
            first = auth.authenticate(request)
            second = auth.authenticate(request)

        resolver.assert_called_once_with("a@x.com")
        self.assertEqual(first[0], self.user)
        self.assertIs(second[0], first[0])
        self.assertIs(second[1], first[1])
        self.assertIs(getattr(request, BOUND_PRINCIPAL_ATTR), second)


class PrincipalResolutionTestCase(TestCase):
    def test_resolve_unknown(self):
        with self.assertRaises(PrincipalNotFound):
            resolve("ghost@example.com")
        with self.assertRaises(PrincipalNotFound):
            resolve("  ")

    def test_current_principal_anonymous(self):
        from django.contrib.auth.models import AnonymousUser

        request = RequestFactory().get("/")
        request.user = AnonymousUser()
        with self.assertRaises(NoActivePrincipal):
            current_principal(request)

    def test_resolve_loads_store_relations(self):
        owner = User.objects.create_user(email="o@x.com", password=PASSWORD, role=Role.OWNER)
        store = Store.objects.create(owner=owner, domain="shop")
        principal = resolve("O@X.com")
        self.assertEqual(principal.owned_store_id, store.pk)
        self.assertIsNone(principal.employed_at_store_id)


class UserAdministrationTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@x.com", password=PASSWORD, role=Role.ADMIN)
        self.owner = User.objects.create_user(email="owner@x.com", password=PASSWORD, role=Role.OWNER)
        self.store = Store.objects.create(owner=self.owner, domain="shop")
        self.customer = User.objects.create_user(email="c@x.com", password=PASSWORD)

    def _as(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")

    def test_admin_makes_employee(self):
        self._as(self.admin)
        r = self.client.put(
            f"/api/users/{self.customer.pk}/role/",
            {"role": "EMPLOYEE", "employed_at_store_id": self.store.pk},
            format="json",
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["employed_at_store_id"], self.store.pk)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.role, Role.EMPLOYEE)

    def test_employee_needs_store(self):
        self._as(self.admin)
        r = self.client.put(
            f"/api/users/{self.customer.pk}/role/", {"role": "EMPLOYEE"}, format="json"
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "INVALID_ROLE_ASSIGNMENT")

    def test_owner_role_requires_store(self):
        self._as(self.admin)
        r = self.client.put(f"/api/users/{self.customer.pk}/role/", {"role": "OWNER"}, format="json")
        self.assertEqual(r.status_code, 400)

    def test_store_owner_cannot_be_demoted(self):
        self._as(self.admin)
        r = self.client.put(f"/api/users/{self.owner.pk}/role/", {"role": "CUSTOMER"}, format="json")
        self.assertEqual(r.status_code, 400)
        self.owner.refresh_from_db()
        self.assertEqual(self.owner.role, Role.OWNER)

    def test_non_admin_cannot_change_roles(self):
        self._as(self.owner)
        r = self.client.put(f"/api/users/{self.customer.pk}/role/", {"role": "ADMIN"}, format="json")
        self.assertEqual(r.status_code, 403)
        self.assertEqual(r.json()["code"], "FORBIDDEN")

    def test_user_list_admin_only(self):
        self._as(self.customer)
        self.assertEqual(self.client.get("/api/users/").status_code, 403)
        self._as(self.admin)
        r = self.client.get("/api/users/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["count"], 3)

    def test_user_sees_self_not_others(self):
        self._as(self.customer)
        self.assertEqual(self.client.get(f"/api/users/{self.customer.pk}/").status_code, 200)
        self.assertEqual(self.client.get(f"/api/users/{self.owner.pk}/").status_code, 403)

    def test_update_own_profile(self):
        self._as(self.customer)
        r = self.client.patch(f"/api/users/{self.customer.pk}/", {"full_name": "Carol"}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["full_name"], "Carol")

    def test_owner_account_cannot_be_deleted_while_store_exists(self):
        self._as(self.owner)
        r = self.client.delete(f"/api/users/{self.owner.pk}/")
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["code"], "RESOURCE_IN_USE")

    def test_customer_deletes_own_account(self):
        self._as(self.customer)
        self.assertEqual(self.client.delete(f"/api/users/{self.customer.pk}/").status_code, 204)
        self.assertFalse(User.objects.filter(pk=self.customer.pk).exists())
