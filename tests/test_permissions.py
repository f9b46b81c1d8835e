"""Tests for the permission engine and the DRF permission classes."""
from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, SimpleTestCase, TestCase

from accounts.models import Role, role_at_least
from accounts.principals import resolve
from core.exceptions import AccessDenied, Unauthenticated
from core.permissions import (
    Action,
    CanManageStore,
    CanManageStoreOrReadOnly,
    IsAdmin,
    authorize,
    can_read,
    is_admin,
    require_permission,
)
from stores.models import Store

User = get_user_model()

STORE_IDS = [1, 2, 7, 9999]


def principal(role, owned_store_id=None, employed_at_store_id=None):
    return SimpleNamespace(
        pk=42,
        is_authenticated=True,
        role=role,
        owned_store_id=owned_store_id,
        employed_at_store_id=employed_at_store_id,
    )


class AuthorizeDecisionTest(SimpleTestCase):
    def test_admin_allowed_everywhere(self):
        admin = principal(Role.ADMIN)
        for store_id in STORE_IDS:
            for action in Action:
                self.assertTrue(authorize(admin, store_id, action=action))

    def test_owner_allowed_only_on_own_store(self):
        owner = principal(Role.OWNER, owned_store_id=7)
        self.assertTrue(authorize(owner, 7))
        self.assertTrue(authorize(owner, "7"))
        self.assertTrue(authorize(owner, 7, action=Action.MANAGE_TENANT))
        for store_id in (1, 2, 9999):
            self.assertFalse(authorize(owner, store_id))

    def test_owner_without_store_denied(self):
        owner = principal(Role.OWNER)
        for store_id in STORE_IDS:
            self.assertFalse(authorize(owner, store_id))

    def test_customer_always_denied(self):
        customer = principal(Role.CUSTOMER, owned_store_id=7, employed_at_store_id=7)
        for store_id in STORE_IDS:
            for action in Action:
                self.assertFalse(authorize(customer, store_id, action=action))

    def test_absent_principal_denied(self):
        for store_id in STORE_IDS:
            self.assertFalse(authorize(None, store_id))
            self.assertFalse(authorize(AnonymousUser(), store_id))

    def test_missing_target_denied(self):
        self.assertFalse(authorize(principal(Role.ADMIN), None))

    def test_employee_manages_content_of_workplace_only(self):
        employee = principal(Role.EMPLOYEE, employed_at_store_id=2)
        self.assertTrue(authorize(employee, 2))
        self.assertFalse(authorize(employee, 7))

    def test_employee_never_manages_the_store_record(self):
        employee = principal(Role.EMPLOYEE, employed_at_store_id=2)
        self.assertFalse(authorize(employee, 2, action=Action.MANAGE_TENANT))

    def test_employee_ignores_ownership_relation(self):
        employee = principal(Role.EMPLOYEE, owned_store_id=2)
        self.assertFalse(authorize(employee, 2))

    def test_unknown_role_denied(self):
        self.assertFalse(authorize(principal("SUPERVISOR", owned_store_id=1), 1))

    def test_reads_always_allowed(self):
        self.assertTrue(can_read(None, 1))
        self.assertTrue(can_read(principal(Role.CUSTOMER), 1))

    def test_require_permission_raises(self):
        with self.assertRaises(Unauthenticated):
            require_permission(None, 1)
        with self.assertRaises(AccessDenied):
            require_permission(principal(Role.CUSTOMER), 1)
        require_permission(principal(Role.OWNER, owned_store_id=1), 1)


class RoleOrderTest(SimpleTestCase):
    def test_role_hierarchy(self):
        self.assertTrue(role_at_least(Role.ADMIN, Role.OWNER))
        self.assertTrue(role_at_least(Role.OWNER, Role.EMPLOYEE))
        self.assertTrue(role_at_least("EMPLOYEE", "CUSTOMER"))
        self.assertTrue(role_at_least(Role.CUSTOMER, Role.CUSTOMER))
        self.assertFalse(role_at_least(Role.CUSTOMER, Role.EMPLOYEE))
        self.assertFalse(role_at_least(Role.OWNER, Role.ADMIN))
        self.assertFalse(role_at_least("ROOT", Role.CUSTOMER))
        self.assertFalse(role_at_least(None, Role.CUSTOMER))

    def test_is_admin_uses_role_order(self):
        self.assertTrue(is_admin(principal(Role.ADMIN)))
        self.assertFalse(is_admin(principal(Role.OWNER, owned_store_id=1)))
        self.assertFalse(is_admin(principal("ROOT")))
        self.assertFalse(is_admin(None))


class AuthorizeWithUsersTest(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@test.com", password="pass", role=Role.OWNER)
        self.other = User.objects.create_user(email="other@test.com", password="pass", role=Role.OWNER)
        self.store = Store.objects.create(name="Shop", domain="shop", owner=self.owner)
        self.other_store = Store.objects.create(name="Other", domain="other", owner=self.other)
        self.employee = User.objects.create_user(
            email="staff@test.com", password="pass", role=Role.EMPLOYEE, employed_at=self.store
        )
        self.admin = User.objects.create_user(email="admin@test.com", password="pass", role=Role.ADMIN)

    def test_resolved_owner(self):
        owner = resolve("OWNER@test.com ")
        self.assertTrue(authorize(owner, self.store.pk))
        self.assertFalse(authorize(owner, self.other_store.pk))

    def test_resolved_employee(self):
        employee = resolve("staff@test.com")
        self.assertTrue(authorize(employee, self.store.pk))
        self.assertFalse(authorize(employee, self.other_store.pk))
        self.assertFalse(authorize(employee, self.store.pk, action=Action.MANAGE_TENANT))

    def test_admin_without_store(self):
        admin = resolve("admin@test.com")
        self.assertIsNone(admin.owned_store_id)
        self.assertTrue(authorize(admin, self.other_store.pk, action=Action.MANAGE_TENANT))

    def test_role_change_seen_on_next_resolve(self):
        self.assertTrue(authorize(resolve("staff@test.com"), self.store.pk))
        User.objects.filter(pk=self.employee.pk).update(role=Role.CUSTOMER, employed_at=None)
        self.assertFalse(authorize(resolve("staff@test.com"), self.store.pk))


class CanManageStoreOrReadOnlyTest(TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.owner = User.objects.create_user(email="owner@test.com", password="pass", role=Role.OWNER)
        self.buyer = User.objects.create_user(email="buyer@test.com", password="pass")
        self.store = Store.objects.create(name="Test Shop", domain="test-shop", owner=self.owner)
        self.perm = CanManageStoreOrReadOnly()

    def _view(self, **kwargs):
        return SimpleNamespace(kwargs=kwargs)

    def test_safe_method_allowed_unauthenticated(self):
        request = self.factory.get("/")
        request.user = AnonymousUser()
        self.assertTrue(self.perm.has_permission(request, self._view(store_id=1)))

    def test_post_owner_allowed(self):
        request = self.factory.post("/")
        request.user = resolve(self.owner.email)
        self.assertTrue(self.perm.has_permission(request, self._view(store_id=self.store.pk)))

    def test_post_customer_denied(self):
        request = self.factory.post("/")
        request.user = self.buyer
        self.assertFalse(self.perm.has_permission(request, self._view(store_id=self.store.pk)))

    def test_post_anonymous_denied(self):
        request = self.factory.post("/")
        request.user = AnonymousUser()
        self.assertFalse(self.perm.has_permission(request, self._view(store_id=self.store.pk)))

    def test_store_lookup_kwarg(self):
        request = self.factory.delete("/")
        request.user = resolve(self.owner.email)
        view = SimpleNamespace(kwargs={"pk": self.store.pk}, store_lookup_kwarg="pk")
        self.assertTrue(CanManageStore().has_permission(request, view))

    def test_employee_cannot_manage_store(self):
        employee = User.objects.create_user(
            email="staff@test.com", password="pass", role=Role.EMPLOYEE, employed_at=self.store
        )
        request = self.factory.patch("/")
        request.user = resolve(employee.email)
        view = SimpleNamespace(kwargs={"pk": self.store.pk}, store_lookup_kwarg="pk")
        self.assertFalse(CanManageStore().has_permission(request, view))
        self.assertTrue(self.perm.has_permission(request, self._view(store_id=self.store.pk)))


class IsAdminTest(TestCase):
    def test_only_admin(self):
        factory = RequestFactory()
        request = factory.get("/")
        request.user = User.objects.create_user(email="a@test.com", password="pass", role=Role.ADMIN)
        self.assertTrue(IsAdmin().has_permission(request, None))
        request.user = User.objects.create_user(email="c@test.com", password="pass")
        self.assertFalse(IsAdmin().has_permission(request, None))
        request.user = AnonymousUser()
        self.assertFalse(IsAdmin().has_permission(request, None))
