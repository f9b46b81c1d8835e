"""
Permission engine and the DRF permission classes built on it.

Definitions:
- Owner = the principal on the other side of Store.owner (one store per owner)
- Employee = principal with role EMPLOYEE whose employed_at is the store
- Staff of a store = ADMIN, its owner, or one of its employees

Everyone may read stores, categories and products. Staff may mutate catalog
content; only ADMIN and the owner may mutate the store itself.

`authorize` is a pure decision: it reads attributes already loaded on the
principal, never queries, never raises. Callers turn a False into
AccessDenied at the operation boundary via `require_permission`.
"""
import enum
import logging

from rest_framework import permissions

from accounts.models import Role, role_at_least
from core.exceptions import AccessDenied, Unauthenticated

logger = logging.getLogger(__name__)


class Action(enum.Enum):
    MANAGE_CONTENT = "manage_content"  # categories, products
    MANAGE_TENANT = "manage_tenant"  # the store record itself


def _same_store(store_id, target_store_id):
    if store_id is None or target_store_id is None:
        return False
    try:
        return int(store_id) == int(target_store_id)
    except (TypeError, ValueError):
        return False


def is_authenticated(principal):
    return principal is not None and bool(getattr(principal, "is_authenticated", False))


def authorize(principal, target_store_id, *, action=Action.MANAGE_CONTENT):
    """Can `principal` mutate resources of store `target_store_id`?"""
    if not is_authenticated(principal) or target_store_id is None:
        return False

    role = getattr(principal, "role", None)
    if role == Role.ADMIN:
        return True
    if role == Role.OWNER:
        return _same_store(getattr(principal, "owned_store_id", None), target_store_id)
    if role == Role.EMPLOYEE:
        if action is Action.MANAGE_TENANT:
            return False
        return _same_store(getattr(principal, "employed_at_store_id", None), target_store_id)
    return False


def can_read(principal, target_store_id):
    """Stores and their catalogs are publicly browsable."""
    return True


def is_admin(principal):
    return is_authenticated(principal) and role_at_least(getattr(principal, "role", None), Role.ADMIN)


def require_permission(principal, target_store_id, *, action=Action.MANAGE_CONTENT):
    """Raise Unauthenticated / AccessDenied unless `authorize` allows."""
    if not is_authenticated(principal):
        raise Unauthenticated()
    if not authorize(principal, target_store_id, action=action):
        logger.warning(
            "Denied %s on store %s for user %s (%s)",
            action.value,
            target_store_id,
            principal.pk,
            principal.role,
        )
        raise AccessDenied()


def require_admin(principal):
    if not is_authenticated(principal):
        raise Unauthenticated()
    if not is_admin(principal):
        logger.warning("Denied admin operation for user %s (%s)", principal.pk, principal.role)
        raise AccessDenied()


def _get_store_id_from_view(view):
    """Store id from URL kwargs only. No lookup, so unknown ids are not revealed."""
    kwargs = getattr(view, "kwargs", None) or {}
    store_id = kwargs.get("store_id")
    if store_id is None and getattr(view, "store_lookup_kwarg", None):
        store_id = kwargs.get(view.store_lookup_kwarg)
    return store_id


class CanManageStoreOrReadOnly(permissions.BasePermission):
    """
    Store staff can write catalog content. Others get read-only (catalog browse).
    Use with store-scoped views (categories, products).
    """

    message = AccessDenied.default_detail
    action = Action.MANAGE_CONTENT

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return can_read(request.user, _get_store_id_from_view(view))
        if not is_authenticated(request.user):
            return False
        return authorize(request.user, _get_store_id_from_view(view), action=self.action)


class CanManageStore(CanManageStoreOrReadOnly):
    """
    ADMIN or owner for write. Use for the store record itself.
    """

    action = Action.MANAGE_TENANT


class IsAdmin(permissions.BasePermission):
    """Only role ADMIN."""

    message = AccessDenied.default_detail

    def has_permission(self, request, view):
        return is_admin(request.user)
