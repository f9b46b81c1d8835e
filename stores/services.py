"""
Store lifecycle: creation (promoting the owner), updates, theme settings, deletion.

Domain uniqueness is checked up front for a friendly error, but the unique
index on Store.domain is what actually decides concurrent races.
"""
import logging

from django.db import IntegrityError, transaction
from rest_framework import serializers

from accounts.models import Role, User
from common.utils import is_valid_domain, normalize_key
from core.exceptions import (
    AccessDenied,
    AlreadyExists,
    PrincipalNotFound,
    ResourceInUse,
    StoreNotFound,
    Unauthenticated,
)
from core.permissions import Action, is_admin, require_permission

from .models import Store

logger = logging.getLogger(__name__)


def normalize_domain(domain):
    """Trim + lower-case, then require letters, digits and inner hyphens."""
    normalized = normalize_key(domain)
    if not normalized:
        raise serializers.ValidationError({"domain": "Domain cannot be empty."})
    if not is_valid_domain(normalized):
        raise serializers.ValidationError(
            {"domain": "Domain may contain only letters, digits and hyphens, without spaces."}
        )
    return normalized


def domain_exists(domain):
    return Store.objects.with_domain(domain).exists()


def get_store(store_id):
    store = Store.objects.select_related("owner").filter(pk=store_id).first()
    if store is None:
        raise StoreNotFound()
    return store


def get_store_by_domain(domain):
    store = Store.objects.with_domain(domain).select_related("owner").first()
    if store is None:
        raise StoreNotFound()
    return store


def _save_unique(store):
    try:
        with transaction.atomic():
            store.save()
    except IntegrityError as exc:
        raise AlreadyExists(f"The domain '{store.domain}' is already in use.") from exc


def create_store(principal, *, domain, owner_id=None, name="", theme_settings=None):
    """
    Create a store for `owner_id` (defaults to the principal). Only ADMIN may
    create stores on behalf of someone else. The owner is promoted to OWNER
    unless already ADMIN.
    """
    if principal is None or not principal.is_authenticated:
        raise Unauthenticated()
    if owner_id is None:
        owner_id = principal.pk
    if int(owner_id) != principal.pk and not is_admin(principal):
        raise AccessDenied()

    domain = normalize_domain(domain)
    with transaction.atomic():
        owner = User.objects.select_for_update().filter(pk=owner_id).first()
        if owner is None:
            raise PrincipalNotFound()
        if Store.objects.filter(owner=owner).exists():
            logger.warning("User %s already owns a store", owner.pk)
            raise AlreadyExists("The user already owns a store.")
        if domain_exists(domain):
            raise AlreadyExists(f"The domain '{domain}' is already in use.")

        store = Store(owner=owner, domain=domain, name=name or domain, theme_settings=theme_settings)
        _save_unique(store)

        if owner.role != Role.ADMIN:
            owner.role = Role.OWNER
            owner.employed_at = None
            owner.save(update_fields=["role", "employed_at", "updated_at"])

    logger.info("Created store %s (%s) for user %s", store.pk, store.domain, owner.pk)
    return store


def update_store(principal, store_id, *, name=None, domain=None, theme_settings=None):
    require_permission(principal, store_id, action=Action.MANAGE_TENANT)
    store = get_store(store_id)

    if name is not None:
        name = name.strip()
        if not name:
            raise serializers.ValidationError({"name": "Store name cannot be blank."})
        store.name = name
    if domain:
        domain = normalize_domain(domain)
        if domain != store.domain:
            if domain_exists(domain):
                raise AlreadyExists(f"The domain '{domain}' is already in use.")
            logger.info("Store %s domain '%s' -> '%s'", store.pk, store.domain, domain)
            store.domain = domain
    if theme_settings is not None:
        store.theme_settings = theme_settings

    _save_unique(store)
    return store


def update_theme_settings(principal, store_id, theme_settings):
    require_permission(principal, store_id, action=Action.MANAGE_TENANT)
    store = get_store(store_id)
    store.theme_settings = theme_settings
    store.save(update_fields=["theme_settings", "updated_at"])
    logger.info("Store %s theme settings updated", store.pk)
    return store


def delete_store(principal, store_id):
    """Rejected while categories or products still reference the store."""
    require_permission(principal, store_id, action=Action.MANAGE_TENANT)
    with transaction.atomic():
        store = get_store(store_id)
        if store.is_in_use():
            raise ResourceInUse("The store still has categories or products.")
        store.employees.update(employed_at=None, role=Role.CUSTOMER)
        owner = store.owner
        store.delete()
        if owner.role == Role.OWNER:
            owner.role = Role.CUSTOMER
            owner.save(update_fields=["role", "updated_at"])
    logger.info("Deleted store %s by user %s", store_id, principal.pk)
