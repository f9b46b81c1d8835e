"""
Registration, login and user administration.

Every mutating function takes the acting principal explicitly; nothing reads
ambient request state.
"""
import logging

from django.contrib.auth import authenticate
from django.db import IntegrityError, transaction

from common.utils import normalize_key
from core.exceptions import (
    AccessDenied,
    AlreadyExists,
    InvalidCredentials,
    InvalidRoleAssignment,
    PrincipalNotFound,
    ResourceInUse,
    StoreNotFound,
    Unauthenticated,
)
from core.permissions import is_admin, require_admin
from stores import services as store_services
from stores.models import Store

from .models import Role, User, role_at_least
from .principals import resolve
from .tokens import issue_token

logger = logging.getLogger(__name__)


def email_exists(email):
    return User.objects.filter(email=normalize_key(email)).exists()


def _ensure_email_available(email):
    if email_exists(email):
        raise AlreadyExists("A user with this email already exists.")


def get_user(user_id):
    user = User.objects.select_related("owned_store", "employed_at").filter(pk=user_id).first()
    if user is None:
        raise PrincipalNotFound()
    return user


def register_customer(*, email, password, full_name=""):
    """Create a CUSTOMER account. Returns (user, token)."""
    _ensure_email_available(email)
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email, password=password, full_name=full_name, role=Role.CUSTOMER
            )
    except IntegrityError as exc:
        raise AlreadyExists("A user with this email already exists.") from exc
    logger.info("Registered customer %s", user.pk)
    return user, issue_token(user)


def register_owner(*, email, password, domain, full_name="", store_name="", theme_settings=None):
    """
    Create an OWNER together with their store, atomically. Returns (user, store, token).
    """
    domain = store_services.normalize_domain(domain)
    _ensure_email_available(email)
    if store_services.domain_exists(domain):
        raise AlreadyExists(f"The domain '{domain}' is already in use.")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email, password=password, full_name=full_name, role=Role.OWNER
            )
            store = Store.objects.create(
                owner=user,
                domain=domain,
                name=store_name or domain,
                theme_settings=theme_settings,
            )
    except IntegrityError as exc:
        logger.warning("Owner registration lost a uniqueness race for domain '%s'", domain)
        raise AlreadyExists("A user or store with these details already exists.") from exc

    logger.info("Registered owner %s with store %s (%s)", user.pk, store.pk, store.domain)
    user = resolve(user.email)
    return user, store, issue_token(user)


def authenticate_credentials(email, password, request=None):
    """Verify credentials. Unknown email and wrong password fail the same way."""
    email = normalize_key(email)
    user = authenticate(request=request, username=email, password=password) if email else None
    if user is None:
        logger.info("Failed login attempt")
        raise InvalidCredentials()
    return resolve(user.email)


def login(*, email, password, request=None):
    """Returns (user, token)."""
    user = authenticate_credentials(email, password, request=request)
    logger.info("User %s logged in", user.pk)
    return user, issue_token(user)


def _require_self_or_admin(principal, user_id):
    if principal is None or not principal.is_authenticated:
        raise Unauthenticated()
    if principal.pk != int(user_id) and not is_admin(principal):
        raise AccessDenied("You do not have permission to modify this user.")


def get_user_for(principal, user_id):
    """A user may see their own record; ADMIN sees everyone."""
    _require_self_or_admin(principal, user_id)
    return get_user(user_id)


def list_users(principal):
    require_admin(principal)
    return User.objects.select_related("owned_store", "employed_at").order_by("id")


def update_profile(principal, user_id, *, full_name=None, email=None, password=None):
    _require_self_or_admin(principal, user_id)
    user = get_user(user_id)

    if full_name is not None:
        user.full_name = full_name
    if email:
        email = normalize_key(email)
        if email != user.email:
            _ensure_email_available(email)
            user.email = email
    if password:
        user.set_password(password)

    try:
        with transaction.atomic():
            user.save()
    except IntegrityError as exc:
        raise AlreadyExists("A user with this email already exists.") from exc
    return user


def change_role(principal, user_id, *, role, employed_at_store_id=None):
    """
    ADMIN-only. Keeps the ownership and employment relations consistent with the role:
    owners keep OWNER/ADMIN, only EMPLOYEE carries a workplace store.
    """
    require_admin(principal)
    user = get_user(user_id)
    role = Role(role)

    if not role_at_least(role, Role.OWNER) and user.owned_store_id is not None:
        raise InvalidRoleAssignment("A user who owns a store must keep the OWNER or ADMIN role.")
    if role == Role.OWNER and user.owned_store_id is None:
        raise InvalidRoleAssignment("OWNER is granted by creating a store for the user.")

    if role == Role.EMPLOYEE:
        if employed_at_store_id is None:
            raise InvalidRoleAssignment("An employee needs a workplace store.")
        if not Store.objects.filter(pk=employed_at_store_id).exists():
            raise StoreNotFound()
        user.employed_at_id = employed_at_store_id
    elif employed_at_store_id is not None:
        raise InvalidRoleAssignment("Only employees can be assigned to a workplace store.")
    else:
        user.employed_at = None

    previous = user.role
    user.role = role
    user.save(update_fields=["role", "employed_at", "updated_at"])
    logger.info("User %s role changed %s -> %s by %s", user.pk, previous, role, principal.pk)
    return get_user(user.pk)


def delete_user(principal, user_id):
    _require_self_or_admin(principal, user_id)
    user = get_user(user_id)
    if user.owned_store_id is not None:
        raise ResourceInUse("Delete the user's store before deleting the account.")
    user.delete()
    logger.info("User %s deleted by %s", user_id, principal.pk)
