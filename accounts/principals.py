"""
Principal resolution: authenticated subject (email) -> User.

Always hits the database so a role or ownership change is honored on the very
next request.
"""
import logging

from common.utils import normalize_key
from core.exceptions import NoActivePrincipal, PrincipalNotFound

from .models import User

logger = logging.getLogger(__name__)


def resolve(email):
    """Load the principal for `email` with its store relations resident."""
    email = normalize_key(email)
    if not email:
        raise PrincipalNotFound()
    user = (
        User.objects.select_related("owned_store", "employed_at")
        .filter(email=email)
        .first()
    )
    if user is None:
        raise PrincipalNotFound()
    return user


def current_principal(request):
    """The identity bound to `request` by the authentication class."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        raise NoActivePrincipal()
    return user

