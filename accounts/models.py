"""
User model for Kiosky API.
Email as USERNAME_FIELD; the user is the principal the permission engine reasons about.
"""
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel
from common.utils import normalize_key


class Role(models.TextChoices):
    """Closed set of roles. The label is the human-readable description."""

    ADMIN = "ADMIN", _("System administrator")
    OWNER = "OWNER", _("Store owner")
    EMPLOYEE = "EMPLOYEE", _("Store employee")
    CUSTOMER = "CUSTOMER", _("Customer")


# ADMIN ⊇ OWNER ⊇ EMPLOYEE ⊇ CUSTOMER
ROLE_RANK = {
    Role.CUSTOMER: 0,
    Role.EMPLOYEE: 1,
    Role.OWNER: 2,
    Role.ADMIN: 3,
}

STORE_OWNING_ROLES = (Role.ADMIN, Role.OWNER)


def role_at_least(role, required):
    """True if `role` has at least the mutation rights of `required`."""
    try:
        return ROLE_RANK[Role(role)] >= ROLE_RANK[Role(required)]
    except ValueError:
        return False


class UserManager(BaseUserManager):
    """Custom manager for email-based auth."""

    def normalize_email(self, email):
        return normalize_key(email) or ""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Users must have an email address")
        email = self.normalize_email(email)
        extra_fields.setdefault("role", Role.CUSTOMER)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", Role.ADMIN)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser, TimeStampedModel):
    """
    Custom user with email as primary identifier.

    Store ownership is the reverse side of Store.owner (one store per owner).
    Employment is a separate relation so an EMPLOYEE never looks like an owner.
    """

    username = models.CharField(max_length=150, blank=True, null=True)
    email = models.EmailField(unique=True)
    full_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name=_("full name"),
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CUSTOMER,
        verbose_name=_("role"),
        help_text=_("Baseline mutation rights of the user."),
    )
    employed_at = models.ForeignKey(
        "stores.Store",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employees",
        verbose_name=_("employed at"),
        help_text=_("Store an EMPLOYEE works for."),
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return self.email

    @property
    def owned_store_id(self):
        try:
            return self.owned_store.pk
        except ObjectDoesNotExist:
            return None

    @property
    def employed_at_store_id(self):
        return self.employed_at_id

    def clean(self):
        super().clean()
        self.email = normalize_key(self.email)
        if self.employed_at_id is not None and self.role != Role.EMPLOYEE:
            raise ValidationError(
                {"employed_at": _("Only employees can be assigned to a workplace store.")}
            )
        if self.role not in STORE_OWNING_ROLES and self.pk and self.owned_store_id is not None:
            raise ValidationError(
                {"role": _("A store owner must keep the OWNER or ADMIN role.")}
            )
