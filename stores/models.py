"""
Store model. A store is a tenant: categories and products live in the catalog app.
"""
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel
from common.utils import normalize_key
from core.querysets import StoreQuerySet


class Store(TimeStampedModel):
    """Storefront - owner is the OWNER (or ADMIN) principal."""

    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name=_("name"),
        help_text=_("Display name of the store."),
    )
    domain = models.CharField(
        max_length=63,
        unique=True,
        verbose_name=_("domain"),
        help_text=_("Unique, lower-case domain slug of the storefront."),
    )
    theme_settings = models.JSONField(
        null=True,
        blank=True,
        verbose_name=_("theme settings"),
        help_text=_("Opaque theme configuration used by the storefront."),
    )
    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.RESTRICT,
        related_name="owned_store",
        verbose_name=_("owner"),
        help_text=_("User who owns this store."),
    )

    objects = StoreQuerySet.as_manager()

    class Meta:
        ordering = ["id"]
        verbose_name = _("store")
        verbose_name_plural = _("stores")

    def __str__(self):
        return self.name or self.domain

    def save(self, *args, **kwargs):
        self.domain = normalize_key(self.domain)
        super().save(*args, **kwargs)

    def is_in_use(self):
        """True while categories or products still reference this store."""
        return self.categories.exists() or self.products.exists()
