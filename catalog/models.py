from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel
from common.utils import normalize_key
from core.querysets import ProductQuerySet, StoreScopedQuerySet
from stores.models import Store


class Category(TimeStampedModel):
    """Groups products inside exactly one store."""

    store = models.ForeignKey(
        Store,
        on_delete=models.RESTRICT,
        related_name="categories",
        verbose_name=_("store"),
        help_text=_("Store that owns this category."),
    )
    slug = models.SlugField(
        max_length=120,
        verbose_name=_("slug"),
        help_text=_("URL-friendly identifier, unique within the store."),
    )
    name = models.CharField(
        max_length=255,
        verbose_name=_("name"),
    )

    objects = StoreScopedQuerySet.as_manager()

    class Meta:
        ordering = ["store", "name"]
        verbose_name = _("category")
        verbose_name_plural = _("categories")
        constraints = [
            models.UniqueConstraint(
                fields=["store", "slug"],
                name="unique_category_slug_per_store",
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.store.domain})"

    def save(self, *args, **kwargs):
        self.slug = normalize_key(self.slug)
        super().save(*args, **kwargs)

    def has_products(self):
        return self.products.exists()


class Product(TimeStampedModel):
    """Product in a store's catalog. `store` always mirrors `category.store`."""

    store = models.ForeignKey(
        Store,
        on_delete=models.RESTRICT,
        related_name="products",
        verbose_name=_("store"),
        help_text=_("Store that owns this product (same as the category's store)."),
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.RESTRICT,
        related_name="products",
        verbose_name=_("category"),
    )
    name = models.CharField(
        max_length=255,
        verbose_name=_("name"),
        help_text=_("Display name of the product."),
    )
    slug = models.SlugField(
        max_length=160,
        verbose_name=_("slug"),
        help_text=_("URL-friendly identifier, unique within the store."),
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        verbose_name=_("price"),
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name=_("description"),
    )
    attributes = models.JSONField(
        null=True,
        blank=True,
        verbose_name=_("attributes"),
        help_text=_("Free-form product attributes."),
    )
    images = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_("images"),
        help_text=_("Image references (URLs or storage paths)."),
    )
    is_visible = models.BooleanField(
        default=True,
        verbose_name=_("is visible"),
        help_text=_("Whether the product is shown in the storefront."),
    )

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ["store", "name"]
        verbose_name = _("product")
        verbose_name_plural = _("products")
        constraints = [
            models.UniqueConstraint(
                fields=["store", "slug"],
                name="unique_product_slug_per_store",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="product_price_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.store.domain})"

    def validate_store_consistency(self):
        if self.category_id is None or self.store_id is None:
            raise ValidationError(_("Product must belong to a category and a store."))
        if self.category.store_id != self.store_id:
            raise ValidationError(
                {"category": _("Category must belong to the same store as the product.")}
            )

    def validate_price(self):
        if self.price is None or self.price < 0:
            raise ValidationError({"price": _("Price must be zero or positive.")})

    def clean(self):
        super().clean()
        self.validate_price()
        self.validate_store_consistency()

    def save(self, *args, **kwargs):
        self.slug = normalize_key(self.slug)
        self.validate_price()
        self.validate_store_consistency()
        super().save(*args, **kwargs)
