"""
Reusable querysets: store lookup and store scoping.

Categories and products both carry a direct store FK, so store scoping never
needs a join through the category.
"""
from django.db import models

from common.utils import normalize_key


class StoreQuerySet(models.QuerySet):
    def with_domain(self, domain):
        return self.filter(domain=normalize_key(domain))


class StoreScopedQuerySet(models.QuerySet):
    """
    Queryset for models with store FK. Filter by store pk or instance.
    """

    def for_store(self, store):
        """Filter to objects belonging to the given store (pk or instance)."""
        store_pk = getattr(store, "pk", store)
        return self.filter(store_id=store_pk)

    def with_slug(self, store, slug):
        return self.for_store(store).filter(slug=normalize_key(slug))


class ProductQuerySet(StoreScopedQuerySet):
    """
    Queryset for Product - storefront visibility on top of store scoping.
    """

    def visible(self):
        return self.filter(is_visible=True)

    def in_category(self, category):
        category_pk = getattr(category, "pk", category)
        return self.filter(category_id=category_pk)
