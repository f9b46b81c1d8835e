"""
Store admin with inlines for the store's catalog.

Categories and products are listed read-mostly here; deleting them still goes
through the RESTRICT foreign keys, so a category with products cannot be removed.
"""
from django.contrib import admin

from catalog.models import Category, Product

from .models import Store


class CategoryInline(admin.TabularInline):
    model = Category
    extra = 0
    fields = ["name", "slug"]
    show_change_link = True


class ProductInline(admin.TabularInline):
    model = Product
    extra = 0
    fields = ["name", "slug", "category", "price", "is_visible"]
    show_change_link = True


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ["name", "domain", "owner", "created_at"]
    search_fields = ["name", "domain", "owner__email"]
    raw_id_fields = ["owner"]
    readonly_fields = ["created_at", "updated_at"]
    inlines = [CategoryInline, ProductInline]
