from django.contrib import admin

from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "store", "created_at"]
    list_filter = ["store"]
    search_fields = ["name", "slug", "store__domain"]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "store", "category", "price", "is_visible"]
    list_filter = ["is_visible", "store"]
    search_fields = ["name", "slug", "store__domain"]
    raw_id_fields = ["category"]
    readonly_fields = ["created_at", "updated_at"]
