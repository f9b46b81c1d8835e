"""Serializers for categories and products."""
from rest_framework import serializers

from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    store_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Category
        fields = ["id", "store_id", "name", "slug", "created_at", "updated_at"]
        read_only_fields = fields


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=120)


class ProductSerializer(serializers.ModelSerializer):
    store_id = serializers.IntegerField(read_only=True)
    category_id = serializers.IntegerField(read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "store_id",
            "category_id",
            "category_name",
            "name",
            "slug",
            "price",
            "description",
            "attributes",
            "images",
            "is_visible",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductWriteSerializer(serializers.Serializer):
    category_id = serializers.IntegerField()
    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=160)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    attributes = serializers.JSONField(required=False, allow_null=True, default=None)
    images = serializers.ListField(
        child=serializers.CharField(max_length=500), required=False, default=list
    )
    is_visible = serializers.BooleanField(required=False, default=True)


class VisibilitySerializer(serializers.Serializer):
    is_visible = serializers.BooleanField()


class SlugQuerySerializer(serializers.Serializer):
    slug = serializers.CharField(max_length=160)
