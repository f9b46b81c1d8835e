"""Serializers for stores."""
from rest_framework import serializers

from .models import Store


class StoreSerializer(serializers.ModelSerializer):
    owner_id = serializers.IntegerField(source="owner.pk", read_only=True)

    class Meta:
        model = Store
        fields = ["id", "name", "domain", "theme_settings", "owner_id", "created_at", "updated_at"]
        read_only_fields = fields


class StoreCreateSerializer(serializers.Serializer):
    """Input for creating a store. `owner_id` is honored for ADMIN only."""

    domain = serializers.CharField(max_length=63)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    theme_settings = serializers.JSONField(required=False, allow_null=True, default=None)
    owner_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class StoreUpdateSerializer(serializers.Serializer):
    domain = serializers.CharField(max_length=63, required=False)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    theme_settings = serializers.JSONField(required=False, allow_null=True)


class ThemeSettingsSerializer(serializers.Serializer):
    theme_settings = serializers.JSONField(allow_null=True)


class DomainQuerySerializer(serializers.Serializer):
    domain = serializers.CharField(max_length=63)
