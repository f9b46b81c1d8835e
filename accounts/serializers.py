from rest_framework import serializers

from .models import Role, User


class UserSerializer(serializers.ModelSerializer):
    """Public view of a principal, including its store relations."""

    store_id = serializers.SerializerMethodField()
    employed_at_store_id = serializers.IntegerField(source="employed_at_id", read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "full_name", "role", "store_id", "employed_at_store_id", "created_at"]
        read_only_fields = fields

    def get_store_id(self, obj):
        return obj.owned_store_id


class RegisterSerializer(serializers.Serializer):
    """Customer self-registration."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class RegisterOwnerSerializer(RegisterSerializer):
    """Owner registration: the account and its store are created together."""

    domain = serializers.CharField(max_length=63)
    store_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    theme_settings = serializers.JSONField(required=False, allow_null=True, default=None)


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class UserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, min_length=8, required=False)


class RoleChangeSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices)
    employed_at_store_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class EmailQuerySerializer(serializers.Serializer):
    email = serializers.CharField()


def auth_payload(user, token, message):
    """Body returned by register and login."""
    return {
        "message": message,
        "token": token,
        "user": UserSerializer(user).data,
        "full_name": user.full_name,
        "email": user.email,
        "role": user.role,
    }
