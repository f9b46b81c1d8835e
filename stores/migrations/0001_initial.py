import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Store",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        help_text="Timestamp when the record was created.",
                        verbose_name="created at",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when the record was last updated.",
                        verbose_name="updated at",
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Display name of the store.",
                        max_length=255,
                        verbose_name="name",
                    ),
                ),
                (
                    "domain",
                    models.CharField(
                        help_text="Unique, lower-case domain slug of the storefront.",
                        max_length=63,
                        unique=True,
                        verbose_name="domain",
                    ),
                ),
                (
                    "theme_settings",
                    models.JSONField(
                        blank=True,
                        help_text="Opaque theme configuration used by the storefront.",
                        null=True,
                        verbose_name="theme settings",
                    ),
                ),
                (
                    "owner",
                    models.OneToOneField(
                        help_text="User who owns this store.",
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="owned_store",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="owner",
                    ),
                ),
            ],
            options={
                "verbose_name": "store",
                "verbose_name_plural": "stores",
                "ordering": ["id"],
            },
        ),
    ]
