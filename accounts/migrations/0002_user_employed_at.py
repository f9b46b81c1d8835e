import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("accounts", "0001_initial"),
        ("stores", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="user",
            name="employed_at",
            field=models.ForeignKey(
                blank=True,
                help_text="Store an EMPLOYEE works for.",
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="employees",
                to="stores.store",
                verbose_name="employed at",
            ),
        ),
    ]
