import encrypted_fields.fields
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                (
                    "category",
                    models.CharField(
                        choices=[("camp", "Camp"), ("clinic", "Clinic"), ("tournament", "Tournament")],
                        default="camp",
                        max_length=20,
                    ),
                ),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("timezone", models.CharField(default="America/New_York", max_length=100)),
                ("location", models.CharField(blank=True, default="", max_length=300)),
                ("venue", models.CharField(blank=True, default="", max_length=300)),
                ("base_price", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                (
                    "stripe_secret_key",
                    encrypted_fields.fields.EncryptedCharField(blank=True, default=None, max_length=200, null=True),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-start_date"],
            },
        ),
    ]
