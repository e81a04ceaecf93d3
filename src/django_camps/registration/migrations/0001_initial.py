import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("camps_events", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(max_length=150)),
                ("last_name", models.CharField(max_length=150)),
                (
                    "contact_name",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Name of the camper, when different from the person filling the form.",
                        max_length=300,
                    ),
                ),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("school_name", models.CharField(blank=True, default="", max_length=200)),
                ("club_name", models.CharField(blank=True, default="", max_length=200)),
                (
                    "registration_type",
                    models.CharField(
                        choices=[("full", "Full event"), ("single_day", "Single day"), ("team", "Team")],
                        default="full",
                        max_length=20,
                    ),
                ),
                ("grade", models.CharField(blank=True, default="", max_length=20)),
                ("shirt_size", models.CharField(blank=True, default="", max_length=20)),
                ("stripe_payment_intent_id", models.CharField(blank=True, db_index=True, default="", max_length=200)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                            ("unknown", "Unknown"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "event",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="registrations",
                        to="camps_events.event",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="StripePayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("stripe_payment_intent_id", models.CharField(max_length=200, unique=True)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("currency", models.CharField(default="usd", max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("requires_payment_method", "Requires payment method"),
                            ("requires_confirmation", "Requires confirmation"),
                            ("requires_action", "Requires action"),
                            ("processing", "Processing"),
                            ("requires_capture", "Requires capture"),
                            ("canceled", "Canceled"),
                            ("succeeded", "Succeeded"),
                        ],
                        max_length=30,
                    ),
                ),
                ("event_name", models.CharField(blank=True, default="", max_length=300)),
                ("receipt_email", models.EmailField(blank=True, default="", max_length=254)),
                ("stripe_customer_id", models.CharField(blank=True, default="", max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, help_text="When the PaymentIntent was created on Stripe."),
                ),
                ("synced_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["created_at", "stripe_payment_intent_id"],
            },
        ),
    ]
