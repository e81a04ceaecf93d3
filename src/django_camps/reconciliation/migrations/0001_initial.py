import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("camps_events", "0001_initial"),
        ("camps_registration", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ReconciliationRun",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "strategy",
                    models.CharField(
                        choices=[
                            ("sequential", "Sequential"),
                            ("strict", "Strict"),
                            ("unique_customer", "Unique Customer"),
                            ("event_first", "Event First"),
                        ],
                        max_length=30,
                    ),
                ),
                ("options", models.JSONField(blank=True, default=dict)),
                ("applied", models.BooleanField(default=False)),
                ("payment_count", models.PositiveIntegerField(default=0)),
                ("matched_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        blank=True,
                        help_text="When set, only this event's payments and registrations were considered.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reconciliation_runs",
                        to="camps_events.event",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "get_latest_by": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="PaymentMatch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("direct", "Direct"),
                            ("proximity", "Proximity"),
                            ("fallback", "Fallback"),
                            ("unmatched", "Unmatched"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "gap_seconds",
                    models.IntegerField(
                        blank=True,
                        help_text="Seconds from registration to payment; negative when the registration came later.",
                        null=True,
                    ),
                ),
                (
                    "payment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="matches",
                        to="camps_registration.stripepayment",
                    ),
                ),
                (
                    "registration",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="matches",
                        to="camps_registration.registration",
                    ),
                ),
                (
                    "run",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="matches",
                        to="camps_reconciliation.reconciliationrun",
                    ),
                ),
            ],
            options={
                "ordering": ["payment__created_at", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("run", "payment"),
                        name="reconciliation_paymentmatch_unique_payment",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("registration__isnull", False)),
                        fields=("run", "registration"),
                        name="reconciliation_paymentmatch_unique_registration",
                    ),
                ],
            },
        ),
    ]
