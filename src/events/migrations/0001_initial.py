import decimal
import uuid

import django.core.validators
import django.db.models.deletion
import events.models.transaction
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("title", models.CharField(db_index=True, max_length=255)),
                ("theme", models.CharField(blank=True, default="", max_length=255)),
                ("venue", models.CharField(max_length=255)),
                ("address", models.CharField(blank=True, default="", max_length=512)),
                ("start", models.DateTimeField(db_index=True)),
                ("end", models.DateTimeField()),
                ("published", models.BooleanField(db_index=True, default=False)),
            ],
            options={
                "ordering": ["-start"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end__gte", models.F("start"))), name="event_end_after_start"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketTier",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                    ),
                ),
                ("currency", models.CharField(default="NGN", help_text="ISO 4217 currency code", max_length=3)),
                ("initial_quantity", models.PositiveIntegerField(default=0)),
                ("available_quantity", models.PositiveIntegerField(default=0)),
                ("benefits", models.JSONField(blank=True, default=list)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="ticket_tiers", to="events.event"
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "name"), name="unique_tier_name_per_event"),
                    models.CheckConstraint(
                        condition=models.Q(("available_quantity__gte", 0)), name="tier_available_non_negative"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("available_quantity__lte", models.F("initial_quantity"))),
                        name="tier_available_within_initial",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("txn_id", models.CharField(editable=False, max_length=32, unique=True)),
                (
                    "reference",
                    models.CharField(
                        default=events.models.transaction.generate_reference,
                        editable=False,
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("gateway_charge_id", models.CharField(blank=True, max_length=64, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="events.event"
                    ),
                ),
                (
                    "tier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="events.tickettier",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["event", "status"], name="txn_event_status_idx"),
                    models.Index(fields=["status", "created_at"], name="txn_status_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Buyer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("full_name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254)),
                ("phone_number", models.CharField(max_length=32)),
                ("ticket_code", models.CharField(max_length=20, unique=True)),
                ("checked_in", models.BooleanField(default=False)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("qr_payload", models.URLField(blank=True, default="", max_length=512)),
                (
                    "qr_code",
                    models.TextField(blank=True, default="", help_text="PNG data URL of the check-in QR code"),
                ),
                (
                    "transaction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="buyers", to="events.transaction"
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [models.Index(fields=["email"], name="buyer_email_idx")],
            },
        ),
    ]
