import uuid

import accounts.models
import django.db.models.functions.text
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="AdminUser",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("email", models.EmailField(help_text="Login email, stored lower-cased", max_length=254, unique=True)),
                ("full_name", models.CharField(max_length=255)),
                ("brand_name", models.CharField(max_length=255)),
                ("support_email", models.EmailField(blank=True, default="", max_length=254)),
                ("phone_number", models.CharField(max_length=32)),
                ("two_factor_enabled", models.BooleanField(default=False)),
                (
                    "otp",
                    models.CharField(
                        blank=True, editable=False, help_text="Hashed one-time code", max_length=255, null=True
                    ),
                ),
                ("otp_expires_at", models.DateTimeField(blank=True, editable=False, null=True)),
                ("otp_verified", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("is_staff", models.BooleanField(default=False)),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text=(
                            "The groups this user belongs to. A user will get all permissions granted to each of "
                            "their groups."
                        ),
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "ordering": ["-date_joined"],
                "constraints": [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower("email"), name="unique_admin_email_case_insensitive"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("otp__isnull", True), ("otp_expires_at__isnull", True)),
                            models.Q(("otp__isnull", False), ("otp_expires_at__isnull", False)),
                            _connector="OR",
                        ),
                        name="admin_otp_and_expiry_set_together",
                    ),
                ],
            },
            managers=[
                ("objects", accounts.models.AdminUserManager()),
            ],
        ),
    ]
