import typing as t
import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone


class AdminUserManager(BaseUserManager["AdminUser"]):
    def get_by_email(self, email: str) -> "AdminUser | None":
        """Case-insensitive lookup; ``None`` when no such admin exists."""
        return self.filter(email=normalize_email(email)).first()

    def create_user(self, email: str, password: str | None = None, **extra_fields: t.Any) -> "AdminUser":
        """Create an admin with a hashed password."""
        if not email:
            raise ValueError("An email address is required.")
        user = self.model(email=normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: t.Any) -> "AdminUser":
        """Create a Django-admin capable user."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra_fields)


def normalize_email(email: str) -> str:
    """Emails are unique regardless of case, so they are stored lower-cased."""
    return email.strip().lower()


class AdminUser(AbstractBaseUser, PermissionsMixin):
    """The organization principal that runs events and sells tickets."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, help_text="Login email, stored lower-cased")
    full_name = models.CharField(max_length=255)
    brand_name = models.CharField(max_length=255)
    support_email = models.EmailField(blank=True, default="")
    phone_number = models.CharField(max_length=32)
    two_factor_enabled = models.BooleanField(default=False)

    otp = models.CharField(max_length=255, null=True, blank=True, editable=False, help_text="Hashed one-time code")
    otp_expires_at = models.DateTimeField(null=True, blank=True, editable=False)
    otp_verified = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = AdminUserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["full_name", "brand_name", "phone_number"]

    class Meta:
        ordering = ["-date_joined"]
        constraints = [
            models.UniqueConstraint(Lower("email"), name="unique_admin_email_case_insensitive"),
            models.CheckConstraint(
                condition=(
                    models.Q(otp__isnull=True, otp_expires_at__isnull=True)
                    | models.Q(otp__isnull=False, otp_expires_at__isnull=False)
                ),
                name="admin_otp_and_expiry_set_together",
            ),
        ]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Normalize the email before persisting."""
        if self.email:
            self.email = normalize_email(self.email)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.full_name} <{self.email}>"

    @property
    def has_pending_otp(self) -> bool:
        """Whether an OTP has been issued and not yet consumed."""
        return self.otp is not None and self.otp_expires_at is not None

    def otp_is_expired(self, now: t.Any = None) -> bool:
        """True when no OTP is pending or the pending one has expired."""
        if not self.has_pending_otp:
            return True
        return (now or timezone.now()) >= t.cast(t.Any, self.otp_expires_at)

    def clear_otp(self) -> None:
        """Consume the pending OTP."""
        self.otp = None
        self.otp_expires_at = None
