"""Tasks for the authentication app."""

import structlog
from celery import shared_task
from django.conf import settings
from django.template.loader import render_to_string

from common.tasks import send_email

logger = structlog.get_logger(__name__)


@shared_task
def send_otp_email(email: str, full_name: str, otp: str) -> None:
    """Send a login one-time code."""
    logger.info("otp_email_sending", email=email)
    context = {
        "full_name": full_name,
        "otp": otp,
        "lifetime_minutes": int(settings.OTP_LIFETIME.total_seconds() // 60),
        "site_name": settings.SITE_NAME,
    }
    subject = render_to_string("accounts/emails/otp_subject.txt", context).strip()
    body = render_to_string("accounts/emails/otp_body.txt", context)
    html_body = render_to_string("accounts/emails/otp_body.html", context)
    send_email(to=email, subject=subject, body=body, html_body=html_body, from_email=settings.SECURITY_FROM_EMAIL)
    logger.info("otp_email_sent", email=email)
