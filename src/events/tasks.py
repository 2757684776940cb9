import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from events.models import Buyer
from events.utils import create_ticket_pdf, ticket_context

logger = structlog.get_logger(__name__)


@shared_task
def send_ticket_email(buyer_id: str) -> None:
    """Email a ticket holder their ticket, with the PDF attached."""
    buyer = Buyer.objects.select_related("transaction__event", "transaction__tier").get(pk=buyer_id)
    logger.info("ticket_email_sending", buyer_id=buyer_id, ticket_code=buyer.ticket_code)

    context = ticket_context(buyer)
    subject = render_to_string("events/emails/ticket_subject.txt", context).strip()
    body = render_to_string("events/emails/ticket_body.txt", context)
    html_body = render_to_string("events/emails/ticket_body.html", context)

    email_msg = EmailMultiAlternatives(
        subject=subject,
        body=body,
        from_email=settings.TICKETS_FROM_EMAIL,
        to=[buyer.email],
    )
    email_msg.attach_alternative(html_body, "text/html")
    email_msg.attach(f"ticket-{buyer.ticket_code}.pdf", create_ticket_pdf(buyer), "application/pdf")
    email_msg.send(fail_silently=False)
    logger.info("ticket_email_sent", buyer_id=buyer_id, ticket_code=buyer.ticket_code)
