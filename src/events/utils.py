import base64
import typing as t
from io import BytesIO
from urllib.parse import urlencode

import qrcode
from django.conf import settings
from django.template.loader import render_to_string
from weasyprint import HTML

from .models import Buyer


def build_qr_payload(txn_id: str, ticket_code: str) -> str:
    """The check-in URL encoded into a ticket's QR code."""
    query = urlencode({"txnId": txn_id, "ticketId": ticket_code})
    return f"{settings.TICKET_CHECK_IN_URL}?{query}"


def _qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffered = BytesIO()
    img.save(buffered, "PNG")
    return buffered.getvalue()


def make_qr_data_url(data: str) -> str:
    """Render ``data`` as a QR code PNG data URL."""
    return "data:image/png;base64," + base64.b64encode(_qr_png(data)).decode("utf-8")


def ticket_context(buyer: Buyer) -> dict[str, t.Any]:
    """Template context shared by the ticket PDF and the ticket email."""
    transaction = buyer.transaction
    event = transaction.event
    tier = transaction.tier
    return {
        "site_name": settings.SITE_NAME,
        "buyer_name": buyer.full_name,
        "ticket_code": buyer.ticket_code,
        "txn_id": transaction.txn_id,
        "event_title": event.title,
        "event_theme": event.theme,
        "venue": event.venue,
        "address": event.address,
        "start_datetime": event.start.strftime("%A, %B %d, %Y at %I:%M %p %Z"),
        "tier_name": tier.name,
        "price": tier.price,
        "currency": tier.currency,
        "benefits": tier.benefits,
        "qr_code_data_url": buyer.qr_code or make_qr_data_url(buyer.qr_payload),
    }


def create_ticket_pdf(buyer: Buyer) -> bytes:
    """Generates a PDF version of a ticket using weasyprint.

    Args:
        buyer: The ticket holder, expected to have its transaction, event and tier prefetched.

    Returns:
        The PDF content as bytes.
    """
    html_string = render_to_string("events/ticket.html", context=ticket_context(buyer))
    html = HTML(string=html_string)
    return t.cast(bytes, html.write_pdf())
