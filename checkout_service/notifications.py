"""
notifications.py — Internal Order Notification

Composes the email sent to account managers and extra recipients after a
draft order was created, and sends it best-effort.

Notification never affects the checkout response: composition and delivery
failures are logged and dropped.
"""

import html
import logging
from typing import Iterable, List, Optional

from .formatting import serialize_calculator_data
from .line_items import round_quantity, usable_items
from .models import CheckoutMode, DraftOrderResult, NotificationPayload, QuoteRequest, RealProducts
from .variants import VariantResolver

log = logging.getLogger(__name__)

DEFAULT_SHIPPING_VALIDITY_HOURS = 72
LEGACY_ITEM_LINE = "Custom quote (single calculated line item)"


def collect_recipients(notify_emails: Iterable[str], account_manager_email: Optional[str]) -> List[str]:
    """Lowercased, deduplicated addresses containing '@', in first-seen order."""
    candidates = list(notify_emails or [])
    if account_manager_email:
        candidates.append(account_manager_email)

    recipients = []
    for address in candidates:
        address = (address or "").strip().lower()
        if "@" in address and address not in recipients:
            recipients.append(address)
    return recipients


def _identity(name: Optional[str], email: Optional[str]) -> str:
    parts = [name or "", f"<{email}>" if email else ""]
    return " ".join(p for p in parts if p) or "-"


def item_lines(mode: CheckoutMode, resolver: VariantResolver) -> List[str]:
    if not isinstance(mode, RealProducts):
        return [LEGACY_ITEM_LINE]
    lines = []
    for item in usable_items(mode.items):
        variant = resolver.resolve(item.handle)
        lines.append(f"{variant.title} ({variant.handle}) — Qty: {round_quantity(item.quantity)}")
    return lines


def compose(request: QuoteRequest, draft: DraftOrderResult, mode: CheckoutMode,
            resolver: VariantResolver) -> Optional[NotificationPayload]:
    """
    Builds the notification, or returns None when nobody is to be notified.

    Handles are re-resolved through the resolver, which answers from its
    cache for every handle the line item builder already resolved.
    """
    recipients = collect_recipients(request.notifyEmails, request.accountManagerEmail)
    if not recipients:
        return None

    calculator_type = request.calculatorType or "Calculator"
    hours = request.shippingValidityHours
    if hours is None:
        hours = DEFAULT_SHIPPING_VALIDITY_HOURS
    shipping_note = f"Shipping quote is valid for {hours:g} hours."

    details = [
        ("Order", draft.name),
        ("Checkout URL", draft.invoice_url),
        ("Total", f"{draft.total_price} {request.currency or 'USD'}"),
        ("Customer", _identity(request.customerName, request.customerEmail)),
        ("Account Manager", _identity(request.accountManagerName, request.accountManagerEmail)),
    ]
    lines = item_lines(mode, resolver)
    calculator_json = serialize_calculator_data(request.calculator_data)

    text = "\n".join(
        [f"New {calculator_type} checkout link created.", "", shipping_note, ""]
        + [f"{label}: {value}" for label, value in details]
        + ["", "Items:"]
        + [f"  - {line}" for line in lines]
        + ["", "Calculator Data:", calculator_json]
    )

    detail_rows = "".join(
        f"<tr><th align=\"left\">{html.escape(label)}</th><td>{html.escape(str(value))}</td></tr>"
        for label, value in details
    )
    item_rows = "".join(f"<li>{html.escape(line)}</li>" for line in lines)
    html_body = (
        f"<h2>New {html.escape(calculator_type)} checkout link created</h2>"
        f"<p><strong>{html.escape(shipping_note)}</strong></p>"
        f"<table>{detail_rows}</table>"
        f"<p><a href=\"{html.escape(draft.invoice_url)}\">Open checkout</a></p>"
        f"<h3>Items</h3><ul>{item_rows}</ul>"
        f"<h3>Calculator Data</h3><pre>{html.escape(calculator_json)}</pre>"
    )

    return NotificationPayload(
        recipients=recipients,
        subject=f"[{calculator_type}] Checkout link created: {draft.name}",
        html=html_body,
        text=text,
    )


def notify_order_created(request: QuoteRequest, draft: DraftOrderResult, mode: CheckoutMode,
                         resolver: VariantResolver, mailer):
    """
    Composes and sends the notification. Runs after the response was built;
    every failure ends here as a log entry.
    """
    log_prefix = f"[Draft: {draft.name}]"
    if mailer is None:
        log.info(f"{log_prefix} Kein SMTP konfiguriert, Benachrichtigung übersprungen.")
        return
    try:
        notification = compose(request, draft, mode, resolver)
        if notification is None:
            log.info(f"{log_prefix} Keine gültigen Empfänger, keine Benachrichtigung.")
            return
        mailer.send(notification)
        log.info(f"{log_prefix} Benachrichtigung versendet an {', '.join(notification.recipients)}.")
    except Exception:
        log.exception(f"{log_prefix} Benachrichtigung fehlgeschlagen.")
