import logging

from checkout_service.errors import NotificationError
from checkout_service.models import ItemRequest, LegacyQuote, QuoteRequest, RealProducts
from checkout_service.notifications import (
    LEGACY_ITEM_LINE,
    collect_recipients,
    compose,
    notify_order_created,
)
from .utils import FakeMailer


def test_recipients_deduplicated_lowercased_and_filtered():
    recipients = collect_recipients(["A@x.com", "a@x.com", "bad"], "b@x.com")

    assert recipients == ["a@x.com", "b@x.com"]


def test_compose_without_recipients_returns_none(draft_result, resolver):
    request = QuoteRequest(totalPrice=10, notifyEmails=["nobody"])

    assert compose(request, draft_result, LegacyQuote(total_price=10), resolver) is None


def test_compose_legacy(draft_result, resolver, catalog):
    request = QuoteRequest(
        calculatorType="Mesh",
        calculatorData={"panelCount": 4},
        totalPrice=1250,
        customerName="Pat",
        customerEmail="pat@example.com",
        accountManagerName="Sam",
        accountManagerEmail="Sam@Example.com",
    )
    notification = compose(request, draft_result, LegacyQuote(total_price=1250), resolver)

    assert notification.recipients == ["sam@example.com"]
    assert notification.subject == "[Mesh] Checkout link created: #D55"
    assert "valid for 72 hours" in notification.text
    assert draft_result.invoice_url in notification.text
    assert draft_result.invoice_url in notification.html
    assert LEGACY_ITEM_LINE in notification.text
    assert "Pat <pat@example.com>" in notification.text
    assert '"panelCount": 4' in notification.text
    assert catalog.calls == []


def test_compose_real_products_reuses_cache(draft_result, resolver, catalog):
    resolver.resolve("mesh")
    request = QuoteRequest(
        calculatorType="Mesh",
        items=[ItemRequest(handle="mesh", quantity=2.7)],
        notifyEmails=["ops@example.com"],
        shippingValidityHours=24,
    )
    mode = RealProducts(items=request.items)
    notification = compose(request, draft_result, mode, resolver)

    assert "Mesh Panel (mesh) — Qty: 3" in notification.text
    assert "valid for 24 hours" in notification.text
    assert catalog.calls == ["mesh"]


def test_html_body_is_escaped(draft_result, resolver):
    request = QuoteRequest(
        calculatorType="<b>Mesh</b>",
        totalPrice=5,
        notifyEmails=["ops@example.com"],
    )
    notification = compose(request, draft_result, LegacyQuote(total_price=5), resolver)

    assert "<b>Mesh</b>" not in notification.html
    assert "&lt;b&gt;Mesh&lt;/b&gt;" in notification.html


def test_notify_sends_once(draft_result, resolver):
    mailer = FakeMailer()
    request = QuoteRequest(totalPrice=5, notifyEmails=["ops@example.com"])

    notify_order_created(request, draft_result, LegacyQuote(total_price=5), resolver, mailer)

    assert len(mailer.sent) == 1


def test_notify_swallows_mail_failure(draft_result, resolver, caplog):
    mailer = FakeMailer(error=NotificationError("smtp down"))
    request = QuoteRequest(totalPrice=5, notifyEmails=["ops@example.com"])

    with caplog.at_level(logging.ERROR):
        notify_order_created(request, draft_result, LegacyQuote(total_price=5), resolver, mailer)

    assert "Benachrichtigung fehlgeschlagen" in caplog.text


def test_notify_swallows_lookup_failure(draft_result, resolver):
    mailer = FakeMailer()
    request = QuoteRequest(items=[ItemRequest(handle="unknown", quantity=1)],
                           notifyEmails=["ops@example.com"])

    notify_order_created(request, draft_result, RealProducts(items=request.items), resolver, mailer)

    assert mailer.sent == []


def test_notify_without_mailer_is_noop(draft_result, resolver):
    request = QuoteRequest(totalPrice=5, notifyEmails=["ops@example.com"])

    notify_order_created(request, draft_result, LegacyQuote(total_price=5), resolver, None)
