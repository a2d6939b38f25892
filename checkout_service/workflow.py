"""
workflow.py — Core Orchestration Logic for Checkout Creation

This module sequences the checkout pipeline for a single quote request.

Workflow Overview:
1. Validate the quote and decide the checkout mode (legacy quote or real products)
2. Build the line items (resolving product handles in real-products mode)
3. Assemble the draft order payload
4. Create the draft order on Shopify (exactly one call, no retries)
5. Return the checkout URL; the caller schedules the notification

Validation failures short-circuit before any outbound call.
"""

import logging
from typing import Optional

from . import draft_order, line_items
from .errors import ValidationError
from .models import CheckoutMode, CheckoutResponse, DraftOrderResult, LegacyQuote, QuoteRequest, RealProducts
from .variants import VariantResolver

log = logging.getLogger(__name__)


def select_mode(request: QuoteRequest) -> CheckoutMode:
    """
    Decides the checkout mode once.

    A non-empty `items` list commits the request to real-products mode; if
    none of its items is usable the request fails instead of falling back
    to the quote total. Otherwise `totalPrice` must hold a positive number.

    Raises:
        ValidationError: No usable items, or an invalid/missing totalPrice.
    """
    if request.items:
        items = line_items.usable_items(request.items)
        if not items:
            raise ValidationError("No valid items: each item needs a handle and a quantity greater than zero")
        return RealProducts(items=items)
    return LegacyQuote(total_price=line_items.parse_total_price(request.totalPrice))


def build_line_items(request: QuoteRequest, mode: CheckoutMode, resolver: VariantResolver):
    if isinstance(mode, RealProducts):
        items = line_items.build_from_items(mode.items, resolver)
        if not items:
            raise ValidationError("No valid items to order")
        return items
    return line_items.build_legacy(request.calculatorType, request.calculator_data, mode.total_price)


def process_checkout(request: QuoteRequest, shopify, resolver: VariantResolver, mode: Optional[CheckoutMode] = None):
    """
    Executes the checkout pipeline for one quote.

    Args:
        request (QuoteRequest): Parsed widget payload.
        shopify (ShopifyClient): Draft order collaborator.
        resolver (VariantResolver): Handle resolution with its cache.
        mode (CheckoutMode): Mode already decided by the caller, if any.

    Returns:
        tuple[CheckoutResponse, DraftOrderResult, CheckoutMode]: The body for
        the widget plus what the notification needs.

    Raises:
        ValidationError: Before any outbound call for bad input.
        NotFoundError: If a requested handle has no purchasable variant.
        UpstreamError: If Shopify rejects a lookup or the draft order.
    """
    log_prefix = f"[Quote: {request.calculatorType or 'unknown'}]"

    if mode is None:
        mode = select_mode(request)
    log.info(f"{log_prefix} Starte Verarbeitung im Modus '{mode.kind}'.")

    items = build_line_items(request, mode, resolver)
    log.info(f"{log_prefix} {len(items)} Position(en) erstellt.")

    payload = draft_order.assemble(request, items, mode)
    draft: DraftOrderResult = shopify.create_draft_order(payload)
    log.info(f"[Draft: {draft.name}] Draft Order {draft.id} angelegt, Checkout-URL erstellt.")

    response = CheckoutResponse(
        checkoutUrl=draft.invoice_url,
        draftOrderId=draft.id,
        orderName=draft.name,
        totalPrice=draft.total_price,
    )
    return response, draft, mode
