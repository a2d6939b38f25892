"""
draft_order.py — Draft Order Assembly

Combines the validated quote, its line items and the checkout mode into
the Shopify draft order payload. Pure data transformation, no failure mode.
"""

from typing import List

from .formatting import serialize_calculator_data
from .models import CheckoutMode, DraftOrderPayload, LineItem, NameValue, QuoteRequest, RealProducts

DEFAULT_CURRENCY = "USD"


def build_tags(calculator_type, mode: CheckoutMode) -> str:
    return f"calculator-order,calculator-{calculator_type or 'unknown'},{mode.kind}"


def build_note(request: QuoteRequest, mode: CheckoutMode) -> str:
    header = f"Calculator Order - {request.calculatorType or 'Calculator'}"
    if isinstance(mode, RealProducts):
        header += f" ({len(mode.items)} product line(s))"
    # Calculator data is attached in both modes for internal audit
    return f"{header}\n\nCalculation Details:\n{serialize_calculator_data(request.calculator_data)}"


def build_note_attributes(request: QuoteRequest) -> List[NameValue]:
    attributes = []
    if request.customerName:
        attributes.append(NameValue(name="Customer Name", value=request.customerName))
    if request.accountManagerName:
        attributes.append(NameValue(name="Account Manager", value=request.accountManagerName))
    if request.accountManagerEmail:
        attributes.append(NameValue(name="Account Manager Email", value=request.accountManagerEmail))
    if request.shippingValidityHours is not None:
        attributes.append(NameValue(name="Shipping Validity Hours",
                                    value=f"{request.shippingValidityHours:g}"))
    return attributes


def assemble(request: QuoteRequest, line_items: List[LineItem], mode: CheckoutMode) -> DraftOrderPayload:
    """
    Builds the draft order request body.

    Args:
        request (QuoteRequest): The validated quote.
        line_items (list): Items from the line item builder, attached verbatim.
        mode (CheckoutMode): Adds the mode tag and shapes the note header.

    Returns:
        DraftOrderPayload: Ready to send to Shopify.
    """
    return DraftOrderPayload(
        currency=request.currency or DEFAULT_CURRENCY,
        tags=build_tags(request.calculatorType, mode),
        note=build_note(request, mode),
        note_attributes=build_note_attributes(request),
        line_items=line_items,
        email=request.customerEmail or None,
    )
