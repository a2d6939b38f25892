"""
line_items.py — Line Item Construction

Builds the draft order line items for both checkout modes:
    • Legacy quote: one synthetic, untracked item priced at the quote total.
    • Real products: one item per requested product, billed by variant id.
"""

import logging
import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Dict, List, Optional

from .errors import ValidationError
from .formatting import calculator_properties
from .models import CustomLineItem, ItemRequest, NameValue, VariantLineItem
from .variants import VariantResolver

log = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_finite_number(value: Any) -> Optional[float]:
    """
    Returns value as a finite float, or None if it is not a usable number.
    Numeric strings are accepted; booleans are not.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_total_price(total_price: Any) -> float:
    """
    Raises:
        ValidationError: Unless total_price is a finite number greater than zero.
    """
    price = to_finite_number(total_price)
    if price is None or price <= 0:
        raise ValidationError("Invalid totalPrice: a number greater than zero is required")
    return price


def format_price(price: float) -> str:
    value = Decimal(str(price))
    sign, digits, exponent = value.as_tuple()
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the cents
        ctx.prec = max(ctx.prec, len(digits) + max(exponent, 0) + 3)
        return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def round_quantity(quantity: float) -> int:
    # Half-up; a positive quantity never drops to zero
    return max(1, int(math.floor(quantity + 0.5)))


def usable_items(items: Optional[List[ItemRequest]]) -> List[ItemRequest]:
    """Drops items with a blank handle or a quantity that is not a positive number."""
    usable = []
    for item in items or []:
        handle = (item.handle or "").strip()
        quantity = to_finite_number(item.quantity)
        if not handle or quantity is None or quantity <= 0:
            log.info(f"Überspringe unbrauchbaren Artikel: handle={item.handle!r}, quantity={item.quantity!r}")
            continue
        usable.append(ItemRequest(handle=handle, quantity=quantity))
    return usable


def build_legacy(calculator_type: Optional[str], calculator_data: Dict[str, Any],
                 total_price: Any) -> List[CustomLineItem]:
    """
    Builds the single synthetic line item of a legacy quote.

    Args:
        calculator_type (str): Used in the title and the first property.
        calculator_data (dict): Every non-reserved entry becomes a property.
        total_price (Any): Quote total; must be a finite number > 0.

    Returns:
        list[CustomLineItem]: Exactly one item.

    Raises:
        ValidationError: If total_price is unusable.
    """
    price = parse_total_price(total_price)

    properties = [NameValue(name="Calculator Type", value=calculator_type or "Calculator Order")]
    properties.extend(calculator_properties(calculator_data))
    properties.append(NameValue(name="Quote Date", value=datetime.now(timezone.utc).isoformat()))

    return [CustomLineItem(
        title=f"{calculator_type or 'Calculator'} Quote Order",
        price=format_price(price),
        quantity=1,
        requires_shipping=False,
        taxable=True,
        properties=properties,
    )]


def build_from_items(items: List[ItemRequest], resolver: VariantResolver) -> List[VariantLineItem]:
    """
    Builds one line item per usable item, resolving handles one at a time
    in input order. Unusable items are skipped silently; the caller rejects
    an empty result.

    Raises:
        NotFoundError / UpstreamError: From handle resolution.
    """
    line_items = []
    for item in usable_items(items):
        variant = resolver.resolve(item.handle)
        line_items.append(VariantLineItem(
            variant_id=variant.variant_id,
            quantity=round_quantity(item.quantity),
        ))
    return line_items
