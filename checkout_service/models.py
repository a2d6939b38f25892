"""
models.py — Data Models for Checkout Creation

This module defines the data structures used along the checkout pipeline.
It uses Pydantic models for the inbound quote payload, the Shopify wire
shapes, and the results handed between pipeline stages.

Models:
    - ItemRequest / QuoteRequest: The inbound payload from the calculator widget.
    - LegacyQuote / RealProducts: The checkout mode, decided once during validation.
    - CatalogLookupResult / ResolvedVariant: Product handle resolution.
    - VariantLineItem / CustomLineItem / DraftOrderPayload: The draft order request body.
    - DraftOrderResult: The draft order returned by Shopify.
    - NotificationPayload: The internal email built after a successful checkout.
    - CheckoutResponse: The success body returned to the widget.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ItemRequest(BaseModel):
    """
    A product requested by the widget in real-products mode.

    Attributes:
        handle (str): Product handle. Blank handles are skipped, not rejected.
        quantity (Any): Requested quantity. Kept loose on purpose so that
            unusable values are filtered by the line item builder.
    """
    handle: Optional[str] = None
    quantity: Any = None


class QuoteRequest(BaseModel):
    """
    Represents a checkout request posted by the storefront calculator.

    Attributes:
        calculatorType (str): Calculator that produced the quote.
        calculatorData (dict): Arbitrary calculator inputs and outputs.
        totalPrice (Any): Quote total, required in legacy quote mode.
        currency (str): ISO 4217 currency code, defaults to USD downstream.
        customerEmail / customerName: Customer identity.
        accountManagerName / accountManagerEmail: Account manager identity.
        notifyEmails (list[str]): Extra internal notification recipients; nulls are skipped.
        items (list[ItemRequest]): Products to bill; switches to real-products mode.
        shippingValidityHours (float): How long the shipping quote stays valid.
    """
    model_config = ConfigDict(frozen=True)

    calculatorType: Optional[str] = None
    calculatorData: Optional[Dict[str, Any]] = None
    totalPrice: Any = None
    currency: Optional[str] = None
    customerEmail: Optional[str] = None
    customerName: Optional[str] = None
    accountManagerName: Optional[str] = None
    accountManagerEmail: Optional[str] = None
    notifyEmails: List[Optional[str]] = Field(default_factory=list)
    items: Optional[List[ItemRequest]] = None
    shippingValidityHours: Optional[float] = None

    @property
    def calculator_data(self) -> Dict[str, Any]:
        return self.calculatorData or {}


class LegacyQuote(BaseModel):
    """One synthetic line item priced at the calculator total."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["legacy-quote"] = "legacy-quote"
    total_price: float


class RealProducts(BaseModel):
    """One line item per usable requested product."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["real-products"] = "real-products"
    items: List[ItemRequest]


CheckoutMode = Union[LegacyQuote, RealProducts]


class CatalogLookupResult(BaseModel):
    """
    Raw answer of a product-by-handle lookup.

    Both fields are None when the handle matches no product; variant_id is
    None when the product has no variant.
    """
    title: Optional[str] = None
    variant_id: Optional[int] = None


class ResolvedVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    handle: str
    title: str
    variant_id: int = Field(..., gt=0)


class NameValue(BaseModel):
    name: str
    value: str


class VariantLineItem(BaseModel):
    variant_id: int
    quantity: int


class CustomLineItem(BaseModel):
    title: str
    price: str
    quantity: int = 1
    requires_shipping: bool = False
    taxable: bool = True
    properties: List[NameValue] = Field(default_factory=list)


LineItem = Union[VariantLineItem, CustomLineItem]


class DraftOrderPayload(BaseModel):
    """The body of a Shopify `draft_orders.json` create call."""
    currency: str
    tags: str
    note: str
    note_attributes: List[NameValue] = Field(default_factory=list)
    line_items: List[LineItem]
    email: Optional[str] = None
    use_customer_default_address: bool = True

    def to_request_body(self) -> dict:
        return {"draft_order": self.model_dump(exclude_none=True)}


class DraftOrderResult(BaseModel):
    """The subset of a created Shopify draft order used by the service."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: int
    name: str
    invoice_url: str
    total_price: str


class NotificationPayload(BaseModel):
    recipients: List[str]
    subject: str
    html: str
    text: str


class CheckoutResponse(BaseModel):
    success: bool = True
    checkoutUrl: str
    draftOrderId: int
    orderName: str
    totalPrice: str
