"""
This module provides communication clients for the external systems used by the checkout service:
- Shopify Admin API (GraphQL product lookup, REST draft order creation)
- SMTP server (internal order notifications)
Each class encapsulates its protocol logic, error handling, and connection management.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from .config import Settings
from .errors import NotificationError, UpstreamError
from .models import CatalogLookupResult, DraftOrderPayload, DraftOrderResult, NotificationPayload

log = logging.getLogger(__name__)

PRODUCT_BY_HANDLE_QUERY = """
query productByHandle($handle: String!) {
  productByHandle(handle: $handle) {
    title
    variants(first: 1) {
      edges {
        node {
          id
          legacyResourceId
        }
      }
    }
  }
}
"""


def _error_details(response: httpx.Response):
    try:
        body = response.json()
    except ValueError:
        return (response.text or "").strip()[:300] or None
    if isinstance(body, dict) and "errors" in body:
        return body["errors"]
    return body


def _json_object(response: httpx.Response, what: str) -> dict:
    """Returns the JSON object body of a success reply or raises UpstreamError."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        log.error(f"Shopify lieferte keine JSON-Antwort ({what}, HTTP {response.status_code}).")
        raise UpstreamError("Invalid response from Shopify", status_code=502,
                            details=(response.text or "").strip()[:300] or None)
    return body


def _parse_variant_id(node: dict) -> Optional[int]:
    raw = node.get("legacyResourceId") or (node.get("id") or "").rsplit("/", 1)[-1]
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


# --- Shopify Admin API Client (GraphQL + REST) ---
class ShopifyClient:
    """
    Client for the Shopify Admin API.
    Looks up products by handle and creates draft orders.
    """
    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        """
        Initializes the HTTP client against the shop's Admin API base URL.

        Args:
            settings (Settings): Shop identity, token, API version and timeout.
            http_client (httpx.Client): Optional preconfigured client. Its
                base_url must point at the Admin API version root.
        """
        headers = {
            "X-Shopify-Access-Token": settings.access_token,
            "Content-Type": "application/json",
        }
        if http_client is None:
            http_client = httpx.Client(
                base_url=settings.admin_api_base,
                timeout=httpx.Timeout(settings.timeout_seconds),
            )
        http_client.headers.update(headers)
        self.client = http_client

    def close(self):
        self.client.close()

    def _post(self, path: str, payload: dict, what: str) -> httpx.Response:
        try:
            return self.client.post(path, json=payload)
        except httpx.RequestError as e:
            log.error(f"Shopify nicht erreichbar ({what}): {e}")
            raise UpstreamError("Shopify unreachable", status_code=502, details=str(e))

    def lookup_product_by_handle(self, handle: str) -> CatalogLookupResult:
        """
        Looks up a product's title and first variant id by handle.
        Args:
            handle (str): Product handle, already trimmed.
        Returns:
            CatalogLookupResult: Empty fields when the product or variant does not exist.
        Raises:
            UpstreamError: On a non-success status or a GraphQL error list.
        """
        response = self._post(
            "/graphql.json",
            {"query": PRODUCT_BY_HANDLE_QUERY, "variables": {"handle": handle}},
            what=f"product {handle}",
        )
        if response.is_error:
            log.error(f"[Handle: {handle}] Produktabfrage fehlgeschlagen (HTTP {response.status_code}).")
            raise UpstreamError("Product lookup failed", status_code=response.status_code,
                                details=_error_details(response))

        body = _json_object(response, what=f"product {handle}")
        if body.get("errors"):
            log.error(f"[Handle: {handle}] GraphQL-Fehler: {body['errors']}")
            raise UpstreamError("Product lookup failed", status_code=502, details=body["errors"])

        product = (body.get("data") or {}).get("productByHandle")
        if not product:
            return CatalogLookupResult()

        edges = (product.get("variants") or {}).get("edges") or []
        variant_id = _parse_variant_id(edges[0].get("node") or {}) if edges else None
        return CatalogLookupResult(title=product.get("title"), variant_id=variant_id)

    def create_draft_order(self, payload: DraftOrderPayload) -> DraftOrderResult:
        """
        Creates a draft order via the REST Admin API.
        Args:
            payload (DraftOrderPayload): The assembled draft order.
        Returns:
            DraftOrderResult: id, name, invoice URL and total of the created draft.
        Raises:
            UpstreamError: With Shopify's own status and error details on failure.
        """
        response = self._post("/draft_orders.json", payload.to_request_body(), what="draft order")
        if response.is_error:
            details = _error_details(response)
            log.error(f"Shopify API Fehler beim Anlegen der Draft Order (HTTP {response.status_code}): {details}")
            raise UpstreamError("Failed to create order", status_code=response.status_code, details=details)

        draft = _json_object(response, what="draft order").get("draft_order") or {}
        try:
            return DraftOrderResult.model_validate(draft)
        except PydanticValidationError as e:
            log.error(f"Unvollständige Draft Order von Shopify erhalten: {e}")
            raise UpstreamError("Failed to create order", status_code=502,
                                details="Incomplete draft order in Shopify response")


# --- SMTP Mailer ---
class SmtpMailer:
    """
    Mail collaborator. Delivers one composed notification per call or raises.
    No retries.
    """
    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_pass
        self.sender = settings.smtp_from or settings.smtp_user
        self.timeout = settings.timeout_seconds

    def build_message(self, notification: NotificationPayload) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = notification.subject
        message["From"] = self.sender
        message["To"] = ", ".join(notification.recipients)
        message.set_content(notification.text)
        message.add_alternative(notification.html, subtype="html")
        return message

    def send(self, notification: NotificationPayload):
        """
        Sends the notification.
        Raises:
            NotificationError: If connecting, authenticating or sending fails.
        """
        message = self.build_message(notification)
        try:
            if self.port == 465:
                server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
            else:
                server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            with server:
                if self.port != 465:
                    server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP delivery failed: {e}") from e
        log.info(f"Benachrichtigung an {len(notification.recipients)} Empfänger gesendet.")
