"""
mock_shopify.py — Mock Implementation of the Shopify Admin API

This module provides a simulated Shopify Admin API for local runs and the
end-to-end tests of the checkout service. It exposes a small FastAPI
application that mimics the two calls the service makes.

Simulation Scenarios:
    • Product lookup by handle (GraphQL)
        - handle contains "missing"       → no product
        - handle contains "no-variant"    → product without variants
        - handle contains "graphql-error" → GraphQL error list
        - any other handle                → product with one variant
    • Draft order creation (REST)
        - email contains "reject"         → HTTP 422 with Shopify-style errors
        - otherwise                       → created draft order with invoice URL
    • Missing access token                → HTTP 401

Endpoints:
    POST /admin/api/{version}/graphql.json
    POST /admin/api/{version}/draft_orders.json

Port:
    Default: 8002 (HTTP)
"""

import itertools
import logging
import zlib
from decimal import Decimal

from fastapi import FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse

app = FastAPI(title="Mock Shopify Admin API")
logging.basicConfig(level=logging.INFO)

VARIANT_UNIT_PRICE = Decimal("10.00")
_draft_ids = itertools.count(1001)


def variant_id_for(handle: str) -> int:
    """Stable numeric variant id per handle."""
    return zlib.crc32(handle.encode()) % 10_000_000 + 1


def _check_token(token):
    if not token:
        raise HTTPException(status_code=401, detail="[API] Invalid API key or access token")


@app.post("/admin/api/{version}/graphql.json")
def graphql(version: str, body: dict, x_shopify_access_token: str = Header(None)):
    _check_token(x_shopify_access_token)
    handle = ((body.get("variables") or {}).get("handle") or "")
    logging.info(f"[SHOPIFY] productByHandle({handle!r}) (API {version})")

    if "graphql-error" in handle:
        return {"errors": [{"message": "Throttled", "extensions": {"code": "THROTTLED"}}]}
    if "missing" in handle:
        return {"data": {"productByHandle": None}}

    edges = []
    if "no-variant" not in handle:
        variant_id = variant_id_for(handle)
        edges = [{"node": {"id": f"gid://shopify/ProductVariant/{variant_id}",
                           "legacyResourceId": str(variant_id)}}]
    title = handle.replace("-", " ").title()
    return {"data": {"productByHandle": {"title": title, "variants": {"edges": edges}}}}


@app.post("/admin/api/{version}/draft_orders.json")
def create_draft_order(version: str, body: dict, x_shopify_access_token: str = Header(None)):
    _check_token(x_shopify_access_token)
    draft = body.get("draft_order") or {}

    if "reject" in (draft.get("email") or ""):
        logging.warning("[SHOPIFY] Draft Order abgelehnt (E-Mail ungültig).")
        return JSONResponse(status_code=422, content={"errors": {"email": ["is invalid"]}})

    total = Decimal("0")
    for item in draft.get("line_items") or []:
        unit_price = Decimal(item["price"]) if "price" in item else VARIANT_UNIT_PRICE
        total += unit_price * int(item.get("quantity", 1))

    draft_id = next(_draft_ids)
    logging.info(f"[SHOPIFY] Draft Order {draft_id} angelegt (Summe {total:.2f}).")
    return JSONResponse(status_code=201, content={"draft_order": {
        "id": draft_id,
        "name": f"#D{draft_id}",
        "invoice_url": f"https://mock-shop.myshopify.com/invoices/{draft_id}",
        "total_price": f"{total:.2f}",
        "currency": draft.get("currency", "USD"),
        "tags": draft.get("tags", ""),
        "line_items": draft.get("line_items", []),
    }})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8002)
