import json

import httpx

from checkout_service.clients import ShopifyClient
from checkout_service.config import Settings
from checkout_service.models import CatalogLookupResult


SETTINGS = Settings(shop_name="test-shop", access_token="shpat_test")


class FakeCatalog:
    """Catalog stub counting lookups per handle."""

    def __init__(self, products=None):
        self.products = products or {}
        self.calls = []

    def lookup_product_by_handle(self, handle):
        self.calls.append(handle)
        title, variant_id = self.products.get(handle, (None, None))
        return CatalogLookupResult(title=title, variant_id=variant_id)


class FakeMailer:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send(self, notification):
        if self.error:
            raise self.error
        self.sent.append(notification)


class RecordingShopify:
    """Records outbound Shopify traffic behind an httpx.MockTransport."""

    def __init__(self, products=None, draft_status=201, draft_body=None):
        self.products = products or {}
        self.draft_status = draft_status
        self.draft_body = draft_body
        self.requests = []

    def paths(self):
        return [r.url.path for r in self.requests]

    def handler(self, request):
        self.requests.append(request)
        if request.url.path.endswith("/graphql.json"):
            handle = json.loads(request.content)["variables"]["handle"]
            if handle not in self.products:
                return httpx.Response(200, json={"data": {"productByHandle": None}})
            title, variant_id = self.products[handle]
            return httpx.Response(200, json={"data": {"productByHandle": {
                "title": title,
                "variants": {"edges": [{"node": {
                    "id": f"gid://shopify/ProductVariant/{variant_id}",
                    "legacyResourceId": str(variant_id),
                }}]},
            }}})
        body = self.draft_body or {"draft_order": {
            "id": 555,
            "name": "#D55",
            "invoice_url": "https://test-shop.myshopify.com/invoices/abc",
            "total_price": "1250.00",
        }}
        return httpx.Response(self.draft_status, json=body)

    def client(self):
        http_client = httpx.Client(
            base_url=SETTINGS.admin_api_base,
            transport=httpx.MockTransport(self.handler),
        )
        return ShopifyClient(SETTINGS, http_client=http_client)


