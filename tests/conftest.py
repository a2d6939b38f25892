import pytest
from fastapi.testclient import TestClient

from checkout_service import main
from checkout_service.models import DraftOrderResult
from checkout_service.variants import VariantCache, VariantResolver
from .utils import SETTINGS, FakeCatalog, FakeMailer, RecordingShopify


@pytest.fixture
def draft_result():
    return DraftOrderResult(
        id=555,
        name="#D55",
        invoice_url="https://test-shop.myshopify.com/invoices/abc",
        total_price="1250.00",
    )


@pytest.fixture
def catalog():
    return FakeCatalog({
        "mesh": ("Mesh Panel", 111),
        "binder-kit": ("Binder Kit", 222),
    })


@pytest.fixture
def resolver(catalog):
    return VariantResolver(catalog, VariantCache())


@pytest.fixture
def shopify():
    return RecordingShopify(products={
        "mesh": ("Mesh Panel", 111),
        "binder-kit": ("Binder Kit", 222),
    })


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(shopify, mailer):
    cache = VariantCache()
    shopify_client = shopify.client()
    main.app.dependency_overrides[main.get_settings] = lambda: SETTINGS
    main.app.dependency_overrides[main.get_shopify_client] = lambda: shopify_client
    main.app.dependency_overrides[main.get_resolver] = lambda: VariantResolver(shopify_client, cache)
    main.app.dependency_overrides[main.get_mailer] = lambda: mailer
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()
