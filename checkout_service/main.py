"""
main.py — FastAPI Entry Point for the Checkout Service

This module provides the REST API used by the storefront calculator widget.
It turns a calculator quote (or an explicit product list) into a payable
Shopify draft order and returns its invoice URL.

Responsibilities:
    • Accept quotes via HTTP API (POST, CORS preflight via OPTIONS)
    • Run the checkout workflow and map its outcome to a JSON response
    • Schedule the internal notification as a background task
    • Provide system health information
"""

from typing import Dict, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .clients import ShopifyClient, SmtpMailer
from .config import Settings, load_settings
from .errors import CheckoutError, InternalError
from .logging_config import get_logger, setup_logging
from .models import QuoteRequest
from .notifications import notify_order_created
from .variants import VariantResolver, process_cache
from .workflow import process_checkout, select_mode

CHECKOUT_PATH = "/api/create-checkout"

# Initialization
# Configure logging and initialize FastAPI app
setup_logging()
log = get_logger(__name__)
app = FastAPI(title="Calculator Checkout Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# Exception mapping: the widget always receives a JSON body on failure
@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    log.warning(f"Ungültiger Request-Body: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


# Dependencies
def get_settings() -> Settings:
    return load_settings()


# One client per settings for the life of the process, closed on shutdown
_shopify_clients: Dict[Settings, ShopifyClient] = {}


def get_shopify_client(settings: Settings = Depends(get_settings)) -> Optional[ShopifyClient]:
    """
    Returns the process-wide Shopify client, or None while the credentials
    are missing. The endpoint reports missing credentials after validating
    the quote.
    """
    if not settings.shopify_configured:
        return None
    if settings not in _shopify_clients:
        _shopify_clients[settings] = ShopifyClient(settings)
    return _shopify_clients[settings]


def get_resolver(shopify: Optional[ShopifyClient] = Depends(get_shopify_client)) -> VariantResolver:
    return VariantResolver(shopify, process_cache)


def get_mailer(settings: Settings = Depends(get_settings)) -> Optional[SmtpMailer]:
    return SmtpMailer(settings) if settings.mail_enabled else None


# API Endpoint: Calculator widget → Checkout Service
@app.post(CHECKOUT_PATH)
def create_checkout(
        quote: QuoteRequest,
        background_tasks: BackgroundTasks,
        settings: Settings = Depends(get_settings),
        shopify: Optional[ShopifyClient] = Depends(get_shopify_client),
        resolver: VariantResolver = Depends(get_resolver),
        mailer: Optional[SmtpMailer] = Depends(get_mailer),
):
    """
    Creates a draft order for the posted quote and returns its checkout URL.

    Args:
        quote (QuoteRequest): Validated widget payload.
        background_tasks (BackgroundTasks): Runs the notification after the response.

    Returns:
        dict: success, checkoutUrl, draftOrderId, orderName, totalPrice.

    Raises:
        ValidationError (400), NotFoundError (400), UpstreamError (Shopify's status),
        ConfigurationError (500), InternalError (500).
    """
    log_prefix = f"[Quote: {quote.calculatorType or 'unknown'}]"
    log.info(f"{log_prefix} Neue Checkout-Anfrage erhalten.")

    try:
        mode = select_mode(quote)
        settings.require_shopify()
        response, draft, mode = process_checkout(quote, shopify, resolver, mode=mode)
    except CheckoutError as e:
        log.warning(f"{log_prefix} Checkout abgelehnt ({e.status_code}): {e.message}")
        raise
    except Exception as e:
        log.critical(f"{log_prefix} Unbekannter Fehler im Checkout: {e}", exc_info=True)
        raise InternalError(str(e)) from e

    background_tasks.add_task(notify_order_created, quote, draft, mode, resolver, mailer)
    return response.model_dump()


@app.on_event("shutdown")
def on_shutdown():
    """Closes the cached Shopify clients."""
    for client in _shopify_clients.values():
        client.close()
    _shopify_clients.clear()
    log.info("Checkout-Service gestoppt, Shopify-Clients geschlossen.")


@app.options(CHECKOUT_PATH)
def create_checkout_preflight():
    return Response(status_code=200)


# Health Check Endpoint
@app.get("/health")
def health_check():
    """
    Simple health check endpoint for monitoring systems and container orchestrators.

    Returns:
        dict: A basic JSON object indicating service availability.
    """
    return {"status": "ok"}
