"""
config.py — Process Configuration

Reads the Shopify and SMTP settings from the environment (a local `.env`
file is loaded first, if present). Settings are read once per process;
only presence checks run per request.
"""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from .errors import ConfigurationError

load_dotenv()

DEFAULT_API_VERSION = "2024-10"


def _clean_env(name: str) -> str:
    return (os.environ.get(name) or "").strip().strip("'").strip('"')


class Settings(BaseModel):
    """
    Runtime configuration.

    Attributes:
        shop_name (str): Shop name or full `*.myshopify.com` domain.
        access_token (str): Admin API access token.
        api_version (str): Admin API version segment of the URL.
        timeout_seconds (float): Timeout for every Shopify call.
        smtp_host / smtp_port / smtp_user / smtp_pass / smtp_from: Mail transport.
    """
    model_config = ConfigDict(frozen=True)

    shop_name: str = ""
    access_token: str = ""
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: float = 10.0
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_from: Optional[str] = None

    @property
    def shop_domain(self) -> str:
        domain = self.shop_name
        if domain.startswith("https://"):
            domain = domain[len("https://"):]
        domain = domain.rstrip("/")
        if not domain.endswith(".myshopify.com"):
            domain = f"{domain}.myshopify.com"
        return domain

    @property
    def admin_api_base(self) -> str:
        return f"https://{self.shop_domain}/admin/api/{self.api_version}"

    @property
    def mail_enabled(self) -> bool:
        return bool(self.smtp_host)

    @property
    def shopify_configured(self) -> bool:
        return bool(self.shop_name and self.access_token)

    def require_shopify(self):
        """Raises ConfigurationError unless the Shopify credentials are present."""
        missing = [name for name, value in (
            ("SHOPIFY_SHOP_NAME", self.shop_name),
            ("SHOPIFY_ACCESS_TOKEN", self.access_token),
        ) if not value]
        if missing:
            raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")


def settings_from_env() -> Settings:
    """Builds Settings from the current environment without caching."""
    smtp_user = _clean_env("SMTP_USER") or None
    return Settings(
        shop_name=_clean_env("SHOPIFY_SHOP_NAME"),
        access_token=_clean_env("SHOPIFY_ACCESS_TOKEN"),
        api_version=_clean_env("SHOPIFY_API_VERSION") or DEFAULT_API_VERSION,
        timeout_seconds=float(_clean_env("SHOPIFY_TIMEOUT_SECONDS") or 10),
        smtp_host=_clean_env("SMTP_HOST") or None,
        smtp_port=int(_clean_env("SMTP_PORT") or 587),
        smtp_user=smtp_user,
        smtp_pass=_clean_env("SMTP_PASS") or None,
        smtp_from=_clean_env("SMTP_FROM") or smtp_user,
    )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return settings_from_env()
