"""
Configuration and environment handling for the listing specifics service.
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()


class OpenAIConfig(BaseModel):
    """OpenAI API configuration."""
    api_key: str = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    model: str = Field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o"))
    analysis_temperature: float = Field(default=0.3)
    analysis_max_tokens: int = Field(default=2000)
    reconcile_temperature: float = Field(default=0.1)
    reconcile_max_tokens: int = Field(default=1400)


class EbayConfig(BaseModel):
    """eBay OAuth and Taxonomy API configuration."""
    client_id: str = Field(default_factory=lambda: os.getenv("EBAY_CLIENT_ID", ""))
    client_secret: str = Field(default_factory=lambda: os.getenv("EBAY_CLIENT_SECRET", ""))
    api_base: str = Field(default_factory=lambda: os.getenv("EBAY_API_BASE", "https://api.ebay.com"))
    oauth_scope: str = Field(default="https://api.ebay.com/oauth/api_scope")
    category_tree_id: str = Field(default="0", description="0 = EBAY_US")
    request_timeout: float = Field(default=15.0)
    token_expiry_margin: int = Field(default=60, description="Seconds shaved off expires_in")
    fallback_category_id: str = Field(default="11450")
    fallback_category_name: str = Field(default="Clothing, Shoes & Accessories")
    max_options_per_aspect: int = Field(default=200, description="Options sent to the model per aspect")


class SessionConfig(BaseModel):
    """Session cache configuration."""
    redis_url: str = Field(default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    ttl_seconds: int = Field(default=3600)
    key_prefix: str = Field(default="listing:")


class WebhookConfig(BaseModel):
    """Workflow automation webhook configuration."""
    url: str = Field(default_factory=lambda: os.getenv("MAKE_WEBHOOK_URL", ""))
    timeout: float = Field(default=10.0)


class ReconcileConfig(BaseModel):
    """Reconciliation and analysis limits."""
    multi_select_cap: int = Field(default=3, ge=1, le=3, description="Max values for a multi-select aspect")
    max_images: int = Field(default=12, description="Photos sent to the vision model")
    image_timeout: float = Field(default=20.0)


class Config(BaseModel):
    """Main configuration."""
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    ebay: EbayConfig = Field(default_factory=EbayConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    reconcile: ReconcileConfig = Field(default_factory=ReconcileConfig)

    # Feature flags
    enable_ai_suggestions: bool = Field(default=True)
    enable_relational_defaults: bool = Field(default=True)


# Singleton config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
