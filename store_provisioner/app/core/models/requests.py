"""Inputs accepted by the orchestrator entry points."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from store_provisioner.app.core.models.enums import StoreEngine, StorePlan

STORE_NAME_PATTERN = r"^[a-z0-9-]+$"


class StoreCreateRequest(BaseModel):
    """Request to create a store.

    Example:
        ```json
        {"name": "shop-1", "engine": "woocommerce", "plan": "basic"}
        ```
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        min_length=3,
        max_length=50,
        pattern=STORE_NAME_PATTERN,
        description="Store slug: 3-50 characters, lowercase alphanumeric and hyphens only",
    )
    display_name: str | None = Field(default=None, max_length=120)
    description: str | None = Field(default=None, max_length=2000)
    engine: StoreEngine = Field(description="Commerce engine to deploy")
    plan: StorePlan = Field(default=StorePlan.BASIC, description="Sizing tier")
