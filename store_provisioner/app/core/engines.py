"""Per-engine deployment conventions.

Every `StoreEngine` member must be handled in `engine_profile()`; the
`assert_never` arm makes a forgotten member a type-checking error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, assert_never

from store_provisioner.app.core.errors import UnsupportedEngineError
from store_provisioner.app.core.models.enums import StoreEngine


@dataclass(frozen=True)
class EngineProfile:
    """Naming and values conventions of one engine's Helm chart."""

    engine: StoreEngine
    component: str
    admin_path: str
    admin_username: str = "admin"

    def deployment_name(self, store_name: str) -> str:
        """Name of the deployment whose readiness gates the store."""
        return f"store-{store_name}-{self.component}"

    def credentials_secret(self, store_name: str) -> str:
        """Name of the Secret holding the generated admin password."""
        return f"store-{store_name}-{self.component}-credentials"

    def engine_values(
        self, *, site_url: str, title: str, admin_email: str
    ) -> dict[str, Any]:
        """Engine-specific section of the Helm values payload."""
        return {
            self.component: {
                "site": {"url": site_url, "title": title},
                "admin": {"username": self.admin_username, "email": admin_email},
            }
        }


WOOCOMMERCE = EngineProfile(
    engine=StoreEngine.WOOCOMMERCE,
    component="wordpress",
    admin_path="/wp-admin",
)


def engine_profile(engine: StoreEngine) -> EngineProfile:
    """Resolve the profile for an engine.

    Raises:
        UnsupportedEngineError: For engines that are accepted by the API
            but cannot be provisioned yet.
    """
    match engine:
        case StoreEngine.WOOCOMMERCE:
            return WOOCOMMERCE
        case StoreEngine.MEDUSA:
            raise UnsupportedEngineError(
                "MedusaJS support is not available yet. Please use WooCommerce for now."
            )
        case _:
            assert_never(engine)
