"""Helm values payload and public URL conventions for a store."""

from __future__ import annotations

from typing import Any

from store_provisioner.app.core.engines import EngineProfile
from store_provisioner.app.entities.store.table import StoreRecord
from store_provisioner.app.runtime.config.config_data import ProvisioningConfig


def resource_name(store_id: str) -> str:
    """Namespace and Helm release name shared by a store's resources."""
    return f"store-{store_id}"


def store_host(store: StoreRecord, base_domain: str) -> str:
    return f"{store.name}-{store.id}.{base_domain}"


def storefront_url(store: StoreRecord, base_domain: str) -> str:
    return f"https://{store_host(store, base_domain)}"


def admin_url(store: StoreRecord, base_domain: str, profile: EngineProfile) -> str:
    return f"{storefront_url(store, base_domain)}{profile.admin_path}"


def build_helm_values(
    store: StoreRecord, profile: EngineProfile, settings: ProvisioningConfig
) -> dict[str, Any]:
    """Values passed to the store chart on install."""
    values: dict[str, Any] = {
        "store": {
            "id": store.id,
            "name": store.name,
            "engine": store.engine.value,
            "plan": store.plan.value,
            "createdBy": store.created_by,
            "description": store.description,
        },
        "global": {
            "baseDomain": settings.base_domain,
            "storageClass": settings.storage_class,
            "certIssuer": settings.cert_issuer,
        },
    }
    values.update(
        profile.engine_values(
            site_url=store_host(store, settings.base_domain),
            title=store.display_name or store.name,
            admin_email=settings.admin_email,
        )
    )
    return values
