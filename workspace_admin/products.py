"""Static catalog of Google Workspace licensing products and SKUs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

GOOGLE_APPS = "Google-Apps"
GOOGLE_VAULT = "Google-Vault"
ARCHIVED_USER = "101034"


@dataclass(frozen=True)
class Product:
    product_id: str
    product_name: str
    sku_id: str
    sku_name: str
    # Archived-user SKUs map back to the SKU a user returns to when unarchived
    unarchival_product_id: Optional[str] = None
    unarchival_sku_id: Optional[str] = None

    @property
    def is_archived_user(self) -> bool:
        return self.unarchival_sku_id is not None

    def unarchival_product(self) -> Optional["Product"]:
        if self.unarchival_sku_id is None:
            return None
        return get_product_by_sku_id(self.unarchival_sku_id)


GOOGLE_WORKSPACE_BUSINESS_STARTER = Product(
    GOOGLE_APPS, "Google Workspace", "1010020027",
    "Google Workspace Business Starter",
)
GOOGLE_WORKSPACE_BUSINESS_STANDARD = Product(
    GOOGLE_APPS, "Google Workspace", "1010020028",
    "Google Workspace Business Standard",
)
GOOGLE_WORKSPACE_BUSINESS_PLUS = Product(
    GOOGLE_APPS, "Google Workspace", "1010020025",
    "Google Workspace Business Plus",
)
GOOGLE_WORKSPACE_ENTERPRISE_ESSENTIALS = Product(
    GOOGLE_APPS, "Google Workspace", "1010060003",
    "Google Workspace Enterprise Essentials",
)
GOOGLE_WORKSPACE_ENTERPRISE_STANDARD = Product(
    GOOGLE_APPS, "Google Workspace", "1010020026",
    "Google Workspace Enterprise Standard",
)
GOOGLE_WORKSPACE_ENTERPRISE_PLUS = Product(
    GOOGLE_APPS, "Google Workspace", "1010020020",
    "Google Workspace Enterprise Plus (formerly G Suite Enterprise)",
)
GOOGLE_WORKSPACE_ESSENTIALS = Product(
    GOOGLE_APPS, "Google Workspace", "1010060001",
    "Google Workspace Essentials (formerly G Suite Essentials)",
)
GOOGLE_WORKSPACE_FRONTLINE = Product(
    GOOGLE_APPS, "Google Workspace", "1010020030",
    "Google Workspace Frontline",
)
GOOGLE_VAULT_PRODUCT = Product(
    GOOGLE_VAULT, "Google Vault", "Google-Vault",
    "Google Vault",
)
GOOGLE_VAULT_FORMER_EMPLOYEE = Product(
    GOOGLE_VAULT, "Google Vault", "Google-Vault-Former-Employee",
    "Google Vault - Former Employee",
)
GOOGLE_WORKSPACE_ENTERPRISE_PLUS_ARCHIVED_USER = Product(
    ARCHIVED_USER, "Google Workspace Archived User", "1010340001",
    "Google Workspace Enterprise Plus - Archived User",
    unarchival_product_id=GOOGLE_APPS,
    unarchival_sku_id="1010020020",
)
G_SUITE_BUSINESS_ARCHIVED_USER = Product(
    ARCHIVED_USER, "Google Workspace Archived User", "1010340002",
    "G Suite Business - Archived User",
    unarchival_product_id=GOOGLE_APPS,
    unarchival_sku_id="Google-Apps-Unlimited",
)
GOOGLE_WORKSPACE_BUSINESS_PLUS_ARCHIVED_USER = Product(
    ARCHIVED_USER, "Google Workspace Archived User", "1010340003",
    "Google Workspace Business Plus - Archived User",
    unarchival_product_id=GOOGLE_APPS,
    unarchival_sku_id="1010020025",
)
GOOGLE_WORKSPACE_ENTERPRISE_STANDARD_ARCHIVED_USER = Product(
    ARCHIVED_USER, "Google Workspace Archived User", "1010340004",
    "Google Workspace Enterprise Standard - Archived User",
    unarchival_product_id=GOOGLE_APPS,
    unarchival_sku_id="1010020026",
)

ALL_PRODUCTS: tuple[Product, ...] = (
    GOOGLE_WORKSPACE_BUSINESS_STARTER,
    GOOGLE_WORKSPACE_BUSINESS_STANDARD,
    GOOGLE_WORKSPACE_BUSINESS_PLUS,
    GOOGLE_WORKSPACE_ENTERPRISE_ESSENTIALS,
    GOOGLE_WORKSPACE_ENTERPRISE_STANDARD,
    GOOGLE_WORKSPACE_ENTERPRISE_PLUS,
    GOOGLE_WORKSPACE_ESSENTIALS,
    GOOGLE_WORKSPACE_FRONTLINE,
    GOOGLE_VAULT_PRODUCT,
    GOOGLE_VAULT_FORMER_EMPLOYEE,
    GOOGLE_WORKSPACE_ENTERPRISE_PLUS_ARCHIVED_USER,
    G_SUITE_BUSINESS_ARCHIVED_USER,
    GOOGLE_WORKSPACE_BUSINESS_PLUS_ARCHIVED_USER,
    GOOGLE_WORKSPACE_ENTERPRISE_STANDARD_ARCHIVED_USER,
)


def get_product_by_sku_id(sku_id: str) -> Optional[Product]:
    for product in ALL_PRODUCTS:
        if product.sku_id == sku_id:
            return product
    return None


def get_product_by_name(sku_name: str) -> Optional[Product]:
    for product in ALL_PRODUCTS:
        if product.sku_name == sku_name:
            return product
    return None
