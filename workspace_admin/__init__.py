"""Google Workspace administration helpers.

Wraps the Admin SDK Directory API and the Enterprise License Manager API
with paginated listing, bounded retries and bounded-concurrency bulk
member and license operations.
"""

from workspace_admin.apis.directory import DirectoryAPI
from workspace_admin.apis.licensing import LicensingAPI
from workspace_admin.batch import BatchResult, run_batch
from workspace_admin.config import WorkspaceAdminConfig, load_config
from workspace_admin.products import (
    ALL_PRODUCTS,
    Product,
    get_product_by_name,
    get_product_by_sku_id,
)

__all__ = [
    "ALL_PRODUCTS",
    "BatchResult",
    "DirectoryAPI",
    "LicensingAPI",
    "Product",
    "WorkspaceAdminConfig",
    "get_product_by_name",
    "get_product_by_sku_id",
    "load_config",
    "run_batch",
]
