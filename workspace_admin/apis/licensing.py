"""Enterprise License Manager client: license assignments per product/SKU."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Sequence

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from workspace_admin.apis.base import BaseAdminAPI
from workspace_admin.batch import BatchResult, run_batch
from workspace_admin.config import WorkspaceAdminConfig
from workspace_admin.credentials import LICENSING_SCOPES, build_credentials
from workspace_admin.errors import is_bad_request, is_duplicate, is_not_found
from workspace_admin.products import ALL_PRODUCTS, Product

logger = logging.getLogger("workspace_admin.licensing")


class LicensingAPI(BaseAdminAPI):
    API_NAME = "licensing"

    @classmethod
    def from_config(cls, config: WorkspaceAdminConfig) -> "LicensingAPI":
        creds = build_credentials(config, LICENSING_SCOPES)
        service = build("licensing", "v1", credentials=creds, cache_discovery=False)
        logger.info(
            "LicensingAPI ready as %s", config.admin_email,
            extra={"api": cls.API_NAME},
        )
        return cls(service, config, credentials=creds)

    def _collect(
        self, pages: Iterator[list[dict]], label: str, customer_id: str
    ) -> list[dict]:
        """Drain ``pages``; a 400 (product not subscribed) ends the listing early."""
        assignments: list[dict] = []
        try:
            for page in pages:
                if not page:
                    logger.info("{%s} - no further licenses under %s", customer_id, label)
                    break
                assignments.extend(page)
                logger.debug("%s licenses thus far: %d", label, len(assignments))
        except HttpError as exc:
            if not is_bad_request(exc):
                raise
            logger.warning(
                "Listing %s for %s rejected: %s", label, customer_id, exc,
                extra={"sku": label},
            )
        logger.info(
            "%s licenses total: %d", label, len(assignments),
            extra={"sku": label, "records": len(assignments)},
        )
        return assignments

    def list_for_product(self, product_id: str, customer_id: str) -> list[dict]:
        assignments = self.service.licenseAssignments()
        request = assignments.listForProduct(
            productId=product_id,
            customerId=customer_id,
            maxResults=self.config.licenses_page_size,
        )
        pages = self._paginate(
            request, assignments.listForProduct_next, "items",
            f"licenseAssignments.listForProduct({product_id})",
        )
        return self._collect(pages, product_id, customer_id)

    def list_for_product_and_sku(
        self, product_id: str, sku_id: str, customer_id: str
    ) -> list[dict]:
        assignments = self.service.licenseAssignments()
        request = assignments.listForProductAndSku(
            productId=product_id,
            skuId=sku_id,
            customerId=customer_id,
            maxResults=self.config.licenses_page_size,
        )
        pages = self._paginate(
            request, assignments.listForProductAndSku_next, "items",
            f"licenseAssignments.listForProductAndSku({product_id}, {sku_id})",
        )
        return self._collect(pages, sku_id, customer_id)

    def get_all_domain_licenses(
        self, customer_id: str, products: Sequence[Product] = ALL_PRODUCTS
    ) -> list[dict]:
        license_assignments: list[dict] = []
        for product in products:
            license_assignments.extend(self._list_product(product, customer_id))
        return license_assignments

    def get_all_domain_licenses_as_map(
        self, customer_id: str, products: Sequence[Product] = ALL_PRODUCTS
    ) -> dict[Product, list[dict]]:
        return {
            product: self._list_product(product, customer_id) for product in products
        }

    def _list_product(self, product: Product, customer_id: str) -> list[dict]:
        logger.info("Querying for <%s> licenses", product.sku_name)
        return self.list_for_product_and_sku(
            product.product_id, product.sku_id, customer_id
        )

    # ------------------------------------------------------------------
    # Single assignments
    # ------------------------------------------------------------------

    def get(self, product: Product, user_id: str) -> dict:
        return self._execute(
            self.service.licenseAssignments().get(
                productId=product.product_id, skuId=product.sku_id, userId=user_id
            ),
            f"licenseAssignments.get({product.sku_id}, {user_id})",
        )

    def insert(self, product: Product, user_id: str) -> dict:
        result = self._execute(
            self.service.licenseAssignments().insert(
                productId=product.product_id,
                skuId=product.sku_id,
                body={"userId": user_id},
            ),
            f"licenseAssignments.insert({product.sku_id}, {user_id})",
        )
        logger.info(
            "Assigned %s to %s", product.sku_name, user_id,
            extra={"sku": product.sku_id, "member": user_id},
        )
        return result

    def delete(self, product: Product, user_id: str) -> None:
        self._execute(
            self.service.licenseAssignments().delete(
                productId=product.product_id, skuId=product.sku_id, userId=user_id
            ),
            f"licenseAssignments.delete({product.sku_id}, {user_id})",
        )
        logger.info(
            "Removed %s from %s", product.sku_name, user_id,
            extra={"sku": product.sku_id, "member": user_id},
        )

    def update(
        self, product: Product, user_id: str, new_product: Optional[Product] = None
    ) -> dict:
        """Move ``user_id`` from ``product`` to ``new_product`` (same product line)."""
        target = new_product or product
        result = self._execute(
            self.service.licenseAssignments().update(
                productId=product.product_id,
                skuId=product.sku_id,
                userId=user_id,
                body={
                    "productId": target.product_id,
                    "skuId": target.sku_id,
                    "userId": user_id,
                },
            ),
            f"licenseAssignments.update({product.sku_id} -> {target.sku_id}, {user_id})",
        )
        logger.info(
            "Reassigned %s from %s to %s", user_id, product.sku_name, target.sku_name,
            extra={"sku": target.sku_id, "member": user_id},
        )
        return result

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    def _insert_if_absent(self, product: Product, user_id: str) -> bool:
        try:
            self.insert(product, user_id)
        except HttpError as exc:
            if is_duplicate(exc):
                logger.info("%s already holds %s, skipping", user_id, product.sku_name)
                return False
            raise
        return True

    def _delete_if_present(self, product: Product, user_id: str) -> bool:
        try:
            self.delete(product, user_id)
        except HttpError as exc:
            if is_not_found(exc):
                logger.info("%s does not hold %s, skipping", user_id, product.sku_name)
                return False
            raise
        return True

    def insert_many(
        self,
        product: Product,
        user_ids: Iterable[str],
        max_workers: Optional[int] = None,
    ) -> BatchResult:
        return run_batch(
            lambda user_id: self._insert_if_absent(product, user_id),
            user_ids,
            max_workers or self.config.max_workers,
            label=f"insert_licenses:{product.sku_id}",
        )

    def delete_many(
        self,
        product: Product,
        user_ids: Iterable[str],
        max_workers: Optional[int] = None,
    ) -> BatchResult:
        return run_batch(
            lambda user_id: self._delete_if_present(product, user_id),
            user_ids,
            max_workers or self.config.max_workers,
            label=f"delete_licenses:{product.sku_id}",
        )
