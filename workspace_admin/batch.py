"""Bounded-concurrency fan-out for bulk API calls."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, TypeVar

from workspace_admin.errors import BatchError

logger = logging.getLogger("workspace_admin.batch")

T = TypeVar("T")


@dataclass
class BatchResult:
    """Outcome of a bulk operation, one bucket per item."""

    label: str = "batch"
    succeeded: list[Any] = field(default_factory=list)
    skipped: list[Any] = field(default_factory=list)
    failed: list[tuple[Any, BaseException]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.skipped) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failures(self) -> None:
        if self.failed:
            raise BatchError(self)

    def summary(self) -> dict[str, int]:
        return {
            "total": self.total,
            "succeeded": len(self.succeeded),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }


def run_batch(
    func: Callable[[T], bool],
    items: Iterable[T],
    max_workers: int,
    label: str = "batch",
) -> BatchResult:
    """Call ``func`` once per item with at most ``max_workers`` in flight.

    ``func`` returns True when the item was applied and False when it was
    skipped (already present, already absent). An exception marks only
    that item as failed; the remaining items still run.
    """
    pending = list(items)
    result = BatchResult(label=label)
    if not pending:
        logger.info("%s: nothing to do", label)
        return result

    workers = max(1, min(max_workers, len(pending)))
    logger.info(
        "%s: %d items across %d workers", label, len(pending), workers,
        extra={"records": len(pending)},
    )

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=label) as executor:
        future_to_item = {executor.submit(func, item): item for item in pending}
        for done, future in enumerate(as_completed(future_to_item), start=1):
            item = future_to_item[future]
            try:
                applied = future.result()
            except Exception as exc:
                logger.error("%s: %r failed: %s", label, item, exc)
                result.failed.append((item, exc))
            else:
                if applied:
                    result.succeeded.append(item)
                else:
                    result.skipped.append(item)
            logger.debug("%s: [%d] of [%d] complete", label, done, len(pending))

    logger.info(
        "%s: %d succeeded, %d skipped, %d failed",
        label, len(result.succeeded), len(result.skipped), len(result.failed),
        extra={"records": result.total},
    )
    return result
