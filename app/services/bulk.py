# app/services/bulk.py

"""
Bulk updates: every row is resolved, validated and persisted on its own.
One failing row never stops the others, and nothing is rolled back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from app.core.errors import NotFoundError, ShippingError, ValidationError
from app.schemas.bulk import BatchResult, BatchUpdate, ImportRow, RowResult
from app.schemas.item import SHIPMENT_STATUSES, ItemOut, ItemPatch
from app.services import lifecycle
from app.services.items import ItemService

logger = logging.getLogger(__name__)


def normalize_status(value: Optional[str]) -> Optional[str]:
    """'Ready for pickup' -> 'ready_for_pickup'."""
    if value is None:
        return None
    text = "_".join(value.strip().lower().split())
    return text or None


class _TrackingIndex:
    """Case-insensitive tracking number lookup over one fresh store read."""

    def __init__(self, items: Sequence[ItemOut]):
        self._by_tracking: dict[str, list[int]] = {}
        for item in items:
            key = item.tracking_number.strip().lower()
            self._by_tracking.setdefault(key, []).append(item.id)

    def resolve(self, tracking_number: str) -> int:
        matches = self._by_tracking.get(tracking_number.strip().lower(), [])
        if not matches:
            raise NotFoundError("Tracking number not found in system")
        if len(matches) > 1:
            raise ValidationError(
                f"Tracking number matches {len(matches)} items; use the item id instead",
                field="tracking_number",
            )
        return matches[0]


class BulkUpdateCoordinator:
    def __init__(self, items: ItemService, concurrency: int = 10):
        self.items = items
        self._concurrency = max(1, concurrency)

    async def apply_batch(self, updates: Sequence[BatchUpdate]) -> BatchResult:
        if not updates:
            return BatchResult.from_rows([])

        index: Optional[_TrackingIndex] = None
        index_error: Optional[ShippingError] = None
        if any(u.item_id is None for u in updates):
            try:
                index = _TrackingIndex(await self.items.list_items())
            except ShippingError as e:
                # rows keyed by item id still go through
                logger.warning("Tracking number lookup unavailable: %s", e)
                index_error = e

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(update: BatchUpdate) -> RowResult:
            async with semaphore:
                if update.item_id is None and index_error is not None:
                    return self._failed(update, str(index_error), None)
                return await self._apply_row(update, index)

        rows = await asyncio.gather(*(_bounded(u) for u in updates))
        result = BatchResult.from_rows(list(rows))

        logger.info(
            "Batch applied: %s succeeded, %s failed (of %s)",
            result.success_count,
            result.failure_count,
            result.total,
        )
        return result

    async def _apply_row(self, update: BatchUpdate, index: Optional[_TrackingIndex]) -> RowResult:
        item_id = update.item_id
        try:
            if item_id is None:
                item_id = index.resolve(update.tracking_number)
            await self.items.update_item(item_id, update.patch)
        except ValidationError as e:
            return self._failed(update, e.message, item_id)
        except ShippingError as e:
            return self._failed(update, str(e), item_id)
        except Exception as e:
            # store timeouts, driver errors: still only this row
            logger.exception("Unexpected error updating %s", update.identifier)
            return self._failed(update, f"Update failed: {e}", item_id)

        return RowResult(
            identifier=update.identifier,
            success=True,
            message=lifecycle.describe_patch(update.patch),
            item_id=item_id,
            row_number=update.row_number,
        )

    @staticmethod
    def _failed(update: BatchUpdate, message: str, item_id: Optional[int]) -> RowResult:
        logger.warning("Row %s failed: %s", update.identifier, message)
        return RowResult(
            identifier=update.identifier,
            success=False,
            message=message,
            item_id=item_id,
            row_number=update.row_number,
        )

    async def update_items(self, item_ids: Sequence[int], patch: ItemPatch) -> BatchResult:
        """Same patch for several items, keyed by id."""
        updates = [
            BatchUpdate(identifier=str(item_id), item_id=item_id, patch=patch)
            for item_id in item_ids
        ]
        return await self.apply_batch(updates)

    async def package_items(self, item_ids: Sequence[int], carton_number: str) -> BatchResult:
        return await self.update_items(item_ids, lifecycle.carton_patch(carton_number.strip()))

    async def import_rows(self, rows: Sequence[ImportRow]) -> BatchResult:
        """
        CSV-driven updates: tracking number + optional status / container.
        Follows the same rules as manual edits.
        """
        invalid: dict[int, RowResult] = {}
        updates: list[tuple[int, BatchUpdate]] = []

        for position, row in enumerate(rows):
            identifier = row.tracking_number.strip()
            if not identifier:
                invalid[position] = self._invalid_row(row, "Tracking number is required")
                continue
            fields: dict[str, str] = {}

            status = normalize_status(row.status)
            if status is not None:
                if status not in SHIPMENT_STATUSES:
                    invalid[position] = self._invalid_row(row, f"Unknown status '{row.status}'")
                    continue
                fields["status"] = status

            if row.container_number and row.container_number.strip():
                fields["container_number"] = row.container_number

            if not fields:
                invalid[position] = self._invalid_row(row, "No update fields found (need status or container)")
                continue

            updates.append(
                (
                    position,
                    BatchUpdate(
                        identifier=identifier,
                        tracking_number=identifier,
                        row_number=row.row_number,
                        patch=ItemPatch(**fields),
                    ),
                )
            )

        applied = await self.apply_batch([u for _, u in updates])
        by_position = dict(zip((p for p, _ in updates), applied.results))
        by_position.update(invalid)

        return BatchResult.from_rows([by_position[p] for p in range(len(rows))])

    @staticmethod
    def _invalid_row(row: ImportRow, message: str) -> RowResult:
        logger.warning("Import row %s (%s) rejected: %s", row.row_number, row.tracking_number, message)
        return RowResult(
            identifier=row.tracking_number.strip() or f"row {row.row_number}",
            success=False,
            message=message,
            row_number=row.row_number,
        )
