# app/schemas/bulk.py

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.schemas.item import ItemPatch


class BatchUpdate(BaseModel):
    """
    One row of a bulk update. `identifier` is the caller's correlation key
    (tracking number, CSV row, ...); the item is located by `item_id` or,
    failing that, by `tracking_number`.
    """
    identifier: str = Field(min_length=1)
    item_id: Optional[int] = None
    tracking_number: Optional[str] = None
    row_number: Optional[int] = None
    patch: ItemPatch

    @model_validator(mode="after")
    def _needs_a_reference(self) -> "BatchUpdate":
        if self.item_id is None and not (self.tracking_number or "").strip():
            raise ValueError("item_id or tracking_number is required")
        return self


class ImportRow(BaseModel):
    """A CSV row that has already been split into columns."""
    row_number: int
    tracking_number: str = Field(min_length=1)
    status: Optional[str] = None
    container_number: Optional[str] = None


class BatchRequest(BaseModel):
    updates: List[BatchUpdate] = Field(min_length=1)


class ImportRequest(BaseModel):
    rows: List[ImportRow] = Field(min_length=1)


class RowResult(BaseModel):
    identifier: str
    success: bool
    message: str
    item_id: Optional[int] = None
    row_number: Optional[int] = None


class BatchResult(BaseModel):
    total: int
    success_count: int
    failure_count: int
    all_succeeded: bool
    results: List[RowResult] = Field(default_factory=list)

    @classmethod
    def from_rows(cls, rows: List[RowResult]) -> "BatchResult":
        success_count = sum(1 for r in rows if r.success)
        return cls(
            total=len(rows),
            success_count=success_count,
            failure_count=len(rows) - success_count,
            all_succeeded=success_count == len(rows),
            results=rows,
        )

    @property
    def failures(self) -> List[RowResult]:
        return [r for r in self.results if not r.success]
