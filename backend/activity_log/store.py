"""Record store: the canonical list of activities and their nested details.

All records live in a single JSON blob under one storage key. Every operation
reads the blob, works on the decoded list and writes the whole list back, so
ids can be renumbered densely after each removal.
"""

from __future__ import annotations

import json
from threading import RLock
from typing import Any, List, Mapping, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from .errors import NotFound, StorageCorrupt
from .schemas import ActivityFields, ActivityRecord, ActivityUpdate, DetailFields, DetailRecord
from .storage import BlobStorage

STORAGE_KEY = "company_activities"

# Fields that must never be cleared by a partial update
_REQUIRED_FIELDS = {"hour", "minute", "main_person"}

_records_adapter = TypeAdapter(List[ActivityRecord])


def _next_id(ids: List[int]) -> int:
    return max(ids) + 1 if ids else 1


def _renumber(items: List[Any]) -> None:
    for position, item in enumerate(items, start=1):
        item.id = position


class ActivityStore:
    def __init__(self, storage: BlobStorage, key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._lock = RLock()

    @property
    def key(self) -> str:
        return self._key

    # ------------------------------------------------------------------
    # persistence helpers
    # ------------------------------------------------------------------
    def _decode(self, raw: str) -> List[ActivityRecord]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageCorrupt(self._key, str(exc)) from exc
        try:
            return _records_adapter.validate_python(data)
        except ValidationError as exc:
            raise StorageCorrupt(self._key, f"{exc.error_count()} validation error(s)") from exc

    def _read_raw(self) -> Optional[str]:
        try:
            return self._storage.read(self._key)
        except ValueError as exc:
            raise StorageCorrupt(self._key, str(exc)) from exc

    def _load(self) -> List[ActivityRecord]:
        try:
            raw = self._read_raw()
            if raw is None or not raw.strip():
                return []
            return self._decode(raw)
        except StorageCorrupt as exc:
            logger.warning(f"{exc.message}; treating it as empty")
            return []

    def _save(self, records: List[ActivityRecord]) -> None:
        payload = [record.model_dump(mode="json", by_alias=True) for record in records]
        self._storage.write(self._key, json.dumps(payload, ensure_ascii=False))

    @staticmethod
    def _find(records: List[ActivityRecord], activity_id: int) -> Optional[ActivityRecord]:
        for record in records:
            if record.id == activity_id:
                return record
        return None

    @staticmethod
    def _presented(record: ActivityRecord) -> ActivityRecord:
        details = sorted(record.details, key=lambda detail: detail.id, reverse=True)
        return record.model_copy(update={"details": details})

    # ------------------------------------------------------------------
    # activities
    # ------------------------------------------------------------------
    def list(self) -> List[ActivityRecord]:
        """Return all activities newest first, each with details newest first."""
        with self._lock:
            records = self._load()
        logger.debug(f"Loaded {len(records)} activities from '{self._key}'")
        ordered = sorted(records, key=lambda record: record.id, reverse=True)
        return [self._presented(record) for record in ordered]

    def get(self, activity_id: int) -> ActivityRecord:
        with self._lock:
            record = self._find(self._load(), activity_id)
        if record is None:
            raise NotFound("Activity", activity_id)
        return self._presented(record)

    def create(self, draft: Union[ActivityFields, Mapping[str, Any]]) -> ActivityRecord:
        fields = draft if isinstance(draft, ActivityFields) else ActivityFields.model_validate(draft)
        with self._lock:
            records = self._load()
            record = ActivityRecord(
                **fields.model_dump(),
                id=_next_id([existing.id for existing in records]),
                details=[],
            )
            records.append(record)
            self._save(records)
        logger.info(f"Created activity {record.id} for '{record.main_person}'")
        return record

    def update(self, activity_id: int, draft: Union[ActivityUpdate, Mapping[str, Any]]) -> ActivityRecord:
        changes_model = draft if isinstance(draft, ActivityUpdate) else ActivityUpdate.model_validate(draft)
        changes = changes_model.model_dump(exclude_unset=True)
        for field in _REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                changes.pop(field)
        with self._lock:
            records = self._load()
            index = next((i for i, record in enumerate(records) if record.id == activity_id), None)
            if index is None:
                raise NotFound("Activity", activity_id)
            current = records[index]
            merged = {**current.model_dump(), **changes, "id": current.id}
            merged["details"] = current.details
            updated = ActivityRecord.model_validate(merged)
            records[index] = updated
            self._save(records)
        logger.info(f"Updated activity {activity_id} ({', '.join(sorted(changes)) or 'no changes'})")
        return self._presented(updated)

    def delete(self, activity_id: int) -> None:
        """Remove an activity and renumber the rest; unknown ids are ignored."""
        with self._lock:
            records = self._load()
            remaining = [record for record in records if record.id != activity_id]
            if len(remaining) == len(records):
                logger.debug(f"Delete of unknown activity {activity_id} ignored")
                return
            _renumber(remaining)
            self._save(remaining)
        logger.info(f"Deleted activity {activity_id}; {len(remaining)} remaining")

    # ------------------------------------------------------------------
    # details
    # ------------------------------------------------------------------
    def add_detail(self, activity_id: int, draft: Union[DetailFields, Mapping[str, Any]]) -> DetailRecord:
        fields = draft if isinstance(draft, DetailFields) else DetailFields.model_validate(draft)
        with self._lock:
            records = self._load()
            record = self._find(records, activity_id)
            if record is None:
                raise NotFound("Activity", activity_id)
            detail = DetailRecord(
                **fields.model_dump(),
                id=_next_id([existing.id for existing in record.details]),
            )
            record.details.append(detail)
            self._save(records)
        logger.info(f"Added detail {detail.id} to activity {activity_id}")
        return detail

    def delete_detail(self, activity_id: int, detail_id: int) -> None:
        with self._lock:
            records = self._load()
            record = self._find(records, activity_id)
            if record is None:
                raise NotFound("Activity", activity_id)
            remaining = [detail for detail in record.details if detail.id != detail_id]
            if len(remaining) == len(record.details):
                logger.debug(f"Delete of unknown detail {detail_id} in activity {activity_id} ignored")
                return
            _renumber(remaining)
            record.details = remaining
            self._save(records)
        logger.info(f"Deleted detail {detail_id} from activity {activity_id}")
