"""
JSON file storage for execution history and test identities.

Expected document (camelCase keys are accepted as well):
{
    "tests": [
        {"id": "t1", "name": "login works", "type": "e2e", "enabled": true, "config": {}}
    ],
    "records": [
        {"project_id": "p1", "test_id": "t1", "test_name": "login works",
         "status": "PASSED", "duration": 120, "error_message": null,
         "created_at": "2026-01-01T10:00:00Z"}
    ]
}
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..detection.base import DataUnavailableError, TestNotFoundError
from ..models.flakiness_models import ExecutionRecord, TestIdentity
from .base import ExecutionHistoryLoader, TestConfigStore, ensure_utc

logger = logging.getLogger(__name__)

_KEY_ALIASES = {
    "projectId": "project_id",
    "testId": "test_id",
    "testName": "test_name",
    "testType": "test_type",
    "errorMessage": "error_message",
    "error": "error_message",
    "createdAt": "created_at",
    "timestamp": "created_at",
}


def _normalize_record(raw: Dict[str, Any]) -> Dict[str, Any]:
    record = {_KEY_ALIASES.get(key, key): value for key, value in raw.items()}
    if isinstance(record.get("status"), str):
        record["status"] = record["status"].strip().upper()
    return record


class JsonFileStore(ExecutionHistoryLoader, TestConfigStore):
    """Execution history and test identities kept in one JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, OSError) as exc:
            raise DataUnavailableError(f"Cannot read store {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataUnavailableError(f"Unexpected JSON structure in {self.path}")
        data.setdefault("tests", [])
        data.setdefault("records", [])
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            raise DataUnavailableError(f"Cannot write store {self.path}: {exc}") from exc

    async def fetch_execution_records(
        self, project_id: str, since: datetime
    ) -> List[ExecutionRecord]:
        since = ensure_utc(since)
        records: List[ExecutionRecord] = []
        for raw in self._load()["records"]:
            if not isinstance(raw, dict):
                raise DataUnavailableError(f"Malformed record in {self.path}: {raw!r}")
            normalized = _normalize_record(raw)
            if normalized.pop("project_id", None) != project_id:
                continue
            try:
                record = ExecutionRecord.model_validate(normalized)
            except ValidationError as exc:
                logger.warning(f"Invalid record for project {project_id} in {self.path}")
                raise DataUnavailableError(
                    f"Invalid record in {self.path}: {exc}"
                ) from exc
            if ensure_utc(record.created_at) >= since:
                records.append(record)

        logger.info(
            f"Loaded {len(records)} records for project {project_id} from {self.path}"
        )
        return records

    async def read_test_config(self, test_id: str) -> Optional[TestIdentity]:
        for raw in self._load()["tests"]:
            if isinstance(raw, dict) and raw.get("id") == test_id:
                return TestIdentity.model_validate(raw)
        return None

    async def write_test_config(
        self, test_id: str, config: Dict[str, Any], enabled: bool
    ) -> TestIdentity:
        data = self._load()
        for index, raw in enumerate(data["tests"]):
            if isinstance(raw, dict) and raw.get("id") == test_id:
                updated = TestIdentity.model_validate(raw).model_copy(
                    update={"config": config, "enabled": enabled}
                )
                data["tests"][index] = updated.model_dump(mode="json")
                self._save(data)
                return updated
        raise TestNotFoundError(test_id)
