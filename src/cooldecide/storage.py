"""
Persistence for boiling curve datasets.

The thermal engine never touches this module. Callers pick a
DatasetRepository implementation:

- InMemoryDatasetRepository: process-local, for tests and demos
- JsonFileDatasetRepository: a single JSON file on disk
- SupabaseDatasetRepository: a Supabase (PostgREST) table over HTTP

BackupManager snapshots the whole repository and restores from snapshots.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging
import re
import threading
import time

import httpx

from .boiling_data import BoilingDataset, pick_field
from .config import Settings

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the backing store cannot be read or written."""


class DatasetNotFoundError(StorageError, KeyError):
    """Raised when a dataset id does not exist."""

    def __init__(self, dataset_id: str):
        super().__init__(f"Dataset not found: {dataset_id}")
        self.dataset_id = dataset_id

    def __str__(self) -> str:
        return self.args[0]


class DatasetRepository(ABC):
    """Create/read/update/delete/list for boiling datasets."""

    @abstractmethod
    def list(self) -> List[BoilingDataset]:
        """All datasets in insertion order."""

    @abstractmethod
    def get(self, dataset_id: str) -> BoilingDataset:
        ...

    @abstractmethod
    def create(self, dataset: BoilingDataset) -> BoilingDataset:
        ...

    @abstractmethod
    def update(self, dataset_id: str, **changes) -> BoilingDataset:
        ...

    @abstractmethod
    def delete(self, dataset_id: str) -> None:
        ...

    def replace_all(self, datasets: List[BoilingDataset]) -> None:
        """Swap the whole collection, e.g. when restoring a backup."""
        for ds in self.list():
            self.delete(ds.id)
        for ds in datasets:
            self.create(ds)


class InMemoryDatasetRepository(DatasetRepository):
    """Dict-backed repository."""

    def __init__(self, datasets: Optional[List[BoilingDataset]] = None):
        self._datasets: Dict[str, BoilingDataset] = {}
        self._lock = threading.Lock()
        for ds in datasets or []:
            self._datasets[ds.id] = ds

    def list(self) -> List[BoilingDataset]:
        with self._lock:
            return list(self._datasets.values())

    def get(self, dataset_id: str) -> BoilingDataset:
        with self._lock:
            try:
                return self._datasets[dataset_id]
            except KeyError:
                raise DatasetNotFoundError(dataset_id) from None

    def create(self, dataset: BoilingDataset) -> BoilingDataset:
        with self._lock:
            self._datasets[dataset.id] = dataset
        return dataset

    def update(self, dataset_id: str, **changes) -> BoilingDataset:
        with self._lock:
            if dataset_id not in self._datasets:
                raise DatasetNotFoundError(dataset_id)
            updated = self._datasets[dataset_id].with_updates(**changes)
            self._datasets[dataset_id] = updated
            return updated

    def delete(self, dataset_id: str) -> None:
        with self._lock:
            if self._datasets.pop(dataset_id, None) is None:
                raise DatasetNotFoundError(dataset_id)

    def replace_all(self, datasets: List[BoilingDataset]) -> None:
        with self._lock:
            self._datasets = {ds.id: ds for ds in datasets}


def _read_json_list(path: Path) -> List[Dict[str, Any]]:
    """Read a JSON array; a missing or unreadable file counts as empty."""
    if not path.exists():
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read %s, treating as empty: %s", path, exc)
        return []
    if not isinstance(payload, list):
        logger.warning("Expected a JSON list in %s, got %s", path, type(payload).__name__)
        return []
    return payload


def _write_json(path: Path, payload: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        tmp.replace(path)
    except OSError as exc:
        raise StorageError(f"Could not write {path}: {exc}") from exc


class JsonFileDatasetRepository(DatasetRepository):
    """All datasets in one JSON array on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> List[BoilingDataset]:
        datasets = []
        for raw in _read_json_list(self.path):
            try:
                datasets.append(BoilingDataset.from_dict(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed dataset record in %s: %s", self.path, exc)
        return datasets

    def _save(self, datasets: List[BoilingDataset]) -> None:
        _write_json(self.path, [ds.to_dict() for ds in datasets])

    def list(self) -> List[BoilingDataset]:
        with self._lock:
            return self._load()

    def get(self, dataset_id: str) -> BoilingDataset:
        for ds in self.list():
            if ds.id == dataset_id:
                return ds
        raise DatasetNotFoundError(dataset_id)

    def create(self, dataset: BoilingDataset) -> BoilingDataset:
        with self._lock:
            datasets = self._load()
            datasets.append(dataset)
            self._save(datasets)
        logger.info("Saved dataset %s (%d points)", dataset.id, dataset.n_points)
        return dataset

    def update(self, dataset_id: str, **changes) -> BoilingDataset:
        with self._lock:
            datasets = self._load()
            for i, ds in enumerate(datasets):
                if ds.id == dataset_id:
                    datasets[i] = ds.with_updates(**changes)
                    self._save(datasets)
                    return datasets[i]
        raise DatasetNotFoundError(dataset_id)

    def delete(self, dataset_id: str) -> None:
        with self._lock:
            datasets = self._load()
            remaining = [ds for ds in datasets if ds.id != dataset_id]
            if len(remaining) == len(datasets):
                raise DatasetNotFoundError(dataset_id)
            self._save(remaining)
        logger.info("Deleted dataset %s", dataset_id)

    def replace_all(self, datasets: List[BoilingDataset]) -> None:
        with self._lock:
            self._save(list(datasets))


class SupabaseDatasetRepository(DatasetRepository):
    """
    Datasets stored in a Supabase table through its REST (PostgREST) API.

    Table columns: id, name, source, data (jsonb), created_at,
    experiment_meta (jsonb), literature_meta (jsonb).
    """

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "boiling_datasets",
        client: Optional[httpx.Client] = None,
        timeout_s: float = 10.0,
    ):
        self.table = table
        self._client = client or httpx.Client(
            base_url=url.rstrip("/") + "/rest/v1",
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
            },
            timeout=timeout_s,
        )

    @staticmethod
    def to_row(dataset: BoilingDataset) -> Dict[str, Any]:
        d = dataset.to_dict()
        return {
            "id": d["id"],
            "name": d["name"],
            "source": d["source"],
            "data": d["data"],
            "created_at": d["created_at"],
            "experiment_meta": d["experiment"],
            "literature_meta": d["literature"],
        }

    @staticmethod
    def from_row(row: Dict[str, Any]) -> BoilingDataset:
        """
        Read one table row. Points and metadata may use camelCase keys.

        Raises:
            StorageError: If the row is missing columns or holds bad values
        """
        try:
            return BoilingDataset.from_dict({
                "id": row["id"],
                "name": row["name"],
                "source": row["source"],
                "data": row.get("data") or [],
                "created_at": row["created_at"],
                "experiment": row.get("experiment_meta"),
                "literature": row.get("literature_meta"),
            })
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed dataset row in Supabase: %r", exc)
            raise StorageError(f"Malformed dataset row: {exc!r}") from exc

    def _request(self, method: str, params: Optional[Dict[str, str]] = None,
                 json_body: Any = None, prefer: Optional[str] = None) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = self._client.request(
                method, f"/{self.table}", params=params, json=json_body, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Supabase %s %s failed: %s", method, self.table, exc)
            raise StorageError(f"Supabase request failed: {exc}") from exc
        if not response.content:
            return None
        return response.json()

    def list(self) -> List[BoilingDataset]:
        rows = self._request("GET", params={"select": "*", "order": "created_at.asc"})
        return [self.from_row(r) for r in rows or []]

    def get(self, dataset_id: str) -> BoilingDataset:
        rows = self._request("GET", params={"select": "*", "id": f"eq.{dataset_id}"})
        if not rows:
            raise DatasetNotFoundError(dataset_id)
        return self.from_row(rows[0])

    def create(self, dataset: BoilingDataset) -> BoilingDataset:
        rows = self._request("POST", json_body=self.to_row(dataset), prefer="return=representation")
        logger.info("Saved dataset %s to %s", dataset.id, self.table)
        return self.from_row(rows[0]) if rows else dataset

    def update(self, dataset_id: str, **changes) -> BoilingDataset:
        updated = self.get(dataset_id).with_updates(**changes)
        row = self.to_row(updated)
        row.pop("id")
        rows = self._request(
            "PATCH",
            params={"id": f"eq.{dataset_id}"},
            json_body=row,
            prefer="return=representation",
        )
        if not rows:
            raise DatasetNotFoundError(dataset_id)
        return self.from_row(rows[0])

    def delete(self, dataset_id: str) -> None:
        rows = self._request(
            "DELETE", params={"id": f"eq.{dataset_id}"}, prefer="return=representation"
        )
        if not rows:
            raise DatasetNotFoundError(dataset_id)
        logger.info("Deleted dataset %s from %s", dataset_id, self.table)

    def close(self) -> None:
        self._client.close()


def create_repository(settings: Settings) -> DatasetRepository:
    """Build the repository selected by settings.storage_backend."""
    backend = settings.storage_backend
    if backend == "memory":
        return InMemoryDatasetRepository()
    if backend == "file":
        return JsonFileDatasetRepository(settings.datasets_path)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError("Supabase backend needs COOLDECIDE_SUPABASE_URL and COOLDECIDE_SUPABASE_KEY")
        return SupabaseDatasetRepository(
            settings.supabase_url,
            settings.supabase_key,
            table=settings.supabase_table,
            timeout_s=settings.http_timeout_s,
        )
    raise ValueError(f"Unknown storage backend: {backend}")


# =============================================================================
# Backups
# =============================================================================

@dataclass(frozen=True)
class DataBackup:
    """Snapshot of every dataset at one point in time."""

    id: str
    name: str
    created_at: str
    datasets: List[BoilingDataset]

    @property
    def dataset_count(self) -> int:
        return len(self.datasets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "datasets": [ds.to_dict() for ds in self.datasets],
            "dataset_count": self.dataset_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataBackup":
        return cls(
            id=data["id"],
            name=data["name"],
            created_at=pick_field(data, "created_at", "createdAt"),
            datasets=[BoilingDataset.from_dict(d) for d in data["datasets"]],
        )


class BackupManager:
    """
    Create, list, restore and move backups of a dataset repository.

    Backups are kept newest first, in memory or in a JSON file when a path
    is given.
    """

    def __init__(self, repository: DatasetRepository, path: Optional[Union[str, Path]] = None):
        self.repository = repository
        self.path = Path(path) if path is not None else None
        self._backups: List[DataBackup] = []
        self._lock = threading.Lock()
        self._last_id_ms = 0

    def _load(self) -> List[DataBackup]:
        if self.path is None:
            return list(self._backups)
        backups = []
        for raw in _read_json_list(self.path):
            try:
                backups.append(DataBackup.from_dict(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed backup in %s: %s", self.path, exc)
        return backups

    def _save(self, backups: List[DataBackup]) -> None:
        if self.path is None:
            self._backups = list(backups)
        else:
            _write_json(self.path, [b.to_dict() for b in backups])

    def _new_id(self) -> str:
        # millisecond ids, bumped so two backups in the same ms stay distinct
        now_ms = max(int(time.time() * 1000), self._last_id_ms + 1)
        self._last_id_ms = now_ms
        return f"backup-{now_ms}"

    def list_backups(self) -> List[DataBackup]:
        with self._lock:
            return self._load()

    def get_backup(self, backup_id: str) -> Optional[DataBackup]:
        for backup in self.list_backups():
            if backup.id == backup_id:
                return backup
        return None

    def create_backup(self, name: Optional[str] = None) -> DataBackup:
        """Snapshot the repository. Default name: "Backup YYYY-MM-DD HH-MM-SS"."""
        datasets = self.repository.list()
        now = datetime.now(timezone.utc)
        with self._lock:
            backup = DataBackup(
                id=self._new_id(),
                name=name or f"Backup {now:%Y-%m-%d} {now:%H-%M-%S}",
                created_at=now.isoformat(),
                datasets=datasets,
            )
            backups = self._load()
            backups.insert(0, backup)
            self._save(backups)
        logger.info("Created backup %s with %d datasets", backup.id, backup.dataset_count)
        return backup

    def restore_backup(self, backup_id: str) -> bool:
        """Replace all datasets with the backup's contents. False if unknown."""
        backup = self.get_backup(backup_id)
        if backup is None:
            return False
        self.repository.replace_all(backup.datasets)
        logger.info("Restored backup %s (%d datasets)", backup_id, backup.dataset_count)
        return True

    def delete_backup(self, backup_id: str) -> None:
        with self._lock:
            backups = [b for b in self._load() if b.id != backup_id]
            self._save(backups)

    @staticmethod
    def export_backup(backup: DataBackup) -> str:
        """Indented JSON for download."""
        return json.dumps(backup.to_dict(), indent=2, ensure_ascii=False)

    @staticmethod
    def export_filename(backup: DataBackup) -> str:
        return re.sub(r"[^a-z0-9]", "_", backup.name, flags=re.IGNORECASE) + ".json"

    def import_backup(self, text: str) -> Optional[DataBackup]:
        """
        Add an exported backup under a new id.

        Returns None if the payload is not a backup with a datasets list.
        """
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Rejected backup import: %s", exc)
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("datasets"), list):
            logger.warning("Rejected backup import: no datasets list")
            return None
        try:
            datasets = [BoilingDataset.from_dict(d) for d in payload["datasets"]]
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Rejected backup import: %s", exc)
            return None

        with self._lock:
            backup = DataBackup(
                id=self._new_id(),
                name=f"Imported: {payload.get('name', 'backup')}",
                created_at=(payload.get("created_at") or payload.get("createdAt")
                            or datetime.now(timezone.utc).isoformat()),
                datasets=datasets,
            )
            backups = self._load()
            backups.insert(0, backup)
            self._save(backups)
        return backup
