"""
Month-bucketed storage for timesheet records.

Every calendar month is one bucket, persisted under the key
"timesheet-YYYY-MM" as a JSON object mapping ISO dates to day records.
Fiscal months never get their own storage: they are rebuilt from two
adjacent buckets (see timesheet.py).

Design Rationale
----------------

Why a repository instead of raw key-value access:
    Bucket keys, JSON encoding and corruption handling live in one place.
    Aggregation code only sees MonthStore.get_bucket()/put_bucket(), so the
    backend (files on disk, an in-memory dict, something remote) can change
    without touching the payroll logic.

Corrupt buckets:
    A bucket whose payload cannot be decoded reads as empty, but it is not
    silently dropped. get_bucket() returns a BucketDecodeResult with
    status="corrupt" and logs a warning. Before write_bucket_merge()
    overwrites a corrupt bucket, the backend keeps a copy of the old
    payload (preserve_corrupt) so it can be repaired by hand.

Consistency:
    Buckets are disjoint by construction: a bucket only holds dates of its
    own calendar month. read_all_records() raises StoreConsistencyError if
    that ever stops being true instead of picking a winner.

Concurrency:
    Each store owns a re-entrant lock. write_bucket_merge() holds it across
    read-merge-write so concurrent writers in one process cannot interleave.
    Separate processes sharing one data directory are not coordinated.
"""

import json
import logging
import os
import re
import shutil
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import ValidationError

from .schemas import DayRecord

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)

STORAGE_PREFIX = "timesheet-"
MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")

MonthBucket = Dict[str, DayRecord]
DecodeStatus = Literal["ok", "missing", "corrupt"]


class BucketKeyError(ValueError):
    """Raised for a malformed month key or a record outside its bucket's month."""
    pass


class StoreConsistencyError(Exception):
    """Raised when buckets overlap or hold dates of another month."""
    def __init__(self, violations: List[str]):
        self.violations = violations
        super().__init__(f"Store consistency violated: {'; '.join(violations)}")


@dataclass
class BucketDecodeResult:
    """Outcome of reading one bucket."""

    month_key: str
    status: DecodeStatus
    records: MonthBucket = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != "corrupt"


def storage_key(month_key: str) -> str:
    """Persistence key for a calendar-month bucket."""
    return f"{STORAGE_PREFIX}{validate_month_key(month_key)}"


def validate_month_key(month_key: str) -> str:
    if not isinstance(month_key, str) or not MONTH_KEY_PATTERN.match(month_key):
        raise BucketKeyError(f"Invalid month key: {month_key!r} (expected YYYY-MM)")
    return month_key


def decode_bucket_text(month_key: str, text: Optional[str]) -> BucketDecodeResult:
    """Decode a bucket payload.

    Entries that fail validation are skipped and the bucket is reported as
    corrupt; the entries that did decode are still returned.
    """
    if text is None:
        return BucketDecodeResult(month_key=month_key, status="missing")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        return BucketDecodeResult(month_key=month_key, status="corrupt", error=f"invalid JSON: {e}")

    if not isinstance(payload, dict):
        return BucketDecodeResult(
            month_key=month_key,
            status="corrupt",
            error=f"expected a JSON object, got {type(payload).__name__}",
        )

    records: MonthBucket = {}
    errors = []
    for date_str, entry in payload.items():
        if not isinstance(entry, dict):
            errors.append(f"{date_str}: expected an object")
            continue
        try:
            record = DayRecord.model_validate({**entry, "date": date_str})
        except ValidationError as e:
            errors.append(f"{date_str}: {e.error_count()} validation error(s)")
            continue
        records[record.date] = record

    if errors:
        return BucketDecodeResult(
            month_key=month_key, status="corrupt", records=records, error="; ".join(errors)
        )
    return BucketDecodeResult(month_key=month_key, status="ok", records=records)


def encode_bucket(records: MonthBucket) -> str:
    return json.dumps(
        {date_str: records[date_str].to_storage() for date_str in sorted(records)},
        indent=2,
        ensure_ascii=False,
    )


# =============================================================================
# REPOSITORY BACKENDS
# =============================================================================

class MonthStore(ABC):
    """Typed repository of calendar-month buckets."""

    def __init__(self):
        self.lock = threading.RLock()

    @abstractmethod
    def _read_raw(self, key: str) -> Optional[str]:
        """Raw payload at a persistence key, None if absent."""

    @abstractmethod
    def _write_raw(self, key: str, text: str) -> None:
        """Persist a raw payload at a persistence key."""

    @abstractmethod
    def _raw_keys(self) -> Iterable[str]:
        """All persistence keys currently present."""

    def preserve_corrupt(self, month_key: str) -> None:
        """Keep a copy of a bucket's payload before it is overwritten."""

    def get_bucket(self, month_key: str) -> BucketDecodeResult:
        result = decode_bucket_text(month_key, self._read_raw(storage_key(month_key)))
        if result.status == "corrupt":
            logger.warning(f"bucket {month_key} is corrupt, reading as empty: {result.error}")
        return result

    def put_bucket(self, month_key: str, records: MonthBucket) -> None:
        self._write_raw(storage_key(month_key), encode_bucket(records))

    def list_month_keys(self) -> List[str]:
        keys = []
        for key in self._raw_keys():
            if not key.startswith(STORAGE_PREFIX):
                continue
            candidate = key[len(STORAGE_PREFIX):]
            if MONTH_KEY_PATTERN.match(candidate):
                keys.append(candidate)
        return sorted(keys)


class JsonFileMonthStore(MonthStore):
    """One JSON file per bucket: <directory>/timesheet-YYYY-MM.json."""

    def __init__(self, directory: Path):
        super().__init__()
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read_raw(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write_raw(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash never leaves a half-written bucket
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _raw_keys(self) -> Iterable[str]:
        if not self.directory.exists():
            return []
        return [path.stem for path in self.directory.glob(f"{STORAGE_PREFIX}*.json")]

    def preserve_corrupt(self, month_key: str) -> None:
        path = self._path(storage_key(month_key))
        if not path.exists():
            return
        stamp = datetime.now().strftime("%Y%m%dT%H%M%S")
        backup = path.with_name(f"{path.name}.corrupt-{stamp}")
        shutil.copy2(path, backup)
        logger.warning(f"preserved corrupt bucket {month_key} as {backup.name}")


class MemoryMonthStore(MonthStore):
    """Process-local store mapping persistence keys to JSON text."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        super().__init__()
        self.data: Dict[str, str] = dict(data or {})

    def _read_raw(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def _write_raw(self, key: str, text: str) -> None:
        self.data[key] = text

    def _raw_keys(self) -> Iterable[str]:
        return list(self.data)

    def preserve_corrupt(self, month_key: str) -> None:
        key = storage_key(month_key)
        if key in self.data:
            self.data[f"{key}.corrupt"] = self.data[key]


# =============================================================================
# BUCKET OPERATIONS
# =============================================================================

def decode_bucket(store: MonthStore, month_key: str) -> BucketDecodeResult:
    """Read a bucket and report whether it decoded cleanly."""
    return store.get_bucket(validate_month_key(month_key))


def read_bucket(store: MonthStore, month_key: str) -> MonthBucket:
    """Read a bucket's records. Missing or corrupt buckets read as empty."""
    return dict(decode_bucket(store, month_key).records)


def write_bucket_merge(store: MonthStore, month_key: str, partial: MonthBucket) -> None:
    """Merge records into a bucket and persist it.

    Entries in `partial` replace same-date entries; every other stored
    entry is kept. An empty `partial` writes nothing.

    Raises:
        BucketKeyError: If a record's date is not in the bucket's month
    """
    validate_month_key(month_key)
    if not partial:
        return

    for date_str, record in partial.items():
        if record.date != date_str or not date_str.startswith(f"{month_key}-"):
            raise BucketKeyError(f"record {date_str} does not belong in bucket {month_key}")

    with store.lock:
        existing = store.get_bucket(month_key)
        if existing.status == "corrupt":
            store.preserve_corrupt(month_key)
        merged = dict(existing.records)
        merged.update(partial)
        store.put_bucket(month_key, merged)

    logger.debug(f"bucket {month_key}: merged {len(partial)} record(s), {len(merged)} total")


def read_all_records(store: MonthStore) -> MonthBucket:
    """Union of every bucket's records, keyed by date.

    Raises:
        StoreConsistencyError: If a date appears in two buckets or sits
            in a bucket of another month
    """
    all_records: MonthBucket = {}
    seen_in: Dict[str, str] = {}
    violations = []

    for month_key in store.list_month_keys():
        for date_str, record in read_bucket(store, month_key).items():
            if not date_str.startswith(f"{month_key}-"):
                violations.append(f"{date_str} stored in bucket {month_key}")
            if date_str in seen_in:
                violations.append(f"{date_str} in buckets {seen_in[date_str]} and {month_key}")
                continue
            seen_in[date_str] = month_key
            all_records[date_str] = record

    if violations:
        raise StoreConsistencyError(violations)
    return all_records
