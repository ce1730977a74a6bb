from __future__ import annotations

"""JSON-backed, per-subject capped history store.

One document per subject, ``quiz-analytics-<subject>.json``:

{
  "schema": 1,
  "subject": "math",
  "attempts": [ {id, subjectId, subjectName, score, questions, completedAt}, ... ],
  "overallStats": {totalAttempts, averageScore, bestScore, totalTimeSpent, improvementRate}
}

Notes:
- attempts are kept in insertion order; appending beyond the cap drops the
  attempt with the earliest completion time.
- overallStats is derived from attempts on every write and never trusted on read.
- malformed attempts are skipped (logged) rather than failing the whole log.
"""

import json
import logging
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from analytics.metrics import compute_aggregate
from analytics.prepare import entries_frame
from quizsession.errors import HistoryStoreError
from .schema import DEFAULT_CAP, FILE_PREFIX, SCHEMA_VERSION, HistoryEntry, HistoryLog

_log = logging.getLogger(__name__)

DEFAULT_SUBJECT = "general"
_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def subject_key(subject: Optional[str]) -> str:
    """Normalise a subject id into a file-name-safe key."""
    key = _UNSAFE.sub("-", (subject or "").strip()).strip("-.")
    return key or DEFAULT_SUBJECT


class HistoryRepository:
    """Read and append capped per-subject history logs under ``data_dir``."""

    def __init__(self, data_dir: Path | str, cap: int = DEFAULT_CAP) -> None:
        if int(cap) < 1:
            raise ValueError("cap must be >= 1")
        self.data_dir = Path(data_dir)
        self.cap = int(cap)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ---- paths & locking ----
    def path_for(self, subject: str) -> Path:
        return self.data_dir / f"{FILE_PREFIX}{subject_key(subject)}.json"

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    # ---- reading ----
    def _read_raw(self, path: Path, backup: bool = False) -> Optional[Dict[str, Any]]:
        """Return the decoded document, or None when missing or unreadable."""
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            _log.warning("Unreadable history file %s (%s); treating as empty", path, e)
            if backup:
                self._backup(path)
            return None
        if not isinstance(data, dict):
            _log.warning("Unexpected history document in %s; treating as empty", path)
            if backup:
                self._backup(path)
            return None
        return data

    def _load_entries(self, path: Path, backup: bool = False) -> List[HistoryEntry]:
        data = self._read_raw(path, backup=backup)
        if data is None:
            return []
        schema = data.get("schema", SCHEMA_VERSION)
        if isinstance(schema, int) and schema > SCHEMA_VERSION:
            _log.warning("History file %s has newer schema %s", path, schema)
        raw_attempts = data.get("attempts", [])
        if not isinstance(raw_attempts, list):
            _log.warning("History file %s has no attempt list; treating as empty", path)
            return []
        entries: List[HistoryEntry] = []
        for i, raw in enumerate(raw_attempts):
            try:
                entries.append(HistoryEntry.model_validate(raw))
            except ValidationError as e:
                _log.warning("Skipping malformed attempt #%d in %s: %s", i, path, e.errors()[:1])
        return entries

    def get(self, subject: str) -> HistoryLog:
        """Return the subject's log (oldest first) with a freshly derived aggregate."""
        key = subject_key(subject)
        with self._lock_for(key):
            entries = self._load_entries(self.path_for(key))
        return HistoryLog(subject=key, entries=entries, aggregate=compute_aggregate(entries))

    def list_subjects(self) -> List[str]:
        if not self.data_dir.exists():
            return []
        return sorted(
            p.stem[len(FILE_PREFIX):]
            for p in self.data_dir.glob(f"{FILE_PREFIX}*.json")
            if p.is_file()
        )

    def all_entries(self) -> List[HistoryEntry]:
        """Every subject's entries merged, newest first."""
        merged: List[HistoryEntry] = []
        for subject in self.list_subjects():
            merged.extend(self.get(subject).entries)
        merged.sort(key=lambda e: e.completed_at, reverse=True)
        return merged

    # ---- writing ----
    def append(self, subject: str, entry: HistoryEntry) -> HistoryLog:
        """Append one entry, enforce the cap and rewrite the subject document.

        Raises HistoryStoreError when the document cannot be written.
        """
        key = subject_key(subject)
        path = self.path_for(key)
        with self._lock_for(key):
            entries = self._load_entries(path, backup=True)
            while len(entries) >= self.cap:
                dropped = min(entries, key=lambda e: e.completed_at)
                entries.remove(dropped)
                _log.debug("History cap %d reached for %s; dropping %s", self.cap, key, dropped.id)
            entries.append(entry)
            log = HistoryLog(subject=key, entries=entries, aggregate=compute_aggregate(entries))
            self._write(path, log)
        _log.info("Recorded attempt %s for %s (%d in log)", entry.id, key, len(entries))
        return log

    def _write(self, path: Path, log: HistoryLog) -> None:
        doc = {
            "schema": SCHEMA_VERSION,
            "subject": log.subject,
            "attempts": [e.model_dump(mode="json", by_alias=True) for e in log.entries],
            "overallStats": log.aggregate.model_dump(mode="json", by_alias=True),
        }
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(doc, indent=2), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise HistoryStoreError(f"Failed to write history file {path}: {e}") from e

    def _backup(self, path: Path) -> None:
        """Keep a copy of an unreadable document before it gets overwritten."""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        backup = path.with_name(f"{path.name}.backup-{stamp}")
        try:
            backup.write_bytes(path.read_bytes())
        except OSError as e:
            _log.warning("Could not back up %s: %s", path, e)

    def clear(self, subject: Optional[str] = None) -> List[str]:
        """Delete one subject's log, or every log when subject is None.

        Returns the cleared subject keys.
        """
        keys = [subject_key(subject)] if subject is not None else self.list_subjects()
        cleared: List[str] = []
        for key in keys:
            path = self.path_for(key)
            with self._lock_for(key):
                if not path.exists():
                    continue
                try:
                    path.unlink()
                except OSError as e:
                    raise HistoryStoreError(f"Failed to clear history file {path}: {e}") from e
            cleared.append(key)
        return cleared

    def export_ndjson(self, subject: str, out_path: Path | str) -> int:
        """Export a subject's attempts to line-delimited JSON; returns the row count."""
        df = entries_frame(self.get(subject).entries)
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_json(out_path, orient="records", lines=True, date_format="iso")
        return len(df)
