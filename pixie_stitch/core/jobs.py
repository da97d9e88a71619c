from __future__ import annotations

import copy
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Iterable, Iterator, List, Optional


@dataclass
class JobRecord:
    """Progress and result of one input image within a batch."""

    job_id: str
    image: str
    status: str = "pending"
    progress: float = 0.0
    meta: dict = field(default_factory=dict)
    files: List[str] = field(default_factory=list)
    error: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "image": self.image,
            "status": self.status,
            "progress": self.progress,
            "meta": copy.deepcopy(self.meta),
            "files": list(self.files),
            "error": self.error,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class JobStore:
    """
    Records of one batch, kept in the order images were submitted.

    Records move pending -> processing -> done | failed, or straight to skipped. Readers get
    copies; only the store's own methods change a record.
    """

    def __init__(self) -> None:
        self._records: Dict[str, JobRecord] = {}
        self._lock = Lock()

    def __contains__(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._records

    def _add(self, job_id: str, image: str, status: str) -> JobRecord:
        with self._lock:
            if job_id in self._records:
                raise KeyError(f"Job '{job_id}' already exists")
            record = JobRecord(job_id=job_id, image=image, status=status)
            self._records[job_id] = record
            return copy.deepcopy(record)

    @contextmanager
    def _editing(self, job_id: str) -> Iterator[JobRecord]:
        with self._lock:
            record = self._records[job_id]
            yield record
            record.updated_at = time.time()

    def start(self, job_id: str, image: str) -> JobRecord:
        return self._add(job_id, image, "processing")

    def skip(self, job_id: str, image: str) -> JobRecord:
        return self._add(job_id, image, "skipped")

    def report(self, job_id: str, progress: Optional[float] = None, **meta) -> None:
        """Advance progress and attach image facts (size, colors, segments) to ``meta``."""
        with self._editing(job_id) as record:
            if progress is not None:
                record.progress = progress
            record.meta.update(meta)

    def add_files(self, job_id: str, paths: Iterable[str]) -> None:
        with self._editing(job_id) as record:
            record.files.extend(str(p) for p in paths)

    def fail(self, job_id: str, error: str, image: Optional[str] = None) -> JobRecord:
        """Mark the job failed, creating it when it never started. The first error sticks."""
        if job_id not in self:
            self._add(job_id, image or job_id, "failed")
        with self._editing(job_id) as record:
            record.status = "failed"
            if record.error is None:
                record.error = error
        return self.snapshot(job_id)

    def finish(self, job_id: str) -> JobRecord:
        with self._editing(job_id) as record:
            record.status = "done"
            record.progress = 1.0
        return self.snapshot(job_id)

    def snapshot(self, job_id: str) -> Optional[JobRecord]:
        with self._lock:
            record = self._records.get(job_id)
            return copy.deepcopy(record) if record is not None else None

    def records(self, status: Optional[str] = None) -> List[JobRecord]:
        with self._lock:
            found = [r for r in self._records.values() if status is None or r.status == status]
            return [copy.deepcopy(r) for r in found]
