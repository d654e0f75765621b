"""
Submission storage - persistence boundary for work submissions.

Provides:
- SubmissionStore: abstract interface the service persists through
- InMemorySubmissionStore: in-memory implementation for development/testing
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .models import QualityCheckResult, WorkSubmission, utc_now

logger = logging.getLogger(__name__)


@dataclass
class QualityRecord:
    job_id: str
    freelancer_address: Optional[str]
    work: str
    result: QualityCheckResult
    created_at: datetime = field(default_factory=utc_now)


class SubmissionStore(ABC):
    """Interface for work submission and quality-check storage."""

    @abstractmethod
    def get_submission(self, job_id: str, freelancer_address: str) -> Optional[WorkSubmission]:
        """Return the submission for a job/freelancer pair, or None."""

    @abstractmethod
    def save_submission(self, submission: WorkSubmission) -> None:
        """Create or replace a submission."""

    @abstractmethod
    def list_submissions(self,
                         job_id: str,
                         freelancer_address: Optional[str] = None) -> List[WorkSubmission]:
        """List submissions for a job, newest first."""

    @abstractmethod
    def add_quality_record(self, record: QualityRecord) -> None:
        """Append a quality-check result."""

    @abstractmethod
    def latest_quality_record(self,
                              job_id: str,
                              freelancer_address: str,
                              work: Optional[str] = None) -> Optional[QualityRecord]:
        """Return the freelancer's most recent quality-check result for a job, or None.

        When ``work`` is given only a record for that exact work counts.
        """


class InMemorySubmissionStore(SubmissionStore):
    """
    In-memory storage. Data is lost when the process exits.
    """

    def __init__(self):
        self._submissions: Dict[Tuple[str, str], WorkSubmission] = {}
        self._quality: Dict[str, List[QualityRecord]] = {}
        self._lock = threading.Lock()

    def get_submission(self, job_id: str, freelancer_address: str) -> Optional[WorkSubmission]:
        with self._lock:
            return self._submissions.get((job_id, freelancer_address))

    def save_submission(self, submission: WorkSubmission) -> None:
        with self._lock:
            self._submissions[(submission.job_id, submission.freelancer_address)] = submission
        logger.debug(
            "Saved submission %s/%s (%s)",
            submission.job_id, submission.freelancer_address, submission.status.value,
        )

    def list_submissions(self,
                         job_id: str,
                         freelancer_address: Optional[str] = None) -> List[WorkSubmission]:
        with self._lock:
            matches = [
                s for (jid, addr), s in self._submissions.items()
                if jid == job_id and (freelancer_address is None or addr == freelancer_address)
            ]
        return sorted(matches, key=lambda s: s.submitted_at, reverse=True)

    def add_quality_record(self, record: QualityRecord) -> None:
        with self._lock:
            self._quality.setdefault(record.job_id, []).append(record)

    def latest_quality_record(self,
                              job_id: str,
                              freelancer_address: str,
                              work: Optional[str] = None) -> Optional[QualityRecord]:
        with self._lock:
            records = list(self._quality.get(job_id, []))
        for record in reversed(records):
            if record.freelancer_address != freelancer_address:
                continue
            if work is None or record.work == work:
                return record
        return None
