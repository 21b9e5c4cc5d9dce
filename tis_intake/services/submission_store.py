import re
import threading
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from tis_intake.models.submission_schema import Submission


_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_submission_id() -> str:
    return uuid.uuid4().hex


def is_valid_submission_id(value: str) -> bool:
    return isinstance(value, str) and _ID_RE.fullmatch(value) is not None


class SubmissionStore(ABC):
    """Document store for submissions. Each call touches at most one record."""

    @abstractmethod
    def insert(self, submission: Submission) -> Submission: ...

    @abstractmethod
    def find(self, skip: int = 0, limit: int = 10) -> List[Submission]:
        """Newest ``submitted_at`` first."""

    @abstractmethod
    def count(self) -> int: ...

    @abstractmethod
    def find_by_id(self, submission_id: str) -> Optional[Submission]: ...

    @abstractmethod
    def delete_by_id(self, submission_id: str) -> Optional[Submission]: ...


class InMemorySubmissionStore(SubmissionStore):
    def __init__(self):
        self._docs: dict[str, Submission] = {}
        self._lock = threading.Lock()

    def insert(self, submission: Submission) -> Submission:
        with self._lock:
            self._docs[submission.id] = submission
        return submission

    def find(self, skip: int = 0, limit: int = 10) -> List[Submission]:
        with self._lock:
            docs = sorted(self._docs.values(), key=lambda s: s.submitted_at, reverse=True)
        return docs[skip:skip + limit]

    def count(self) -> int:
        with self._lock:
            return len(self._docs)

    def find_by_id(self, submission_id: str) -> Optional[Submission]:
        with self._lock:
            return self._docs.get(submission_id)

    def delete_by_id(self, submission_id: str) -> Optional[Submission]:
        with self._lock:
            return self._docs.pop(submission_id, None)
