from typing import Optional, Any, List
from supabase import create_client, Client
from tis_intake.errors import StoreError
from tis_intake.models.submission_schema import Submission
from tis_intake.services.submission_store import SubmissionStore
from tis_intake.utils.config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, SUPABASE_TABLE
from tis_intake.utils.logger import get_logger


logger = get_logger("supabase-client")


_client: Optional[Client] = None


def supabase(url: Optional[str] = SUPABASE_URL, key: Optional[str] = SUPABASE_SERVICE_ROLE_KEY) -> Optional[Client]:
    global _client
    if _client:
        return _client
    if not url or not key:
        logger.info("Supabase not configured")
        return None
    _client = create_client(url, key)
    return _client


def _to_row(submission: Submission) -> dict[str, Any]:
    return submission.model_dump(mode="json")


class SupabaseSubmissionStore(SubmissionStore):
    """Submissions kept in a Supabase table with snake_case columns."""

    def __init__(self, client: Client, table: str = SUPABASE_TABLE):
        self.client = client
        self.table = table

    def _query(self):
        return self.client.table(self.table)

    def insert(self, submission: Submission) -> Submission:
        try:
            self._query().insert(_to_row(submission)).execute()
        except Exception as e:
            logger.error("Supabase insert failed: %s", e)
            raise StoreError() from e
        return submission

    def find(self, skip: int = 0, limit: int = 10) -> List[Submission]:
        try:
            res = (
                self._query()
                .select("*")
                .order("submitted_at", desc=True)
                .range(skip, skip + limit - 1)
                .execute()
            )
        except Exception as e:
            logger.error("Supabase select failed: %s", e)
            raise StoreError() from e
        return [Submission.model_validate(row) for row in res.data or []]

    def count(self) -> int:
        try:
            res = self._query().select("id", count="exact").limit(1).execute()
        except Exception as e:
            logger.error("Supabase count failed: %s", e)
            raise StoreError() from e
        return res.count or 0

    def find_by_id(self, submission_id: str) -> Optional[Submission]:
        try:
            res = self._query().select("*").eq("id", submission_id).limit(1).execute()
        except Exception as e:
            logger.error("Supabase select failed: %s", e)
            raise StoreError() from e
        rows = res.data or []
        return Submission.model_validate(rows[0]) if rows else None

    def delete_by_id(self, submission_id: str) -> Optional[Submission]:
        try:
            res = self._query().delete().eq("id", submission_id).execute()
        except Exception as e:
            logger.error("Supabase delete failed: %s", e)
            raise StoreError() from e
        rows = res.data or []
        return Submission.model_validate(rows[0]) if rows else None
