import json
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from tis_intake.client import validators
from tis_intake.client.local_storage import LocalStorage
from tis_intake.models.submission_schema import ApiResult, FormData, ValidationResult
from tis_intake.services.api_client import ApiClient
from tis_intake.utils.logger import get_logger


logger = get_logger("form")

DRAFT_KEY = "tis-validation-draft"
DRAFT_SAVED_WINDOW = 3.0

# wire name -> FormData attribute
_ATTRS = {f.alias or name: name for name, f in FormData.model_fields.items()}
_WIRE = {attr: wire for wire, attr in _ATTRS.items()}


@dataclass
class Notification:
    kind: str  # "success" | "error"
    title: str
    message: str


class TISValidationForm:
    """
    State of the single intake form.

    Validations are derived from ``data`` on every read, so any field change
    is reflected immediately. The draft lives in ``storage`` under
    ``DRAFT_KEY`` and is read once, at construction.
    """

    def __init__(
        self,
        storage: LocalStorage,
        api_client: ApiClient,
        clock: Callable[[], float] = time.monotonic,
        draft_saved_window: float = DRAFT_SAVED_WINDOW,
    ):
        self.storage = storage
        self.api_client = api_client
        self.clock = clock
        self.draft_saved_window = draft_saved_window

        self.data = FormData()
        self.is_submitted = False
        self.is_submitting = False
        self.has_draft = False
        self.notifications: List[Notification] = []
        self._draft_saved_at: Optional[float] = None

        self._load_draft()

    def _load_draft(self) -> None:
        raw = self.storage.get_item(DRAFT_KEY)
        if raw is None:
            return
        try:
            self.data = FormData.model_validate(json.loads(raw))
        except ValueError as e:
            logger.error("Error loading draft: %s", e)
            return
        self.has_draft = True

    def _notify(self, kind: str, title: str, message: str) -> None:
        self.notifications.append(Notification(kind, title, message))

    def drain_notifications(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    # derived state

    @property
    def validations(self) -> Dict[str, ValidationResult]:
        return validators.validate_form(self.data)

    @property
    def is_form_valid(self) -> bool:
        return validators.is_form_valid(self.data)

    @property
    def valid_fields_count(self) -> int:
        return validators.valid_fields_count(self.data)

    @property
    def failing_fields(self) -> List[Tuple[str, str]]:
        return validators.failing_fields(self.data)

    @property
    def can_submit(self) -> bool:
        return self.is_form_valid and not self.is_submitting

    @property
    def is_draft_saved(self) -> bool:
        if self._draft_saved_at is None:
            return False
        return self.clock() - self._draft_saved_at < self.draft_saved_window

    # actions

    def set_field(self, name: str, value: str) -> ValidationResult:
        attr = _ATTRS.get(name, name)
        if attr not in _WIRE:
            raise KeyError(name)
        self.data = self.data.model_copy(update={attr: value})
        self.is_submitted = False
        self._draft_saved_at = None
        return self.validations[_WIRE[attr]]

    def save_draft(self) -> bool:
        try:
            self.storage.set_item(DRAFT_KEY, json.dumps(self.data.to_wire()))
        except OSError as e:
            logger.error("Error saving draft: %s", e)
            self._notify("error", "Save Failed", "Unable to save draft. Please try again.")
            return False
        self._draft_saved_at = self.clock()
        self.has_draft = True
        self._notify("success", "Draft Saved!", "Your progress has been preserved.")
        return True

    def clear_draft(self) -> None:
        self.storage.remove_item(DRAFT_KEY)
        self.data = FormData()
        self.has_draft = False
        self._draft_saved_at = None
        self.is_submitted = False

    def _reject(self, message: str) -> ApiResult:
        self._notify("error", "Submission Blocked", message)
        return ApiResult(success=False, message=message)

    def submit(self) -> ApiResult:
        if self.is_submitting:
            return self._reject("A submission is already in progress")
        if not self.is_form_valid:
            return self._reject("Complete all fields to submit")

        self.is_submitting = True
        try:
            result = self.api_client.submit_form(self.data)
        except Exception:
            logger.exception("Error submitting form")
            message = "An unexpected error occurred. Please try again."
            self._notify("error", "Submission Error", message)
            return ApiResult(success=False, message=message)
        finally:
            self.is_submitting = False

        if result.success:
            self.is_submitted = True
            self.storage.remove_item(DRAFT_KEY)
            self.has_draft = False
            self._notify("success", "Form Submitted Successfully!", "Your data has been saved to the database.")
        else:
            self._notify("error", "Submission Failed", result.message)
        return result
