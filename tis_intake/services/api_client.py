import time
import httpx
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from tis_intake.models.submission_schema import ApiResult, FormData
from tis_intake.utils.config import API_URL
from tis_intake.utils.logger import get_logger


logger = get_logger("api-client")

SUBMIT_FAILED = "Failed to submit form. Please try again later."
FETCH_ALL_FAILED = "Failed to fetch submissions. Please try again later."
FETCH_ONE_FAILED = "Failed to fetch submission. Please try again later."
DELETE_FAILED = "Failed to delete submission. Please try again later."


def _error_message(exc: Exception, default: str) -> str:
    """Prefer the server's ``message`` (plus field errors), then the exception text."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            details = [e.get("message") for e in body.get("errors") or [] if isinstance(e, dict)]
            if details:
                return f"{body['message']}: {'; '.join(d for d in details if d)}"
            return body["message"]
    return str(exc) or default


class ApiClient:
    """
    Thin client for the submission service.

    Only ``submit_form`` retries, and only on ``httpx.NetworkError``
    (connect/read/write failures). Timeouts and HTTP error statuses are
    returned as failures straight away.
    """

    def __init__(
        self,
        base_url: str = API_URL,
        timeout: float = 10.0,
        retries: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        http_client: Optional[httpx.Client] = None,
    ):
        self.retries = retries
        self.retry_delay = retry_delay
        self.sleep = sleep
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        logger.info("API Request: %s %s", method.upper(), path)
        try:
            response = self.http.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("API Error: %s", e)
            raise
        return response

    def submit_form(self, data: Union[FormData, Mapping[str, Any]]) -> ApiResult:
        form = data if isinstance(data, FormData) else FormData.model_validate(dict(data))
        payload = {**form.to_wire(), "submittedAt": datetime.now(timezone.utc).isoformat()}

        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._request("POST", "/api/submissions", json=payload)
                body = response.json()
            except httpx.NetworkError as e:
                if attempt <= self.retries:
                    logger.warning("Retrying... %d attempts left", self.retries - attempt + 1)
                    self.sleep(self.retry_delay)
                    continue
                return ApiResult(success=False, message=_error_message(e, SUBMIT_FAILED))
            except httpx.HTTPError as e:
                return ApiResult(success=False, message=_error_message(e, SUBMIT_FAILED))
            except ValueError:
                logger.error("Submission response was not JSON")
                return ApiResult(success=False, message=SUBMIT_FAILED)

            logger.info("Submission accepted after %d attempt(s)", attempt)
            return ApiResult(
                success=True,
                message="Form submitted successfully",
                data=body.get("data") if isinstance(body, dict) else None,
            )

    def get_submissions(self, page: int = 1, limit: int = 10) -> ApiResult:
        try:
            body = self._request("GET", "/api/submissions", params={"page": page, "limit": limit}).json()
        except (httpx.HTTPError, ValueError):
            return ApiResult(success=False, message=FETCH_ALL_FAILED)
        return ApiResult(
            success=True,
            message=body.get("message") or "Submissions fetched successfully",
            data=body.get("data"),
            pagination=body.get("pagination"),
        )

    def get_submission_by_id(self, submission_id: str) -> ApiResult:
        try:
            body = self._request("GET", f"/api/submissions/{submission_id}").json()
        except (httpx.HTTPError, ValueError):
            return ApiResult(success=False, message=FETCH_ONE_FAILED)
        return ApiResult(success=True, message="Submission fetched successfully", data=body.get("data"))

    def delete_submission(self, submission_id: str) -> ApiResult:
        try:
            body = self._request("DELETE", f"/api/submissions/{submission_id}").json()
        except (httpx.HTTPError, ValueError):
            return ApiResult(success=False, message=DELETE_FAILED)
        return ApiResult(success=True, message=body.get("message") or "Submission deleted successfully")

    def health(self) -> ApiResult:
        try:
            body = self._request("GET", "/api/health").json()
        except (httpx.HTTPError, ValueError) as e:
            return ApiResult(success=False, message=_error_message(e, "Service unreachable"))
        return ApiResult(success=bool(body.get("success")), message=body.get("message", ""), data=body)
