import json
import logging

import pytest
from fastapi.testclient import TestClient

from tis_intake.client.form import DRAFT_KEY, TISValidationForm
from tis_intake.client.local_storage import LocalStorage
from tis_intake.models.submission_schema import ApiResult
from tis_intake.services.api_client import ApiClient


class FakeApi:
    def __init__(self, result=None, error=None):
        self.result = result or ApiResult(success=True, message="Form submitted successfully", data={})
        self.error = error
        self.calls = []

    def submit_form(self, data):
        self.calls.append(data)
        if self.error:
            raise self.error
        return self.result


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "local_storage.json")


def _fill(form, payload):
    for field, value in payload.items():
        form.set_field(field, value)


def test_draft_round_trip(storage, valid_payload):
    form = TISValidationForm(storage, FakeApi())
    _fill(form, valid_payload)
    assert form.save_draft() is True

    reloaded = TISValidationForm(storage, FakeApi())
    assert reloaded.has_draft is True
    assert reloaded.data.to_wire() == valid_payload
    assert json.loads(storage.get_item(DRAFT_KEY)) == valid_payload


def test_incomplete_draft_is_stored_unvalidated(storage):
    form = TISValidationForm(storage, FakeApi())
    form.set_field("erCode", "nonsense")
    assert form.save_draft()
    assert TISValidationForm(storage, FakeApi()).data.er_code == "nonsense"


def test_clear_draft_is_idempotent(storage, valid_payload):
    form = TISValidationForm(storage, FakeApi())
    _fill(form, valid_payload)
    form.save_draft()

    form.clear_draft()
    once = (form.data, form.has_draft, form.is_draft_saved, form.is_submitted, storage.get_item(DRAFT_KEY))
    form.clear_draft()
    twice = (form.data, form.has_draft, form.is_draft_saved, form.is_submitted, storage.get_item(DRAFT_KEY))

    assert once == twice
    assert form.data.to_wire() == {k: "" for k in valid_payload}
    assert storage.get_item(DRAFT_KEY) is None


def test_corrupt_draft_is_ignored(storage, caplog):
    storage.set_item(DRAFT_KEY, "{not json")
    with caplog.at_level(logging.ERROR):
        form = TISValidationForm(storage, FakeApi())
    assert form.has_draft is False
    assert form.data.to_wire()["name"] == ""
    assert "Error loading draft" in caplog.text
    assert form.notifications == []


def test_draft_saved_flag_expires(storage):
    clock = FakeClock()
    form = TISValidationForm(storage, FakeApi(), clock=clock)
    form.save_draft()
    assert form.is_draft_saved

    clock.now = 2.9
    assert form.is_draft_saved
    clock.now = 3.0
    assert not form.is_draft_saved


def test_editing_resets_draft_saved_flag(storage):
    form = TISValidationForm(storage, FakeApi(), clock=FakeClock())
    form.save_draft()
    form.set_field("name", "Jane")
    assert not form.is_draft_saved


def test_set_field_returns_live_validation(storage):
    form = TISValidationForm(storage, FakeApi())
    assert form.set_field("erCode", "ER12").is_valid is False
    assert form.set_field("er_code", "ER123456").is_valid is True
    assert form.valid_fields_count == 1
    with pytest.raises(KeyError):
        form.set_field("colour", "red")


def test_empty_form_never_reaches_the_network(storage):
    api = FakeApi()
    form = TISValidationForm(storage, api)

    result = form.submit()

    assert result.success is False
    assert api.calls == []
    assert form.can_submit is False
    assert [(n.kind, n.message) for n in form.notifications] == [("error", "Complete all fields to submit")]


def test_successful_submit_clears_draft(storage, valid_payload):
    api = FakeApi()
    form = TISValidationForm(storage, api)
    _fill(form, valid_payload)
    form.save_draft()

    result = form.submit()

    assert result.success
    assert len(api.calls) == 1
    assert form.is_submitted and not form.is_submitting
    assert form.has_draft is False
    assert storage.get_item(DRAFT_KEY) is None
    assert [n.title for n in form.drain_notifications()] == ["Draft Saved!", "Form Submitted Successfully!"]


def test_failed_submit_keeps_draft(storage, valid_payload):
    api = FakeApi(result=ApiResult(success=False, message="Validation failed"))
    form = TISValidationForm(storage, api)
    _fill(form, valid_payload)
    form.save_draft()
    form.drain_notifications()

    form.submit()

    assert form.has_draft is True
    assert storage.get_item(DRAFT_KEY) is not None
    (note,) = form.drain_notifications()
    assert note.kind == "error" and note.message == "Validation failed"


def test_unexpected_error_becomes_notification(storage, valid_payload):
    form = TISValidationForm(storage, FakeApi(error=RuntimeError("boom")))
    _fill(form, valid_payload)

    result = form.submit()

    assert result.success is False
    assert form.is_submitting is False
    assert form.drain_notifications()[0].title == "Submission Error"


def test_outstanding_submit_blocks_a_second_send(storage, valid_payload):
    api = FakeApi()
    form = TISValidationForm(storage, api)
    _fill(form, valid_payload)
    form.is_submitting = True

    assert form.submit().success is False
    assert api.calls == []


def test_form_against_live_service(storage, app, valid_payload):
    with TestClient(app) as http:
        form = TISValidationForm(storage, ApiClient(http_client=http))
        _fill(form, valid_payload)
        form.save_draft()

        result = form.submit()

        assert result.success
        assert result.data["erCode"] == "ER123456"
        assert storage.get_item(DRAFT_KEY) is None
        listing = http.get("/api/submissions").json()
        assert listing["data"][0]["id"] == result.data["id"]
