from tis_intake.cli import build_parser, run_form
from tis_intake.client.form import DRAFT_KEY, TISValidationForm
from tis_intake.client.local_storage import LocalStorage
from tis_intake.models.submission_schema import ApiResult


class FakeApi:
    def __init__(self):
        self.calls = []

    def submit_form(self, data):
        self.calls.append(data)
        return ApiResult(success=True, message="Form submitted successfully", data={"id": "c" * 32})


def _scripted(lines):
    feed = iter(lines)
    return lambda prompt: next(feed)


def test_form_loop_submits(tmp_path, valid_payload):
    api = FakeApi()
    form = TISValidationForm(LocalStorage(tmp_path / "ls.json"), api)
    lines = [
        valid_payload["name"],
        valid_payload["productLine"],
        valid_payload["erCode"],
        valid_payload["description"],
        valid_payload["modelNumber"],
        ":submit",
    ]
    out = []

    assert run_form(form, read=_scripted(lines), out=out.append) == 0
    assert len(api.calls) == 1
    assert any("Form Submitted Successfully!" in line for line in out)


def test_form_loop_explains_invalid_submit_and_saves_draft(tmp_path):
    storage = LocalStorage(tmp_path / "ls.json")
    api = FakeApi()
    form = TISValidationForm(storage, api)
    out = []

    code = run_form(form, read=_scripted(["J", ":submit", ":save", ":quit"]), out=out.append)

    assert code == 1
    assert api.calls == []
    assert "[error] Submission Blocked Complete all fields to submit" in out
    assert any("Name: Name must be at least 2 characters" in line for line in out)
    assert storage.get_item(DRAFT_KEY) is not None


def test_parser_commands():
    args = build_parser().parse_args(["list", "--page", "2", "--limit", "5"])
    assert (args.command, args.page, args.limit) == ("list", 2, 5)
    assert build_parser().parse_args(["delete", "abc"]).id == "abc"
