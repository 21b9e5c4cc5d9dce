import argparse
import json
import sys
from typing import Callable, Optional

from tis_intake.client.form import TISValidationForm
from tis_intake.client.local_storage import LocalStorage
from tis_intake.models.fields import FIELD_LABELS, FIELD_NAMES
from tis_intake.services.api_client import ApiClient
from tis_intake.utils.config import API_URL, DRAFT_PATH, HOST, PORT
from tis_intake.utils.logger import get_logger, set_level


logger = get_logger("cli")

FORM_HELP = """Enter a value for each field. Commands:
  :save    save a draft        :clear   clear the draft
  :submit  submit the form     :show    show field status
  :quit    leave (the draft is kept only if saved)"""


def _print_notifications(form: TISValidationForm, out=print) -> None:
    for n in form.drain_notifications():
        out(f"[{n.kind}] {n.title} {n.message}")


def _print_status(form: TISValidationForm, out=print) -> None:
    out(f"{form.valid_fields_count} / {len(FIELD_NAMES)} fields validated")
    for field, result in form.validations.items():
        mark = "ok " if result.is_valid else "xx "
        value = form.data.to_wire()[field]
        out(f"  {mark}{FIELD_LABELS[field]:<13} {value!r:<30} {result.message}")


def run_form(form: TISValidationForm, read: Callable[[str], str] = input, out=print) -> int:
    """Line-driven form loop; returns 0 once the form has been submitted."""
    out(FORM_HELP)
    if form.has_draft:
        out("Draft available - your previous work has been restored")
    _print_status(form, out)

    while True:
        for field in FIELD_NAMES:
            current = form.data.to_wire()[field]
            try:
                line = read(f"{FIELD_LABELS[field]} [{current}]: ")
            except EOFError:
                return 1
            command = line.strip()
            if command == ":quit":
                return 0 if form.is_submitted else 1
            if command == ":save":
                form.save_draft()
            elif command == ":clear":
                form.clear_draft()
            elif command == ":show":
                _print_status(form, out)
            elif command == ":submit":
                result = form.submit()
                if not result.success:
                    for name, message in form.failing_fields:
                        out(f"  - {FIELD_LABELS[name]}: {message}")
            elif line:
                result = form.set_field(field, line)
                out(f"  {'ok' if result.is_valid else 'xx'} {result.message}")
            _print_notifications(form, out)
            if form.is_submitted:
                return 0


def _dump(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tis-intake", description="TIS validation tool: intake service and client.")
    p.add_argument("--api-url", default=API_URL, help="Base URL of the submission service")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the submission service")
    serve.add_argument("--host", default=HOST)
    serve.add_argument("--port", type=int, default=PORT)

    form = sub.add_parser("form", help="Fill in and submit the intake form")
    form.add_argument("--draft-path", default=str(DRAFT_PATH), help="Local storage file for drafts")

    ls = sub.add_parser("list", help="List stored submissions")
    ls.add_argument("--page", type=int, default=1)
    ls.add_argument("--limit", type=int, default=10)

    get = sub.add_parser("get", help="Show one submission")
    get.add_argument("id")

    delete = sub.add_parser("delete", help="Delete one submission")
    delete.add_argument("id")

    sub.add_parser("health", help="Check the service is up")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level("DEBUG")

    if args.command == "serve":
        from tis_intake.main import run
        run(host=args.host, port=args.port)
        return 0

    with ApiClient(base_url=args.api_url) as client:
        if args.command == "form":
            form = TISValidationForm(LocalStorage(args.draft_path), client)
            return run_form(form)
        if args.command == "list":
            result = client.get_submissions(page=args.page, limit=args.limit)
            if result.success:
                _dump({"data": result.data, "pagination": result.pagination})
        elif args.command == "get":
            result = client.get_submission_by_id(args.id)
            if result.success:
                _dump(result.data)
        elif args.command == "delete":
            result = client.delete_submission(args.id)
        else:
            result = client.health()

    if not result.success or args.command in ("delete", "health"):
        print(result.message, file=sys.stderr if not result.success else sys.stdout)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
