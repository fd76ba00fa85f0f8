"""Command line front end for resume upload, candidate search and list sync.

Each sub-command builds the settings/session/controller stack, runs its
workflow on an ``asyncio`` event loop and prints the view-model rows.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from ..adapters.storage_local import StorageLocal
from ..domain.entities import CandidateFile
from ..domain.ports import UseCaseError
from ..domain.session import SessionGate
from ..utils.logging import configure_logging
from ..viewmodels.list_sync_vm import ListSyncVM
from ..viewmodels.search_input_vm import MODE_ALL, MODE_ANY, MODE_LABELS, SearchInputVM
from ..viewmodels.search_results_vm import ResultRow, SearchResultsVM
from ..viewmodels.settings_vm import SettingsVM
from ..viewmodels.upload_vm import UploadVM
from .controller import AppController

LOGGER = logging.getLogger(__name__)

DEFAULT_STORAGE_DIR = os.path.join("~", ".cvdesk")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 3


class App:
    """Per-invocation runtime: storage, settings, session and workflows."""

    def __init__(self, storage_dir: str, *, out=None) -> None:
        self.out = out or sys.stdout
        self.storage = StorageLocal(os.path.expanduser(storage_dir))
        self.settings_vm = SettingsVM(on_save=self.storage.save_user_prefs)
        try:
            self.settings_vm.apply_dict(self.storage.load_user_prefs())
        except ValueError as exc:
            LOGGER.warning("Ignoring invalid saved settings: %s", exc)
        self.session = SessionGate(self.storage)
        self.session.load()
        self.executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="cvdesk-io")
        self.controller = AppController(self.settings_vm, self.session, executor=self.executor)

    def close(self) -> None:
        self.executor.shutdown(wait=False)

    def echo(self, text: str = "") -> None:
        print(text, file=self.out)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def cmd_login(self, args: argparse.Namespace) -> int:
        session = self.session.sign_in(args.username)
        self.echo(f"Signed in as {session.username}")
        return EXIT_OK

    def cmd_logout(self, args: argparse.Namespace) -> int:
        self.session.sign_out()
        self.echo("Signed out")
        return EXIT_OK

    def cmd_config(self, args: argparse.Namespace) -> int:
        updates = {}
        for item in args.set or ():
            key, sep, value = item.partition("=")
            if not sep:
                raise UseCaseError("INVALID_SETTING", f"Expected KEY=VALUE, got '{item}'.", kind="validation")
            updates[key.strip()] = value
        if updates:
            try:
                self.settings_vm.apply_dict(updates)
                self.settings_vm.cmd_save()
            except ValueError as exc:
                raise UseCaseError("INVALID_SETTING", str(exc), kind="validation") from exc
        for key, value in sorted(self.settings_vm.to_dict().items()):
            if key == "api_key" and value:
                value = "***"
            self.echo(f"{key} = {value}")
        return EXIT_OK

    async def cmd_upload(self, args: argparse.Namespace) -> int:
        self.controller.require_ready()
        files: List[CandidateFile] = []
        for raw in args.files:
            try:
                files.append(CandidateFile.from_path(raw))
            except OSError as exc:
                self.echo(f"{raw}: cannot read file ({exc.strerror or exc})")
        vm = UploadVM(self.controller.uploads, on_notice=self.echo)
        receipt = vm.add_files(files)
        await self.controller.uploads.wait_idle()

        for row in vm.rows():
            line = f"[{row.status}] {row.file_name} ({row.size})"
            self.echo(f"{line} - {row.detail}" if row.detail else line)
            if args.verbose:
                for label, value in vm.parsed_fields(row.item_id):
                    self.echo(f"    {label}: {value}")
        if vm.summary_label:
            self.echo(vm.summary_label)
        failed = any(item.status == "failed" for item in self.controller.uploads.items)
        return EXIT_FAILED if failed or receipt.rejected or not files else EXIT_OK

    async def cmd_search(self, args: argparse.Namespace) -> int:
        results_vm = await self._run_search(args)
        self._print_results(results_vm)
        return EXIT_FAILED if results_vm.orchestrator.phase == "failed" else EXIT_OK

    async def cmd_lists(self, args: argparse.Namespace) -> int:
        self.controller.require_ready()
        workflow = self.controller.list_sync
        await workflow.load_lists()
        if workflow.lists_error:
            self.echo(workflow.lists_error)
            return EXIT_FAILED
        if not workflow.lists:
            self.echo("No lists found")
        for item in workflow.lists:
            self.echo(f"{item.list_id}\t{item.name or 'N/A'}")
        return EXIT_OK

    async def cmd_sync(self, args: argparse.Namespace) -> int:
        results_vm = await self._run_search(args)
        if results_vm.orchestrator.phase != "completed":
            self.echo(results_vm.summary_label)
            return EXIT_FAILED
        orchestrator = results_vm.orchestrator
        if args.only:
            for contact_id in args.only:
                if not orchestrator.toggle(contact_id):
                    self.echo(f"Ignoring {contact_id}: not in the search results")
        else:
            orchestrator.select_all()
        self._print_results(results_vm)

        form = ListSyncVM(
            self.controller.list_sync,
            selected_ids=lambda: [r.contact_id for r in orchestrator.selected_results()],
        )
        await form.open()
        if args.create is not None:
            form.set_list_name(args.create)
        else:
            form.set_mode("existing")
            form.choose_list(args.list_id)
        outcome = await form.submit()
        if outcome is None:
            self.echo(form.error_message)
            return EXIT_FAILED
        self.echo(form.warning_message or form.success_message)
        return EXIT_PARTIAL if outcome.is_partial else EXIT_OK

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _run_search(self, args: argparse.Namespace) -> SearchResultsVM:
        self.controller.require_ready()
        orchestrator = self.controller.search
        pending: List[tuple] = []
        input_vm = SearchInputVM(on_search_requested=lambda terms, mode: pending.append((terms, mode)))
        input_vm.add_terms(args.terms)
        input_vm.set_mode(MODE_ALL if args.all else MODE_ANY)
        input_vm.request_search()
        terms, mode = pending[-1]
        LOGGER.debug("Searching %s (%s)", list(terms), MODE_LABELS[mode])
        await orchestrator.commit(terms, mode)
        return SearchResultsVM(orchestrator, contact_url=self.settings_vm.contact_url)

    def _print_results(self, vm: SearchResultsVM) -> None:
        self.echo(vm.summary_label)
        for row in vm.rows():
            self.echo(self._format_row(row))

    @staticmethod
    def _format_row(row: ResultRow) -> str:
        mark = "[x]" if row.selected else "[ ]"
        keywords = ", ".join(row.matched_keywords) or "-"
        line = f"{mark} {row.contact_id}  {row.name_text} <{row.email}>  {row.job_title_text}  [{keywords}]"
        if row.contact_url:
            line += f"  {row.contact_url}"
        return line


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cvdesk", description="Resume upload and candidate search client.")
    parser.add_argument("--storage-dir", default=DEFAULT_STORAGE_DIR, help="Settings/session directory")
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Start an operator session")
    login.add_argument("username")
    sub.add_parser("logout", help="End the operator session")

    config = sub.add_parser("config", help="Show or change settings")
    config.add_argument("--set", action="append", metavar="KEY=VALUE")

    upload = sub.add_parser("upload", help="Upload and parse resume files")
    upload.add_argument("files", nargs="+")
    upload.add_argument("-v", "--verbose", action="store_true", help="Print parsed fields")

    search = sub.add_parser("search", help="Search candidates by keywords")
    search.add_argument("terms", nargs="+")
    search.add_argument("--all", action="store_true", help="Require all keywords (default: any)")

    sub.add_parser("lists", help="Show the HubSpot list catalog")

    sync = sub.add_parser("sync", help="Search, then add the results to a HubSpot list")
    sync.add_argument("terms", nargs="+")
    sync.add_argument("--all", action="store_true", help="Require all keywords (default: any)")
    sync.add_argument("--only", nargs="+", metavar="CONTACT_ID", help="Select only these results")
    target = sync.add_mutually_exclusive_group(required=True)
    target.add_argument("--create", metavar="NAME", help="Create a new list")
    target.add_argument("--list-id", metavar="ID", help="Add to an existing list")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    app = App(args.storage_dir)
    configure_logging(debug=args.debug or app.settings_vm.debug_logging)
    handler = getattr(app, f"cmd_{args.command}")
    try:
        result = handler(args)
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
        return result
    except UseCaseError as err:
        LOGGER.debug("Command %s failed [%s/%s]", args.command, err.kind, err.code)
        app.echo(err.message)
        return EXIT_FAILED
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
