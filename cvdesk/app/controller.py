"""Adapter and use-case wiring for the client runtime.

This module owns lazy construction of concrete REST adapters and workflow
objects that depend on values in :class:`cvdesk.viewmodels.settings_vm.SettingsVM`.
Workflows are only built for an authenticated :class:`SessionGate`; the gate
is passed in, never read from ambient state.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Optional

from ..adapters.contact_list_rest import ContactListRestAdapter
from ..adapters.parser_rest import ParserRestAdapter
from ..adapters.search_rest import SearchRestAdapter
from ..domain.ports import UseCaseError
from ..domain.session import SessionGate
from ..usecases.list_sync import ListSyncWorkflow
from ..usecases.search_orchestrator import SearchOrchestrator
from ..usecases.upload_coordinator import UploadCoordinator
from ..viewmodels.settings_vm import SettingsVM

LOGGER = logging.getLogger(__name__)


class AppController:
    """Create and cache runtime adapters/workflows from settings state.

    Call chain:
        ``cvdesk.app.main`` creates one instance per command and calls
        ``require_ready`` before upload/search/list operations.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        session_gate: SessionGate,
        *,
        executor: Optional[Executor] = None,
    ) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings_vm: Settings state with base URLs, API key and timeouts.
            session_gate: Operator session; workflows require it signed in.
            executor: Pool for blocking adapter calls (loop default when ``None``).
        """
        self.settings_vm = settings_vm
        self.session_gate = session_gate
        self.executor = executor
        self._parser_adapter: Optional[ParserRestAdapter] = None
        self._search_adapter: Optional[SearchRestAdapter] = None
        self._list_adapter: Optional[ContactListRestAdapter] = None
        self.uploads: Optional[UploadCoordinator] = None
        self.search: Optional[SearchOrchestrator] = None
        self.list_sync: Optional[ListSyncWorkflow] = None

    def ensure_ready(self) -> bool:
        """Ensure adapters/workflows are available for network operations.

        Returns:
            ``True`` when dependencies are available, ``False`` when the
            session is signed out or the API base URL is missing.
        """
        if not self.session_gate.is_authenticated:
            return False
        if self.uploads and self.search and self.list_sync:
            return True

        base_url = self.settings_vm.api_base_url
        if not base_url:
            return False
        api_key = self.settings_vm.api_key or None

        if self._parser_adapter is None:
            self._parser_adapter = ParserRestAdapter(
                self.settings_vm.parser_base_url,
                api_key=api_key,
                upload_timeout_s=self.settings_vm.upload_timeout_s,
            )
            self.uploads = UploadCoordinator(self._parser_adapter, executor=self.executor)

        if self._search_adapter is None:
            self._search_adapter = SearchRestAdapter(
                base_url,
                api_key=api_key,
                search_timeout_s=self.settings_vm.search_timeout_s,
            )
            self.search = SearchOrchestrator(self._search_adapter, executor=self.executor)

        if self._list_adapter is None:
            self._list_adapter = ContactListRestAdapter(
                base_url,
                api_key=api_key,
                request_timeout_s=self.settings_vm.request_timeout_s,
                processing_types=self.settings_vm.list_processing_types,
                limit=self.settings_vm.list_limit,
            )
            self.list_sync = ListSyncWorkflow(
                self._list_adapter,
                clear_selection=self.search.clear_selection,
                executor=self.executor,
            )
        LOGGER.debug("Workflows wired against %s", base_url)
        return True

    def require_ready(self) -> None:
        """Like ``ensure_ready`` but raises a presentable error."""
        if self.ensure_ready():
            return
        if not self.session_gate.is_authenticated:
            raise UseCaseError("NOT_SIGNED_IN", "Please sign in first.", kind="validation")
        raise UseCaseError(
            "API_URL_MISSING", "Backend URL is not configured.", kind="validation"
        )
