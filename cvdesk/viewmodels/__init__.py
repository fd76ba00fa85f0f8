"""ViewModel package for UI state and command surfaces.

Call context:
    ``cvdesk/app/main.py`` and ``cvdesk/app/controller.py`` import concrete
    viewmodels from this package to bind front-end actions to workflows.

Dependencies:
    Modules in this package depend on domain types and lightweight formatting
    helpers only. I/O adapters stay outside; use cases are reached through
    callbacks or injected instances.

Responsibilities:
    - Expose mutable UI state and command intent callbacks.
    - Transform typed domain snapshots into view-facing rows.
    - Keep MVVM boundaries explicit by avoiding transport or persistence logic.
"""
