"""Relaunch package: watch a Cargo project and restart `cargo run` on changes.

Exports:
- app, main: Typer CLI entrypoints (from relaunch.cli)
- WatchLoop, watch: the restart loop (from relaunch.loop)
- Debouncer, ChangeHandler, DebouncedEvent, EventKind: debounced watchdog events (from relaunch.handlers)
- lift_cargo, static_fire, BuildCheckError: cargo process helpers (from relaunch.cargo)
- is_whitelisted, should_trigger: extension filter (from relaunch.utils)
"""

from .cli import app, main  # noqa: F401
from .loop import WatchLoop, watch  # noqa: F401
from .handlers import ChangeHandler, Debouncer, DebouncedEvent, EventKind  # noqa: F401
from .cargo import BuildCheckError, lift_cargo, static_fire  # noqa: F401
from .utils import is_whitelisted, should_trigger  # noqa: F401

__all__ = [
    "app",
    "main",
    "WatchLoop",
    "watch",
    "ChangeHandler",
    "Debouncer",
    "DebouncedEvent",
    "EventKind",
    "BuildCheckError",
    "lift_cargo",
    "static_fire",
    "is_whitelisted",
    "should_trigger",
]
