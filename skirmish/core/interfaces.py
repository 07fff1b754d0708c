"""
Collaborator interfaces of the combat core.

The core never performs I/O itself. Persistence, the player-facing combat
log, and the inventory are supplied by the host through these protocols.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from skirmish.core.constants import LogKind
from skirmish.core.utils import cprint


class SaveScheduler(Protocol):
    """Persistence collaborator. Results are never inspected by the core."""

    def schedule_save(
        self, partial_state: dict[str, Any], *, immediate: bool = False
    ) -> None: ...


class CombatLogSink(Protocol):
    """Player-facing log side channel. The core never reads it back."""

    def add_log(self, message: str, kind: LogKind) -> None: ...


class Inventory(Protocol):
    """Inventory collaborator used to grant loot."""

    def create_item_instance(self, item_def_id: str) -> Any: ...

    def add_item_to_inventory(self, item: Any, qty: int) -> None: ...


@dataclass(frozen=True)
class LogEntry:
    """One combat log line."""

    message: str
    kind: LogKind


class CombatLog:
    """
    In-memory combat log.

    Keeps the most recent entries and, when `echo` is set, prints each line
    through the rich console using the color of its kind.
    """

    def __init__(self, max_entries: int = 200, echo: bool = False) -> None:
        self.max_entries = max_entries
        self.echo = echo
        self.entries: list[LogEntry] = []

    def add_log(self, message: str, kind: LogKind = LogKind.NORMAL) -> None:
        self.entries.append(LogEntry(message, kind))
        if len(self.entries) > self.max_entries:
            del self.entries[: len(self.entries) - self.max_entries]
        if self.echo:
            cprint(f"    {kind.colorize(message)}")

    def messages(self, kind: LogKind | None = None) -> list[str]:
        """Returns the logged messages, optionally filtered by kind."""
        return [e.message for e in self.entries if kind is None or e.kind == kind]

    def clear(self) -> None:
        self.entries.clear()


class MemorySaveScheduler:
    """Save collaborator that records every request, for demos and tests."""

    def __init__(self) -> None:
        self.saves: list[tuple[dict[str, Any], bool]] = []

    def schedule_save(
        self, partial_state: dict[str, Any], *, immediate: bool = False
    ) -> None:
        self.saves.append((partial_state, immediate))
