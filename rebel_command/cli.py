"""Terminal campaign — play Rebel Alliance Command in the console.

Drives the same :class:`SessionStore` the HTTP API uses and renders state
with Rich panels and tables.
"""

from __future__ import annotations

from collections.abc import Callable

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rebel_command.errors import CommandError
from rebel_command.models.game import GameState
from rebel_command.services.endings import Ending
from rebel_command.services.session_store import SessionStore

COLORS = {
    "primary": "#FFD700",  # Rebel gold - titles, accents
    "secondary": "#404040",  # borders
    "muted": "#666666",
    "success": "#00D26A",
    "warning": "#FFB800",
    "error": "#FF4444",
}

PHASE_TITLES = {
    1: "🚀 Phase 1: Rescue Leia",
    2: "🔍 Phase 2: Decode Plans",
    3: "⚔️ Phase 3: Prepare Battle",
    4: "💥 Phase 4: Death Star Assault",
}

QUIT_WORDS = frozenset({"q", "quit", "exit"})


def _reputation_color(reputation: int) -> str:
    if reputation >= 80:
        return COLORS["success"]
    if reputation >= 40:
        return COLORS["warning"]
    return COLORS["error"]


def _yes_no(flag: bool) -> str:
    return "✅ Yes" if flag else "❌ No"


def render_status(state: GameState) -> Table:
    table = Table(title="Command Status", box=box.ROUNDED, show_header=False, border_style=COLORS["secondary"])
    table.add_column("Stat", style=COLORS["muted"])
    table.add_column("Value")
    table.add_row("👤 Commander", state.commander_name)
    table.add_row("🎯 Current Phase", PHASE_TITLES.get(state.current_phase, "🌟 Mission Complete"))
    table.add_row("⭐ Reputation", Text(f"{state.reputation}/100", style=_reputation_color(state.reputation)))
    table.add_row("✨ Force Points", str(state.force_points))
    table.add_row("💰 Credits", str(state.credits))
    table.add_row("🚀 Ships", str(state.ships_available))
    table.add_row("👥 Pilots", str(state.pilots_available))
    table.add_row("👑 Leia Rescued", _yes_no(state.leia_rescued))
    table.add_row("📋 Death Star Plans", _yes_no(state.death_star_plans))
    table.add_row("🧙 Obi-Wan Alive", _yes_no(state.obi_wan_alive))
    return table


def render_options(state: GameState) -> Table:
    table = Table(box=box.SIMPLE_HEAVY, border_style=COLORS["secondary"])
    table.add_column("#", justify="right", style=COLORS["primary"])
    table.add_column("Option")
    table.add_column("Cost", justify="right")
    table.add_column("Requirement", style=COLORS["muted"])
    for option in state.current_options:
        label = Text(f"{option.icon} {option.text}\n", style="bold" if option.available else "dim strike")
        label.append(option.description, style=COLORS["muted"])
        cost = f"{option.cost} credits" if option.cost is not None else ""
        table.add_row(str(option.id), label, cost, option.requirement or "")
    return table


def render_ending(state: GameState, ending: Ending) -> Panel:
    details = ending.details
    style = COLORS["success"] if details.victorious else COLORS["error"]
    body = Group(
        Text(details.summary),
        Text(""),
        Text(state.last_action_result or "", style=COLORS["muted"]),
    )
    return Panel(body, title=details.title, border_style=style, box=box.DOUBLE)


class TerminalGame:
    """Interactive loop: prompt for a choice, apply it, show the result."""

    def __init__(
        self,
        store: SessionStore | None = None,
        console: Console | None = None,
        read_line: Callable[[str], str] | None = None,
    ) -> None:
        self.store = store if store is not None else SessionStore()
        self.console = console or Console()
        self._read_line = read_line or self.console.input

    def _ask(self, prompt: str) -> str | None:
        try:
            answer = self._read_line(prompt).strip()
        except EOFError:
            return None
        return None if answer.lower() in QUIT_WORDS else answer

    def _enlist(self, commander_name: str | None) -> str | None:
        while True:
            name = commander_name if commander_name is not None else self._ask("Commander name: ")
            commander_name = None
            if name is None:
                return None
            try:
                return self.store.create(name)
            except CommandError as exc:
                self.console.print(f"[{COLORS['error']}]❌ {exc}[/]")

    def _show_turn(self, state: GameState) -> None:
        self.console.print(render_status(state))
        self.console.print(Panel(state.phase_description, border_style=COLORS["primary"]))
        self.console.print(render_options(state))

    def run(self, commander_name: str | None = None) -> GameState | None:
        """Play until the campaign ends or the player quits; return the last state."""
        session_id = self._enlist(commander_name)
        if session_id is None:
            return None

        state = self.store.get(session_id)
        while not state.game_over:
            self._show_turn(state)
            answer = self._ask("Choose an option (q to quit): ")
            if answer is None:
                self.console.print(f"[{COLORS['muted']}]Mission aborted. May the Force be with you.[/]")
                return state
            try:
                choice = int(answer)
            except ValueError:
                self.console.print(f"[{COLORS['warning']}]Enter the number of an option.[/]")
                continue
            try:
                state = self.store.apply(session_id, choice)
            except CommandError as exc:
                self.console.print(f"[{COLORS['error']}]❌ {exc}[/]")
                continue
            if not state.game_over and state.last_action_result:
                self.console.print(state.last_action_result)

        ending = self.store.ending(session_id)
        if ending is not None:
            self.console.print(render_ending(state, ending))
        return state
