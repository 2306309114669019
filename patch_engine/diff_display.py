"""
Diff display — colored diff rendering and the interactive confirmation
gates that show a preview and wait for approval before a file is written.

Includes a Textual-based diff viewer and a plain console prompt used when
Textual cannot take over the terminal.
"""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Footer, Input, Static

from .config import Config
from .editing.confirmation import (
    AutoApprove, ConfirmationGate, ConfirmationRequest, ConfirmationResponse,
    SessionGate,
)

logger = logging.getLogger(__name__)


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a rendered diff.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    lines = diff_text.splitlines()
    colored: list[str] = []
    for line in lines:
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"\033[1m{line}\033[0m")  # bold
        elif line.startswith("@@"):
            colored.append(f"\033[36m{line}\033[0m")  # cyan
        elif line.startswith("+"):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith("-"):
            colored.append(f"\033[31m{line}\033[0m")  # red
        else:
            colored.append(line)
    return "\n".join(colored)


def _format_rich_diff(diff_text: str) -> str:
    """Convert rendered diff text to Rich markup for Textual display."""
    lines = diff_text.splitlines()
    markup_lines: list[str] = []
    for line in lines:
        # Escape Rich markup characters in the line content
        escaped = line.replace("[", "\\[")
        if line.startswith("+++") or line.startswith("---"):
            markup_lines.append(f"[bold white]{escaped}[/bold white]")
        elif line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


# ══════════════════════════════════════════════════════════════════
#  Console confirmation
# ══════════════════════════════════════════════════════════════════

class ConsoleConfirmation:
    """Print the preview and read an approve / reject / session choice."""

    def __init__(self, color: bool = True) -> None:
        self.color = color

    def request_confirmation(
        self, request: ConfirmationRequest,
    ) -> ConfirmationResponse:
        preview = request.preview_diff
        print("\n" + "=" * 60)
        print(f"  {request.operation}: {request.path}")
        print("=" * 60)
        print(format_colored_diff(preview) if self.color else preview)
        print("\n" + "=" * 60)
        print("  [A]pprove  |  [R]eject  |  [S]ession (approve all file edits)")
        print()

        while True:
            try:
                choice = input("  Your choice: ").strip().lower()
            except (EOFError, KeyboardInterrupt):
                return ConfirmationResponse(confirmed=False)
            if choice in ("a", "approve"):
                return ConfirmationResponse(confirmed=True)
            elif choice in ("s", "session"):
                return ConfirmationResponse(confirmed=True, remember=True)
            elif choice in ("r", "reject"):
                return ConfirmationResponse(
                    confirmed=False, feedback=self._read_feedback(),
                )
            else:
                print("  Invalid choice. Use A, R or S.")

    @staticmethod
    def _read_feedback() -> str | None:
        try:
            feedback = input("  Feedback (optional): ").strip()
        except (EOFError, KeyboardInterrupt):
            return None
        return feedback or None


# ══════════════════════════════════════════════════════════════════
#  Interactive diff approval (Textual TUI)
# ══════════════════════════════════════════════════════════════════

class DiffApprovalApp(App):
    """Interactive diff viewer with approve/reject."""

    CSS = """
    Screen {
        background: $surface;
    }
    #title-bar {
        dock: top;
        height: 3;
        background: #1a1a2e;
        color: #e94560;
        text-align: center;
        padding: 1;
        text-style: bold;
    }
    #diff-scroll {
        height: 1fr;
        margin: 1 2;
        border: round #444;
        padding: 1;
    }
    #feedback {
        dock: bottom;
        margin: 0 2;
    }
    #action-buttons {
        dock: bottom;
        height: 3;
        align: center middle;
        padding: 0 2;
    }
    #action-buttons Button {
        margin: 0 2;
        min-width: 20;
    }
    """

    BINDINGS = [
        Binding("ctrl+a", "approve", "Approve"),
        Binding("ctrl+s", "approve_session", "Approve session"),
        Binding("escape", "reject", "Reject"),
    ]

    def __init__(self, request: ConfirmationRequest) -> None:
        super().__init__()
        self._request = request
        self.response = ConfirmationResponse(confirmed=False)

    def compose(self) -> ComposeResult:
        yield Static(
            f" ━━  {self._request.operation} — {self._request.path}  ━━ ",
            id="title-bar",
        )
        with VerticalScroll(id="diff-scroll"):
            yield Static(_format_rich_diff(self._request.preview_diff))
        with Horizontal(id="action-buttons"):
            yield Button("✔ Approve", id="approve-btn", variant="success")
            yield Button("✔ Approve session", id="session-btn", variant="primary")
            yield Button("✕ Reject", id="reject-btn", variant="error")
        yield Input(placeholder="Feedback if rejecting (optional)", id="feedback")
        yield Footer()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "approve-btn":
            self.action_approve()
        elif event.button.id == "session-btn":
            self.action_approve_session()
        elif event.button.id == "reject-btn":
            self.action_reject()

    def action_approve(self) -> None:
        self.response = ConfirmationResponse(confirmed=True)
        self.exit()

    def action_approve_session(self) -> None:
        self.response = ConfirmationResponse(confirmed=True, remember=True)
        self.exit()

    def action_reject(self) -> None:
        feedback = self.query_one("#feedback", Input).value.strip()
        self.response = ConfirmationResponse(
            confirmed=False, feedback=feedback or None,
        )
        self.exit()


class TextualConfirmation:
    """Show the preview in a Textual app; fall back to the console prompt
    when the app cannot run (no terminal, unsupported driver)."""

    def __init__(self, fallback: ConsoleConfirmation | None = None) -> None:
        self._fallback = fallback or ConsoleConfirmation()

    def request_confirmation(
        self, request: ConfirmationRequest,
    ) -> ConfirmationResponse:
        try:
            app = DiffApprovalApp(request)
            app.run()
            return app.response
        except Exception as e:
            logger.warning("Textual diff viewer failed: %s", e)

        return self._fallback.request_confirmation(request)


def make_gate(config: Config, color: bool = True) -> ConfirmationGate:
    """Build the confirmation gate *config* asks for."""
    if config.AUTO_APPROVE:
        return AutoApprove()

    console = ConsoleConfirmation(color=color)
    if config.CONFIRMATION_UI == "console":
        return SessionGate(console)
    return SessionGate(TextualConfirmation(fallback=console))
