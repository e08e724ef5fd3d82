"""Bitruvius - Textual TUI application entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from bitruvius.config import AppConfig, load_config
from bitruvius.engine.session import PosingSession

if TYPE_CHECKING:
    from textual.binding import BindingType


class BitruviusApp(App[None]):
    """Main Bitruvius TUI application."""

    TITLE = "Bitruvius"
    SUB_TITLE = "Figure Posing Console"

    CSS = """
    Screen {
        background: $surface;
    }

    /* ── Global branding ─────────────────────────────────── */
    Header {
        background: #7c3aed;
        color: #f5f3ff;
        dock: top;
        height: 1;
    }

    Footer {
        background: #1e1b4b;
        color: #c4b5fd;
    }

    /* ── Posing layout ───────────────────────────────────── */
    Horizontal {
        height: 1fr;
    }

    .side-panel {
        width: 48;
        height: 1fr;
    }

    /* ── DataTable ───────────────────────────────────────── */
    DataTable {
        background: #1e1b4b;
        color: #e9d5ff;
        height: auto;
        max-height: 20;
    }

    DataTable > .datatable--header {
        background: #312e81;
        color: #a78bfa;
        text-style: bold;
    }

    DataTable > .datatable--cursor {
        background: #4c1d95;
        color: #f5f3ff;
    }

    /* ── Status lines ────────────────────────────────────── */
    #posing-status {
        color: #c4b5fd;
        padding: 0 1;
    }

    #posing-pose {
        color: #6d28d9;
        padding: 0 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        config: AppConfig | None = None,
        session: PosingSession | None = None,
    ) -> None:
        super().__init__()
        self.config = config or load_config()
        self.session = session or PosingSession(self.config.posing)

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Footer()

    # ── Lifecycle ────────────────────────────────────────────
    def on_mount(self) -> None:
        """Push the posing screen."""
        from bitruvius.screens.posing import PosingScreen

        self.push_screen(PosingScreen(self.session, self.config.export_dir))


def run() -> None:
    """CLI entry point."""
    app = BitruviusApp()
    app.run()


if __name__ == "__main__":
    run()
