from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.live import Live
from rich.text import Text

from rangescan.models import ScanResult, ScanSummary, Target


def format_result(r: ScanResult) -> str:
    return f"{Target(r.address, r.port)} is open!"


def format_summary(summary: ScanSummary) -> str:
    return (
        f"Port scanning completed in {summary.elapsed_s:.2f} seconds "
        f"({summary.elapsed_ms} milliseconds)"
    )


class LiveRenderer:
    """Redraws the sorted open-port list in place on every collector update."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.live: Optional[Live] = None

    def start(self) -> None:
        self.live = Live(
            Text(""),
            console=self.console,
            auto_refresh=False,
            transient=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        self.live.start()

    def stop(self) -> None:
        if self.live is not None:
            self.live.stop()
            self.live = None

    def begin(self, workers: int) -> None:
        self.console.print(f"Threads spawned {workers}\n")
        if self.live is None:
            self.start()

    def update(self, results: Sequence[ScanResult]) -> None:
        body = Text("\n".join(format_result(r) for r in results), style="green")
        if self.live is None:
            self.console.print(body)
            return
        self.live.update(body, refresh=True)

    def finish(self, summary: ScanSummary) -> None:
        self.stop()
        self.console.print(format_summary(summary))
