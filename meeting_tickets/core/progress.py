"""
Progress reporting for the stages of a meeting run.

A run goes through a few blocking stages (recording, transcription, ticket
extraction). Each stage shows a spinner while it runs and leaves a check
mark behind when it finishes, or a cross when it raised.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.status import Status


class ProgressReporter:
    """
    Global spinner and check-mark printer shared by the pipeline stages.

    Stages are opened with `stage()`; `step()` finishes the current message
    and continues the same spinner with a new one.
    """

    def __init__(self):
        self._status: Optional[Status] = None
        self._console: Optional[Console] = None
        self._current: Optional[str] = None
        self.completed: List[str] = []

    @contextmanager
    def stage(self, console: Console, message: str) -> Iterator["ProgressReporter"]:
        """
        Run a block under a spinner showing `message`.

        Args:
            console: Rich console to draw on
            message: Status text for the first step of the stage

        Yields:
            The reporter, for calling step() inside the block
        """
        self._console = console
        self._current = message
        self._status = console.status(f"[dim]{escape(message)}[/dim]")
        try:
            with self._status:
                yield self
        except BaseException:
            if self._current is not None:
                console.print(f"[red]✗[/red] [dim]{escape(self._current)}[/dim]")
                self._current = None
            raise
        finally:
            self._status = None

        self._finish()

    def step(self, message: str) -> None:
        """Mark the current step done and show the next one."""
        if self._status is None:
            return
        self._finish()
        self._current = message
        self._status.update(f"[dim]{escape(message)}[/dim]")

    def note(self, message: str) -> None:
        """Print an indented result line under the last finished step."""
        if self._console is not None:
            self._console.print(f"  [green]✓[/green] [dim]{escape(message)}[/dim]")

    def _finish(self) -> None:
        if self._current is None:
            return
        self.completed.append(self._current)
        if self._console is not None:
            self._console.print(f"[green]✓[/green] [dim]{escape(self._current)}[/dim]")
        self._current = None


# Global reporter instance
reporter = ProgressReporter()
