"""Rendering of action progress in the terminal."""

from collections.abc import Iterable

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

from hetzner_kube.provider.actions import ActionEvent, ActionFailed, ActionProgress, ActionSucceeded


class ProgressReporter:
    """Consumes an action event stream until its terminal event.

    On an interactive terminal a progress bar is drawn and updated on every
    progress event; otherwise the stream is drained silently.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def report(self, events: Iterable[ActionEvent], description: str = "") -> None:
        """Block until the stream terminates.

        Raises:
            HetznerKubeError: The error carried by an ActionFailed event
        """
        if not self.console.is_terminal:
            self._drain(events)
            return

        with Progress(
            TimeElapsedColumn(),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TextColumn("{task.description}"),
            console=self.console,
            transient=False,
        ) as progress:
            task = progress.add_task(description, total=100)
            for event in events:
                match event:
                    case ActionProgress(progress=percent):
                        progress.update(task, completed=percent)
                    case ActionSucceeded():
                        progress.update(task, completed=100)
                        return
                    case ActionFailed(error=error):
                        raise error

        raise RuntimeError("action event stream ended without a terminal event")

    def _drain(self, events: Iterable[ActionEvent]) -> None:
        for event in events:
            match event:
                case ActionSucceeded():
                    return
                case ActionFailed(error=error):
                    raise error
        raise RuntimeError("action event stream ended without a terminal event")
