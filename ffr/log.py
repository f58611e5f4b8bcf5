"""Run log shared by the batch driver, operations and media tools."""

from rich.console import Console
from rich.markup import escape


class RunLog:
    """Collects messages produced while processing a batch of files.

    Every message is kept in `history`. Detail messages are printed only in
    verbose mode, while `info` and `error` messages are always printed.
    """

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        """Initialize the run log.

        Args:
            console: Rich console to print to. Defaults to a stderr console.
            verbose: If True, detail messages are printed as well as recorded.
        """
        self.console = console or Console(stderr=True)
        self.verbose = verbose
        self.history: list[str] = []

    def log(self, message: str) -> None:
        """Record a detail message, printing it in verbose mode."""
        self.history.append(message)
        if self.verbose:
            self.console.print(message, markup=False, highlight=False)

    def info(self, message: str) -> None:
        """Record and print a message regardless of verbosity."""
        self.history.append(message)
        self.console.print(f"[dim]{escape(message)}[/dim]", highlight=False)

    def error(self, message: str) -> None:
        """Record and print an error message."""
        self.history.append(message)
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)

    def __contains__(self, text: str) -> bool:
        return any(text in message for message in self.history)
