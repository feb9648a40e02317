"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
status messages, spinners, progress bars and conversion summaries with
verbosity control and a --no-color switch.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.spinner import Spinner
from rich.table import Table

from ..models.conversion_result import ConversionResult
from ..utils.file_utils import format_bytes
from ..validation import MarkdownStats, ValidationReport


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("DOCX file created: report.docx")
        >>> with handler.spinner("Converting Markdown to DOCX..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(escape(message))

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Args:
            message: Message to display with spinner

        Yields:
            None
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    @contextmanager
    def progress_bar(self, total: int, description: str = "Converting") -> Iterator[Progress]:
        """Display progress bar for multi-file operations.

        Args:
            total: Total number of files to process
            description: Description text for progress bar

        Yields:
            Progress instance for updating progress

        Example:
            >>> with handler.progress_bar(3, "Converting") as progress:
            ...     task = progress.add_task("Converting", total=3)
            ...     progress.update(task, advance=1)
        """
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
        )
        with progress:
            yield progress

    def print_warnings(self, warnings: List[str]) -> None:
        """Display conversion warnings as a bulleted list."""
        if not warnings:
            return
        self.console.print("[yellow]Warnings:[/yellow]")
        for warning in warnings:
            self.console.print(f"  - {escape(warning)}")

    def print_conversion_summary(self, result: ConversionResult) -> None:
        """Display size, timing and content counts of a successful conversion."""
        metadata = result.metadata
        self.console.print("\n[bold]Statistics:[/bold]")
        self.console.print(f"  Input size: {format_bytes(metadata.input_size)}")
        self.console.print(f"  Output size: {format_bytes(metadata.output_size)}")
        self.console.print(f"  Processing time: {metadata.processing_time_ms:.0f}ms")

        if metadata.diagram_count > 0:
            self.console.print(f"  Mermaid diagrams: {metadata.diagram_count}")
        if metadata.image_count > 0:
            self.console.print(f"  Images: {metadata.image_count}")
        if metadata.internal_link_count > 0:
            self.console.print(f"  Internal links: {metadata.internal_link_count}")
        if metadata.external_link_count > 0:
            self.console.print(f"  External links: {metadata.external_link_count}")

        self.print_warnings(result.warnings)

    def print_batch_summary(self, succeeded: int, failed: List[str]) -> None:
        """Display batch outcome with the failed files and their errors.

        Args:
            succeeded: Number of files converted
            failed: "path: reason" lines for failed files
        """
        self.console.print("\n[bold]Batch Summary:[/bold]")
        self.console.print(f"  [green]✓[/green] Successful: {succeeded}")
        if failed:
            self.console.print(f"  [red]✗[/red] Failed: {len(failed)}")
            for line in failed:
                self.console.print(f"    [red]FAILED[/red] {escape(line)}")

        if succeeded + len(failed) == 0:
            self.console.print("\n[yellow]No files found for conversion[/yellow]")
        elif failed:
            self.console.print("\n[red]Batch conversion completed with failures[/red]")
        else:
            self.console.print("\n[green]Batch conversion completed successfully[/green]")

    def print_validation(self, report: ValidationReport) -> None:
        """Display validation warnings and suggestions."""
        if report.is_valid:
            self.success("Markdown file is ready for conversion")
        else:
            self.warning("Markdown validation completed with warnings")
            for warning in report.warnings:
                self.console.print(f"  - {escape(warning)}")

        if report.suggestions:
            self.console.print("[blue]Suggestions:[/blue]")
            for suggestion in report.suggestions:
                self.console.print(f"  - {escape(suggestion)}")

    def print_stats(self, stats: MarkdownStats) -> None:
        """Display file statistics."""
        self.console.print("[bold]File Statistics:[/bold]")
        self.console.print(f"  File size: {stats.file_size}")
        self.console.print(f"  Word count: {stats.word_count:,}")
        self.console.print(f"  Reading time: {stats.reading_time} minute(s)")
        self.console.print(f"  Line count: {stats.line_count:,}")
        self.console.print(f"  Images: {stats.image_count}")
        self.console.print(f"  Links: {stats.link_count}")

    def print_catalogue(self, templates: List[str], themes: List[str]) -> None:
        """Display available style presets and diagram themes."""
        table = Table(title="Available presets")
        table.add_column("Templates")
        table.add_column("Diagram themes")
        for index in range(max(len(templates), len(themes))):
            table.add_row(
                templates[index] if index < len(templates) else "",
                themes[index] if index < len(themes) else "",
            )
        self.console.print(table)
