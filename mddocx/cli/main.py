"""Main CLI entry point for the md-docx command.

This module provides the Typer application with one subcommand per
operation: convert (Markdown to DOCX), extract (DOCX to Markdown), batch,
validate, stats and list.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from .. import __version__
from ..converter import MarkdownDocxConverter
from ..errors import ConfigError, ErrorCode, FilesystemError, MdDocxError
from ..models.conversion_result import ConversionResult
from ..models.options import DIAGRAM_THEMES, DocxToMarkdownOptions, MarkdownToDocxOptions
from ..styles.templates import available_templates
from ..utils.file_utils import DOCX_EXTENSIONS, MARKDOWN_EXTENSIONS, read_text
from .config import ConfigLoader
from .models import BatchSummary, CliConfig, ExitCode
from .output import OutputHandler

app = typer.Typer(
    name="md-docx",
    help="""Markdown <-> DOCX converter with Mermaid diagrams and styling presets.

QUICK START:
  md-docx convert notes.md -o notes.docx --template modern --toc
  md-docx extract report.docx -o report.md --extract-images
  md-docx batch ./docs -o ./out --format docx
  md-docx validate notes.md
  md-docx stats notes.md
  md-docx list""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

INPUT_ERROR_CODES = (ErrorCode.NOT_FOUND.value, ErrorCode.INVALID_FILE.value)


@dataclass
class CliState:
    """Global options shared by all subcommands."""
    verbosity: int = 0
    no_color: bool = False
    config: CliConfig = field(default_factory=CliConfig)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'mddocx' namespace logger to avoid affecting
    third-party libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("mddocx")
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"md-docx_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj if isinstance(ctx.obj, CliState) else CliState()


def _overrides(**values: Any) -> Dict[str, Any]:
    """Drop options the user did not pass so config values apply."""
    return {key: value for key, value in values.items() if value is not None}


def _build_converter(state: CliState, md_overrides: Optional[Dict[str, Any]] = None,
                     docx_overrides: Optional[Dict[str, Any]] = None) -> MarkdownDocxConverter:
    """Layer command-line values over config values over built-in defaults."""
    markdown_defaults = MarkdownToDocxOptions().merged_with(state.config.markdown_to_docx, **(md_overrides or {}))
    docx_defaults = DocxToMarkdownOptions().merged_with(state.config.docx_to_markdown, **(docx_overrides or {}))
    return MarkdownDocxConverter(markdown_defaults=markdown_defaults, docx_defaults=docx_defaults)


def _check_choice(output: OutputHandler, name: str, value: Optional[str], choices: List[str]) -> None:
    if value is not None and value not in choices:
        output.error(f"Invalid {name} '{value}'. Choose one of: {', '.join(choices)}")
        raise typer.Exit(ExitCode.INPUT_ERROR)


def _exit_code_for(result: ConversionResult) -> ExitCode:
    if result.success:
        return ExitCode.SUCCESS
    error = result.error
    if error and (error.code.value in INPUT_ERROR_CODES or error.details.get('cause') in INPUT_ERROR_CODES):
        return ExitCode.INPUT_ERROR
    return ExitCode.CONVERSION_FAILED


def _default_output(input_path: str, extensions, new_extension: str) -> str:
    base, ext = os.path.splitext(input_path)
    if ext.lower() in extensions:
        return base + new_extension
    return input_path + new_extension


def _report(output: OutputHandler, result: ConversionResult, created: str, label: str) -> None:
    if result.success:
        output.success(f"{label} file created: {created}")
        output.print_conversion_summary(result)
        raise typer.Exit(ExitCode.SUCCESS)

    message = result.error.message if result.error else "Unknown error"
    output.error(f"Conversion failed: {message}")
    output.print_warnings(result.warnings)
    raise typer.Exit(_exit_code_for(result))


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"md-docx version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with default options",
        metavar="FILE",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v info, -vv debug)",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Markdown <-> DOCX converter with Mermaid diagrams and styling presets."""
    _configure_logging(verbose, logdir)
    state = CliState(verbosity=verbose, no_color=no_color)

    if config:
        try:
            state.config = ConfigLoader.load(config)
        except (ConfigError, FilesystemError) as e:
            OutputHandler(verbosity=verbose, no_color=no_color).error(str(e))
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        logger.info(f"Loaded configuration from {config}")

    ctx.obj = state


@app.command()
def convert(
    ctx: typer.Context,
    input_file: str = typer.Argument(..., help="Input Markdown file"),
    output_file: Optional[str] = typer.Option(None, "--output", "-o", help="Output DOCX file"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Document template"),
    mermaid_theme: Optional[str] = typer.Option(None, "--mermaid-theme", "-m", help="Mermaid diagram theme"),
    title: Optional[str] = typer.Option(None, "--title", help="Document title"),
    author: Optional[str] = typer.Option(None, "--author", help="Document author"),
    subject: Optional[str] = typer.Option(None, "--subject", help="Document subject"),
    description: Optional[str] = typer.Option(None, "--description", help="Document description"),
    toc: Optional[bool] = typer.Option(None, "--toc/--no-toc", help="Generate table of contents"),
    links: Optional[bool] = typer.Option(None, "--links/--no-links", help="Emit hyperlinks"),
    orientation: Optional[str] = typer.Option(None, "--orientation", help="Page orientation (portrait|landscape)"),
    diagram_timeout: Optional[float] = typer.Option(None, "--diagram-timeout", help="Seconds allowed for all diagrams"),
    mermaid_js: Optional[str] = typer.Option(None, "--mermaid-js", help="Local mermaid.min.js for offline rendering"),
) -> None:
    """Convert a Markdown file to DOCX."""
    state = _state(ctx)
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)
    _check_choice(output, "template", template, available_templates())
    _check_choice(output, "mermaid theme", mermaid_theme, list(DIAGRAM_THEMES))
    _check_choice(output, "orientation", orientation, ["portrait", "landscape"])

    output_path = output_file or _default_output(input_file, MARKDOWN_EXTENSIONS, '.docx')
    converter = _build_converter(state, md_overrides=_overrides(
        template=template,
        diagram_theme=mermaid_theme,
        title=title,
        author=author,
        subject=subject,
        description=description,
        generate_toc=toc,
        preserve_links=links,
        page_orientation=orientation,
        diagram_timeout_s=diagram_timeout,
        mermaid_js_path=mermaid_js,
    ))

    try:
        with output.spinner("Converting Markdown to DOCX..."):
            result = converter.markdown_file_to_docx(input_file, output_path)
    except Exception as e:
        logger.exception("Unexpected error during conversion")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    _report(output, result, output_path, "DOCX")


@app.command()
def extract(
    ctx: typer.Context,
    input_file: str = typer.Argument(..., help="Input DOCX file"),
    output_file: Optional[str] = typer.Option(None, "--output", "-o", help="Output Markdown file"),
    extract_images: Optional[bool] = typer.Option(
        None, "--extract-images/--no-extract-images", help="Write embedded images to separate files"
    ),
    image_dir: Optional[str] = typer.Option(None, "--image-dir", help="Directory for extracted images"),
    anchors: Optional[str] = typer.Option(None, "--anchors", help="Heading anchors (none|inline|attribute)"),
    preserve_formatting: Optional[bool] = typer.Option(
        None, "--preserve-formatting/--no-preserve-formatting", help="Keep line breaks inside paragraphs"
    ),
    detailed_warnings: Optional[bool] = typer.Option(
        None, "--detailed-warnings/--summary-warnings", help="List every extractor message"
    ),
) -> None:
    """Extract a DOCX file to Markdown."""
    state = _state(ctx)
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)
    _check_choice(output, "anchor style", anchors, ["none", "inline", "attribute"])

    output_path = output_file or _default_output(input_file, DOCX_EXTENSIONS, '.md')
    converter = _build_converter(state, docx_overrides=_overrides(
        extract_images=extract_images,
        image_output_dir=image_dir,
        heading_anchor_style=anchors,
        preserve_formatting=preserve_formatting,
        detailed_warnings=detailed_warnings,
    ))

    try:
        with output.spinner("Extracting DOCX to Markdown..."):
            result = converter.docx_file_to_markdown(input_file, output_path)
    except Exception as e:
        logger.exception("Unexpected error during extraction")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    _report(output, result, output_path, "Markdown")


@app.command()
def batch(
    ctx: typer.Context,
    input_dir: str = typer.Argument(..., help="Input directory"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="Output directory"),
    target_format: str = typer.Option("docx", "--format", "-f", help="Target format (docx|markdown)"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Document template (for DOCX)"),
    mermaid_theme: Optional[str] = typer.Option(None, "--mermaid-theme", "-m", help="Mermaid theme (for DOCX)"),
    toc: Optional[bool] = typer.Option(None, "--toc/--no-toc", help="Generate table of contents (for DOCX)"),
    extract_images: Optional[bool] = typer.Option(
        None, "--extract-images/--no-extract-images", help="Extract images (for Markdown)"
    ),
) -> None:
    """Convert every matching file of a directory."""
    state = _state(ctx)
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)
    _check_choice(output, "format", target_format, ["docx", "markdown"])
    _check_choice(output, "template", template, available_templates())
    _check_choice(output, "mermaid theme", mermaid_theme, list(DIAGRAM_THEMES))

    source = Path(input_dir)
    if not source.is_dir():
        output.error(f"Input directory not found: {input_dir}")
        raise typer.Exit(ExitCode.INPUT_ERROR)

    extensions = MARKDOWN_EXTENSIONS if target_format == "docx" else DOCX_EXTENSIONS
    input_files = sorted(
        str(path) for path in source.iterdir()
        if path.is_file() and path.suffix.lower() in extensions
    )
    if not input_files:
        output.warning("No files found for conversion")
        raise typer.Exit(ExitCode.SUCCESS)

    destination = output_dir or state.config.output_dir
    output.info(f"Found {len(input_files)} file(s) for batch conversion")
    converter = _build_converter(
        state,
        md_overrides=_overrides(template=template, diagram_theme=mermaid_theme, generate_toc=toc),
        docx_overrides=_overrides(extract_images=extract_images),
    )

    try:
        with output.spinner(f"Converting {len(input_files)} file(s)..."):
            if target_format == "docx":
                results = converter.batch_markdown_to_docx(input_files, destination)
            else:
                results = converter.batch_docx_to_markdown(input_files, destination)
    except Exception as e:
        logger.exception("Unexpected error during batch conversion")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    summary = BatchSummary()
    for input_path, _, result in results:
        if result.success:
            summary.succeeded.append(input_path)
        else:
            summary.failed.append(f"{input_path}: {result.error.message if result.error else 'Unknown error'}")

    output.print_batch_summary(len(summary.succeeded), summary.failed)
    raise typer.Exit(ExitCode.CONVERSION_FAILED if summary.failed else ExitCode.SUCCESS)


@app.command()
def validate(
    ctx: typer.Context,
    input_file: str = typer.Argument(..., help="Input Markdown file"),
) -> None:
    """Validate a Markdown file for conversion."""
    state = _state(ctx)
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)
    try:
        content = read_text(input_file)
    except MdDocxError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.INPUT_ERROR)

    report = MarkdownDocxConverter.validate_markdown(content)
    output.print_validation(report)
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def stats(
    ctx: typer.Context,
    input_file: str = typer.Argument(..., help="Input Markdown file"),
) -> None:
    """Show file statistics."""
    state = _state(ctx)
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)
    try:
        file_stats = MarkdownDocxConverter.get_conversion_stats(input_file)
    except MdDocxError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.INPUT_ERROR)

    output.print_stats(file_stats)
    raise typer.Exit(ExitCode.SUCCESS)


@app.command(name="list")
def list_presets(ctx: typer.Context) -> None:
    """List available templates and diagram themes."""
    state = _state(ctx)
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)
    output.print_catalogue(
        MarkdownDocxConverter.available_templates(),
        MarkdownDocxConverter.available_diagram_themes(),
    )
    raise typer.Exit(ExitCode.SUCCESS)


def main() -> None:
    """Main entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
