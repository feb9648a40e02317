"""High-level conversion API.

``MarkdownDocxConverter`` wraps both conversion directions, merges per-call
options over converter-level defaults and adds file and batch variants.
A fresh direction converter is built for every call so no state is shared
between conversions.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple, Union

from .diagrams.processor import DiagramProcessor
from .docx_to_markdown.converter import DocxToMarkdownConverter
from .errors import ErrorCode, MdDocxError
from .markdown_to_docx.converter import MarkdownToDocxConverter, RendererFactory
from .models.conversion_result import ConversionResult, ConversionWarning
from .models.options import DIAGRAM_THEMES, DocxToMarkdownOptions, MarkdownToDocxOptions
from .styles.templates import available_templates
from .utils.file_utils import (
    MARKDOWN_EXTENSIONS,
    ensure_directory,
    read_text,
    validate_file,
    write_output,
)
from .validation import MarkdownStats, ValidationReport, markdown_stats, validate_markdown

logger = logging.getLogger(__name__)

MarkdownOptionsArg = Optional[Union[MarkdownToDocxOptions, Dict[str, Any]]]
DocxOptionsArg = Optional[Union[DocxToMarkdownOptions, Dict[str, Any]]]
BatchResult = Tuple[str, str, ConversionResult]


class MarkdownDocxConverter:
    """Bidirectional Markdown and DOCX converter.

    Per-call options may be an options instance (used as given) or a dict of
    overrides applied on top of the defaults passed to the constructor.

    Example:
        >>> converter = MarkdownDocxConverter(markdown_defaults=MarkdownToDocxOptions(template='modern'))
        >>> result = converter.markdown_to_docx("# Title", {'generate_toc': True})
        >>> result.success
        True
    """

    def __init__(
        self,
        markdown_defaults: Optional[MarkdownToDocxOptions] = None,
        docx_defaults: Optional[DocxToMarkdownOptions] = None,
        renderer_factory: Optional[RendererFactory] = None,
    ):
        """Initialize converter.

        Args:
            markdown_defaults: Defaults for Markdown to DOCX calls
            docx_defaults: Defaults for DOCX to Markdown calls
            renderer_factory: Diagram renderer factory handed to every
                Markdown to DOCX converter
        """
        self.markdown_defaults = markdown_defaults or MarkdownToDocxOptions()
        self.docx_defaults = docx_defaults or DocxToMarkdownOptions()
        self.renderer_factory = renderer_factory

    def _md_options(self, options: MarkdownOptionsArg) -> MarkdownToDocxOptions:
        if isinstance(options, MarkdownToDocxOptions):
            return options
        return self.markdown_defaults.merged_with(options)

    def _docx_options(self, options: DocxOptionsArg) -> DocxToMarkdownOptions:
        if isinstance(options, DocxToMarkdownOptions):
            return options
        return self.docx_defaults.merged_with(options)

    def markdown_to_docx(self, markdown: str, options: MarkdownOptionsArg = None) -> ConversionResult:
        """Convert Markdown text to DOCX bytes."""
        converter = MarkdownToDocxConverter(renderer_factory=self.renderer_factory)
        return converter.convert(markdown, self._md_options(options))

    def docx_to_markdown(self, docx_bytes: bytes, options: DocxOptionsArg = None,
                         image_base_dir: Optional[str] = None) -> ConversionResult:
        """Convert DOCX bytes to Markdown text."""
        converter = DocxToMarkdownConverter()
        return converter.convert(docx_bytes, self._docx_options(options), image_base_dir=image_base_dir)

    def markdown_file_to_docx(self, input_path: str, output_path: str,
                              options: MarkdownOptionsArg = None) -> ConversionResult:
        """Convert a Markdown file and write the DOCX next to ``output_path``.

        Args:
            input_path: ``.md`` or ``.markdown`` file
            output_path: Destination DOCX path (parent directories are created)
            options: Per-call options

        Returns:
            ConversionResult; file problems give a ``FileConversionFailed``
            result with the underlying error code in ``details``
        """
        logger.info(f"Converting {input_path} -> {output_path}")
        try:
            validation = validate_file(input_path, MARKDOWN_EXTENSIONS)
            markdown = read_text(input_path)
        except MdDocxError as e:
            return self._file_failure(e, input_path, output_path)

        result = self.markdown_to_docx(markdown, options)
        if not result.success:
            return result

        try:
            write_output(output_path, result.output)
        except MdDocxError as e:
            return self._file_failure(e, input_path, output_path)

        self._prepend_file_warnings(result, validation.warnings, input_path)
        logger.info(f"Wrote {output_path}")
        return result

    def docx_file_to_markdown(self, input_path: str, output_path: str,
                              options: DocxOptionsArg = None) -> ConversionResult:
        """Convert a DOCX file and write the Markdown to ``output_path``.

        Extracted images are written relative to the output file's directory.
        """
        logger.info(f"Converting {input_path} -> {output_path}")
        image_base_dir = os.path.dirname(os.path.abspath(output_path))
        converter = DocxToMarkdownConverter()
        result = converter.convert_file(input_path, self._docx_options(options), image_base_dir=image_base_dir)
        if not result.success:
            if result.error and result.error.code in (ErrorCode.NOT_FOUND, ErrorCode.INVALID_FILE):
                result.error.details.setdefault('cause', result.error.code.value)
                result.error.details.update(input=input_path, output=output_path)
                result.error.code = ErrorCode.FILE_CONVERSION_FAILED
            return result

        try:
            write_output(output_path, result.output)
        except MdDocxError as e:
            return self._file_failure(e, input_path, output_path)

        logger.info(f"Wrote {output_path}")
        return result

    def batch_markdown_to_docx(self, input_files: List[str], output_dir: str,
                               options: MarkdownOptionsArg = None) -> List[BatchResult]:
        """Convert each Markdown file into ``output_dir/<stem>.docx``.

        Returns:
            (input path, output path, result) per file, in input order
        """
        return self._batch(input_files, output_dir, '.docx', self.markdown_file_to_docx, options)

    def batch_docx_to_markdown(self, input_files: List[str], output_dir: str,
                               options: DocxOptionsArg = None) -> List[BatchResult]:
        """Convert each DOCX file into ``output_dir/<stem>.md``."""
        return self._batch(input_files, output_dir, '.md', self.docx_file_to_markdown, options)

    def _batch(self, input_files: List[str], output_dir: str, extension: str,
               convert, options) -> List[BatchResult]:
        logger.info(f"Starting batch conversion of {len(input_files)} file(s)")
        results: List[BatchResult] = []
        try:
            ensure_directory(output_dir)
        except MdDocxError as e:
            for input_file in input_files:
                results.append((input_file, output_dir, self._file_failure(e, input_file, output_dir)))
            return results

        for input_file in input_files:
            stem = os.path.splitext(os.path.basename(input_file))[0]
            output_file = os.path.join(output_dir, stem + extension)
            results.append((input_file, output_file, convert(input_file, output_file, options)))

        successful = sum(1 for _, _, result in results if result.success)
        logger.info(f"Batch conversion completed: {successful}/{len(input_files)} files converted successfully")
        return results

    @staticmethod
    def validate_markdown(content: str) -> ValidationReport:
        """Check Markdown for common conversion problems."""
        return validate_markdown(content)

    @staticmethod
    def get_conversion_stats(file_path: str) -> MarkdownStats:
        """Statistics of a Markdown file.

        Raises:
            DocumentNotFoundError: If the file does not exist
            FilesystemError: If the file cannot be read
        """
        content = read_text(file_path)
        return markdown_stats(content, size=os.path.getsize(file_path))

    @staticmethod
    def has_diagrams(content: str) -> bool:
        """Whether the Markdown contains Mermaid blocks."""
        return DiagramProcessor.has_diagrams(content)

    @staticmethod
    def available_templates() -> List[str]:
        return available_templates()

    @staticmethod
    def available_diagram_themes() -> List[str]:
        return list(DIAGRAM_THEMES)

    @staticmethod
    def _file_failure(error: MdDocxError, input_path: str, output_path: str) -> ConversionResult:
        logger.error(f"File conversion failed for {input_path}: {error}")
        details = dict(error.details)
        details.update(input=input_path, output=output_path, cause=error.code.value)
        return ConversionResult.failed(ErrorCode.FILE_CONVERSION_FAILED, error.message, details)

    @staticmethod
    def _prepend_file_warnings(result: ConversionResult, messages: List[str], file_path: str) -> None:
        for message in reversed(messages):
            result.warnings.insert(0, message)
            result.warning_records.insert(0, ConversionWarning(ErrorCode.LARGE_FILE, message, file_path))
