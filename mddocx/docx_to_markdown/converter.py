"""DOCX to Markdown conversion pipeline.

Pipeline: mammoth extraction -> HTML cleanup -> list reconstruction ->
markdownify transcoding -> post-processing. Extracted images are written
next to the Markdown when requested. All per-call state (messages, images,
warnings) lives in locals of ``convert``.
"""

import logging
import os
import time
from typing import List, Optional

from ..errors import EmptyInputError, ErrorCode, MdDocxError
from ..links.link_processor import LinkProcessor
from ..models.conversion_result import ConversionMetadata, ConversionResult, ConversionWarning
from ..models.html_node import nodes_to_html
from ..models.options import DocxToMarkdownOptions
from ..utils.file_utils import DOCX_EXTENSIONS, ensure_directory, read_bytes, validate_file, write_output
from .extractor import DocxExtractor, ExtractedImage, ExtractionResult
from .html_cleaner import HtmlCleaner
from .list_reconstructor import ListReconstructor
from .postprocessor import MarkdownPostProcessor
from .transcoder import HtmlTranscoder

logger = logging.getLogger(__name__)

MAX_DETAILED_MESSAGES = 50
RAW_TEXT_WARNING = "Used raw text fallback; formatting may be lost; images will not be saved."


class DocxToMarkdownConverter:
    """Converts DOCX bytes to Markdown text.

    Example:
        >>> converter = DocxToMarkdownConverter()
        >>> result = converter.convert(docx_bytes, DocxToMarkdownOptions(heading_anchor_style='inline'))
        >>> result.output.startswith('<a id=')
        True
    """

    def __init__(self, extractor: Optional[DocxExtractor] = None):
        """Initialize converter.

        Args:
            extractor: DOCX extractor; defaults to the mammoth extractor
        """
        self.extractor = extractor or DocxExtractor()
        self.cleaner = HtmlCleaner()
        self.postprocessor = MarkdownPostProcessor()

    def convert(self, docx_bytes: bytes, options: Optional[DocxToMarkdownOptions] = None,
                image_base_dir: Optional[str] = None) -> ConversionResult:
        """Convert DOCX to Markdown.

        Args:
            docx_bytes: DOCX file content
            options: Conversion options
            image_base_dir: Directory ``image_output_dir`` is resolved against
                (current directory when None)

        Returns:
            ConversionResult with Markdown text, or a failed result
        """
        started = time.perf_counter()
        options = options or DocxToMarkdownOptions()
        metadata = ConversionMetadata(input_size=len(docx_bytes) if docx_bytes else 0)
        warnings: List[ConversionWarning] = []

        try:
            if not docx_bytes:
                raise EmptyInputError("DOCX")

            extraction = self.extractor.extract(docx_bytes, extract_images=options.extract_images)
            if extraction.is_raw_text:
                markdown = extraction.content
                warnings.append(ConversionWarning(ErrorCode.EXTRACTION_FAILED, RAW_TEXT_WARNING))
            else:
                markdown = self.html_to_markdown(
                    extraction.content,
                    options,
                    extracted_images=[image.filename for image in extraction.images],
                )
                if options.extract_images and extraction.images:
                    self._save_images(extraction.images, options, image_base_dir, warnings)

            output = self.postprocessor.process(markdown, options.heading_anchor_style)
        except MdDocxError as e:
            logger.error(f"DOCX to Markdown conversion failed: {e}")
            metadata.processing_time_ms = (time.perf_counter() - started) * 1000
            return ConversionResult.from_error(e, metadata, warnings)
        except Exception as e:
            logger.exception("Unexpected error during DOCX to Markdown conversion")
            metadata.processing_time_ms = (time.perf_counter() - started) * 1000
            return ConversionResult.failed(
                ErrorCode.CONVERSION_FAILED,
                f"DOCX to Markdown conversion failed: {e}",
                metadata=metadata,
                warnings=warnings,
            )

        warnings = self._extractor_warnings(extraction, options) + warnings
        links = LinkProcessor().process_markdown_links(output)
        metadata.output_size = len(output.encode('utf-8'))
        metadata.image_count = len(extraction.images)
        metadata.internal_link_count = links.internal_count
        metadata.external_link_count = links.external_count
        metadata.processing_time_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Converted DOCX to Markdown ({metadata.output_size} bytes, "
            f"{metadata.image_count} image(s), {len(warnings)} warning(s))"
        )
        return ConversionResult.ok(output, metadata, warnings)

    def convert_file(self, file_path: str, options: Optional[DocxToMarkdownOptions] = None,
                     image_base_dir: Optional[str] = None) -> ConversionResult:
        """Validate, read and convert a ``.docx`` file.

        Args:
            file_path: Path to the DOCX file
            options: Conversion options
            image_base_dir: Directory extracted images are resolved against

        Returns:
            ConversionResult; ``NotFound`` / ``InvalidFile`` failures for bad paths
        """
        try:
            validation = validate_file(file_path, DOCX_EXTENSIONS)
            data = read_bytes(file_path)
        except MdDocxError as e:
            logger.error(f"Cannot read {file_path}: {e}")
            return ConversionResult.from_error(e)

        result = self.convert(data, options, image_base_dir=image_base_dir)
        for message in reversed(validation.warnings):
            result.warnings.insert(0, message)
            result.warning_records.insert(0, ConversionWarning(ErrorCode.LARGE_FILE, message, file_path))
        return result

    def html_to_markdown(self, html: str, options: Optional[DocxToMarkdownOptions] = None,
                         extracted_images: Optional[List[str]] = None) -> str:
        """Clean, rebuild lists and transcode extracted HTML.

        Raises:
            TranscodeError: If the transcoder fails
        """
        options = options or DocxToMarkdownOptions()
        nodes = self.cleaner.to_nodes(html)
        nodes = ListReconstructor(options.indent_unit_pt, options.nbsp_per_level).reconstruct(nodes)
        transcoder = HtmlTranscoder(
            image_dir=options.image_output_dir,
            extracted_images=extracted_images,
            preserve_line_breaks=options.preserve_formatting,
        )
        return transcoder.transcode(nodes_to_html(nodes))

    @staticmethod
    def _save_images(images: List[ExtractedImage], options: DocxToMarkdownOptions,
                     base_dir: Optional[str], warnings: List[ConversionWarning]) -> None:
        directory = os.path.join(base_dir or '', options.image_output_dir)
        try:
            ensure_directory(directory)
            for image in images:
                write_output(os.path.join(directory, image.filename), image.data)
                logger.debug(f"Saved extracted image: {image.filename}")
        except MdDocxError as e:
            logger.error(f"Failed to save extracted images: {e}")
            warnings.append(ConversionWarning(ErrorCode.FILESYSTEM_ERROR, f"Failed to save extracted images: {e}"))
            return
        logger.info(f"Saved {len(images)} extracted image(s) to {directory}")

    @staticmethod
    def _extractor_warnings(extraction: ExtractionResult,
                            options: DocxToMarkdownOptions) -> List[ConversionWarning]:
        """Summaries of extractor messages, with details when requested."""
        warnings: List[ConversionWarning] = []
        for message_type, label in (('warning', 'formatting warnings'), ('error', 'errors')):
            messages = [m for m in extraction.messages if m.type == message_type]
            if not messages:
                continue
            warnings.append(ConversionWarning(
                ErrorCode.EXTRACTOR_MESSAGE,
                f"{len(messages)} {label} during conversion",
            ))
            if options.detailed_warnings:
                for index, message in enumerate(messages[:MAX_DETAILED_MESSAGES], start=1):
                    warnings.append(ConversionWarning(
                        ErrorCode.EXTRACTOR_MESSAGE,
                        f"  {index}. {message.message}",
                        detail=message_type,
                    ))

        if extraction.images:
            warnings.append(ConversionWarning(
                ErrorCode.IMAGES_EXTRACTED,
                f"{len(extraction.images)} images extracted",
            ))
        return warnings
