"""DOCX body extraction with mammoth.

Produces HTML from the document body. Word styles written by the Markdown to
DOCX path (``Code``, ``Quote``, headings) are mapped back onto the matching
HTML elements. When HTML extraction fails the raw text is returned instead
and the result is flagged as degraded.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import List

import mammoth

from ..errors import ExtractionError

logger = logging.getLogger(__name__)

STYLE_MAP = r"""
p[style-name='Heading 1'] => h1:fresh
p[style-name='Heading 2'] => h2:fresh
p[style-name='Heading 3'] => h3:fresh
p[style-name='Heading 4'] => h4:fresh
p[style-name='Heading 5'] => h5:fresh
p[style-name='Heading 6'] => h6:fresh
p[style-name='heading 1'] => h1:fresh
p[style-name='heading 2'] => h2:fresh
p[style-name='heading 3'] => h3:fresh
p[style-name='heading 4'] => h4:fresh
p[style-name='heading 5'] => h5:fresh
p[style-name='heading 6'] => h6:fresh
p[style-name='Code'] => pre:separator('\n')
p[style-name='code'] => pre:separator('\n')
p[style-name='Quote'] => blockquote > p:fresh
p[style-name='quote'] => blockquote > p:fresh
p[style-name='Normal'] => p:fresh
"""

IMAGE_EXTENSIONS = {
    'image/png': '.png',
    'image/jpeg': '.jpg',
    'image/jpg': '.jpg',
    'image/gif': '.gif',
    'image/bmp': '.bmp',
    'image/svg+xml': '.svg',
    'image/webp': '.webp',
}

DEFAULT_ALT_TEXT = "Extracted image"


def image_extension(content_type: str) -> str:
    """File extension for an image MIME type ('.png' when unknown)."""
    return IMAGE_EXTENSIONS.get((content_type or '').lower(), '.png')


@dataclass
class ExtractedImage:
    """Image collected from the DOCX body.

    Attributes:
        filename: Generated file name (``image_<n>.<ext>``)
        data: Raw image bytes
        content_type: MIME type reported by the document
    """
    filename: str
    data: bytes
    content_type: str = 'image/png'


@dataclass
class ExtractorMessage:
    """Warning or error reported by mammoth."""
    type: str
    message: str


@dataclass
class ExtractionResult:
    """Output of one extraction.

    Attributes:
        content: HTML, or plain text when ``is_raw_text`` is True
        messages: Extractor messages in reporting order
        images: Images collected when extraction was asked to keep them
        is_raw_text: True when the raw-text fallback was used
    """
    content: str
    messages: List[ExtractorMessage] = field(default_factory=list)
    images: List[ExtractedImage] = field(default_factory=list)
    is_raw_text: bool = False

    def count(self, message_type: str) -> int:
        return sum(1 for m in self.messages if m.type == message_type)


class DocxExtractor:
    """Extracts HTML (or raw text) from DOCX bytes.

    Example:
        >>> result = DocxExtractor().extract(docx_bytes, extract_images=True)
        >>> result.content.startswith('<h1>')
        True
    """

    def extract(self, docx_bytes: bytes, extract_images: bool = False) -> ExtractionResult:
        """Extract the document body.

        Args:
            docx_bytes: DOCX file content
            extract_images: Collect embedded images as ``image_<n>.<ext>``

        Returns:
            ExtractionResult with HTML, or raw text when HTML extraction failed

        Raises:
            ExtractionError: If both HTML and raw-text extraction fail
        """
        images: List[ExtractedImage] = []
        try:
            result = self._convert_to_html(docx_bytes, images if extract_images else None)
        except Exception as e:
            logger.error(f"Failed to extract DOCX content as HTML: {e}")
            return self._extract_raw_text(docx_bytes, e)

        messages = [ExtractorMessage(type=m.type, message=m.message) for m in result.messages]
        logger.debug(
            f"DOCX extraction completed ({len(messages)} message(s), "
            f"{len(images)} image(s))"
        )
        return ExtractionResult(content=result.value, messages=messages, images=images)

    def _convert_to_html(self, docx_bytes: bytes, images):
        kwargs = {
            'style_map': STYLE_MAP,
            'ignore_empty_paragraphs': False,
        }
        if images is not None:
            kwargs['convert_image'] = mammoth.images.img_element(self._image_collector(images))
        return mammoth.convert_to_html(io.BytesIO(docx_bytes), **kwargs)

    @staticmethod
    def _image_collector(images: List[ExtractedImage]):
        """Build a mammoth image handler that stores images in ``images``."""

        def collect(image):
            filename = f"image_{len(images) + 1}{image_extension(image.content_type)}"
            with image.open() as stream:
                data = stream.read()
            images.append(ExtractedImage(filename=filename, data=data, content_type=image.content_type))
            logger.debug(f"Extracted image: {filename}")
            attributes = {'src': filename}
            if not image.alt_text:
                attributes['alt'] = DEFAULT_ALT_TEXT
            return attributes

        return collect

    @staticmethod
    def _extract_raw_text(docx_bytes: bytes, cause: Exception) -> ExtractionResult:
        try:
            raw = mammoth.extract_raw_text(io.BytesIO(docx_bytes))
        except Exception as fallback_error:
            logger.error(f"Raw text fallback also failed: {fallback_error}")
            raise ExtractionError(str(cause)) from fallback_error

        logger.warning("Falling back to raw text extraction")
        messages = [ExtractorMessage(type=m.type, message=m.message) for m in raw.messages]
        return ExtractionResult(content=raw.value, messages=messages, is_raw_text=True)
