"""Unit tests for models.conversion_result module."""

from mddocx.errors import DocumentNotFoundError, ErrorCode
from mddocx.models.conversion_result import (
    ConversionFailure,
    ConversionMetadata,
    ConversionResult,
    ConversionWarning,
)


class TestConversionResultOk:
    """Test cases for ConversionResult.ok."""

    def test_ok_result(self):
        """Successful results carry output and no error."""
        result = ConversionResult.ok(b"data", ConversionMetadata(input_size=3, output_size=4))

        assert result.success is True
        assert result.output == b"data"
        assert result.error is None
        assert result.metadata.output_size == 4
        assert result.warnings == []

    def test_warnings_flattened_in_order(self):
        """Warning records are mirrored as strings in the same order."""
        records = [
            ConversionWarning(ErrorCode.BROKEN_LINK, "first"),
            ConversionWarning(ErrorCode.UNSUPPORTED_TOKEN, "second", detail="html"),
        ]
        result = ConversionResult.ok("md", ConversionMetadata(), records)

        assert result.warnings == ["first", "second"]
        assert result.warning_records[1].detail == "html"


class TestConversionResultFailed:
    """Test cases for failed results."""

    def test_failed_has_no_output(self):
        """Failed results carry an error and no output."""
        result = ConversionResult.failed(ErrorCode.EMPTY_INPUT, "empty", {"kind": "Markdown"})

        assert result.success is False
        assert result.output is None
        assert result.error.code == ErrorCode.EMPTY_INPUT
        assert result.error.details == {"kind": "Markdown"}

    def test_from_error(self):
        """Typed errors keep their code and message."""
        result = ConversionResult.from_error(DocumentNotFoundError("missing.md"))

        assert result.success is False
        assert result.error.code == ErrorCode.NOT_FOUND
        assert "missing.md" in result.error.message

    def test_failure_from_error_copies_details(self):
        """ConversionFailure does not share the error's details dict."""
        error = DocumentNotFoundError("x.md")
        error.details["input"] = "x.md"
        failure = ConversionFailure.from_error(error)
        failure.details["extra"] = 1

        assert "extra" not in error.details
        assert failure.details["input"] == "x.md"
