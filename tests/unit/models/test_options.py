"""Unit tests for models.options module."""

from mddocx.models.options import DocxToMarkdownOptions, MarkdownToDocxOptions


class TestMarkdownToDocxOptions:
    """Test cases for MarkdownToDocxOptions."""

    def test_defaults(self):
        """Defaults describe a plain portrait document."""
        options = MarkdownToDocxOptions()

        assert options.template == 'simple'
        assert options.diagram_theme == 'default'
        assert options.page_orientation == 'portrait'
        assert options.generate_toc is False
        assert options.preserve_links is True
        assert options.diagram_timeout_s == 30.0
        assert options.title is None

    def test_merged_with_applies_non_none(self):
        """Only non-None overrides replace values."""
        base = MarkdownToDocxOptions(template='modern', author='Ann')
        merged = base.merged_with({'template': 'academic', 'author': None}, generate_toc=True)

        assert merged.template == 'academic'
        assert merged.author == 'Ann'
        assert merged.generate_toc is True

    def test_merged_with_ignores_unknown_keys(self):
        """Keys that are not fields are dropped."""
        merged = MarkdownToDocxOptions().merged_with({'colour': 'red'})
        assert merged == MarkdownToDocxOptions()

    def test_merged_with_returns_copy(self):
        """The original instance is left unchanged."""
        base = MarkdownToDocxOptions()
        base.merged_with(template='modern')
        assert base.template == 'simple'

    def test_to_dict(self):
        """to_dict lists every field."""
        data = MarkdownToDocxOptions(title='T').to_dict()
        assert data['title'] == 'T'
        assert 'mermaid_js_path' in data


class TestDocxToMarkdownOptions:
    """Test cases for DocxToMarkdownOptions."""

    def test_defaults(self):
        """Images are not extracted and headings get no anchors by default."""
        options = DocxToMarkdownOptions()

        assert options.extract_images is False
        assert options.image_output_dir == 'images'
        assert options.heading_anchor_style == 'none'
        assert options.preserve_formatting is True
        assert options.indent_unit_pt == 18.0
        assert options.nbsp_per_level == 2

    def test_merged_with(self):
        """Overrides from a config section apply."""
        merged = DocxToMarkdownOptions().merged_with({'extract_images': True, 'image_output_dir': 'assets'})
        assert merged.extract_images is True
        assert merged.image_output_dir == 'assets'
