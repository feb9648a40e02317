"""DOCX style presets."""

from .templates import DocumentTemplate, HeadingStyle, available_templates, get_template

__all__ = ['DocumentTemplate', 'HeadingStyle', 'available_templates', 'get_template']
