"""YAML configuration loading and validation.

A config file supplies defaults for the CLI; command-line options win over
config values.

Configuration file structure:
    markdown_to_docx:
      template: modern
      diagram_theme: forest
      generate_toc: true
      author: "Docs Team"
    docx_to_markdown:
      extract_images: true
      image_output_dir: assets
      heading_anchor_style: inline
    output_dir: ./output
"""

from dataclasses import fields
from typing import Any, Dict, Type

import yaml

from ..errors import ConfigError, FilesystemError
from ..models.options import (
    DIAGRAM_THEMES,
    HEADING_ANCHOR_STYLES,
    PAGE_ORIENTATIONS,
    DocxToMarkdownOptions,
    MarkdownToDocxOptions,
)
from ..styles.templates import available_templates
from .models import CliConfig


class ConfigLoader:
    """Handles configuration file loading and validation."""

    ALLOWED_TOP_LEVEL_FIELDS = {'markdown_to_docx', 'docx_to_markdown', 'output_dir'}

    DEFAULTS = {
        'output_dir': './output',
    }

    @classmethod
    def load(cls, config_path: str) -> CliConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            CliConfig with validated option overrides

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(config_path, 'read', 'Configuration file not found')
        except PermissionError:
            raise FilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(config_path, 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> CliConfig:
        unknown = set(config_dict.keys()) - cls.ALLOWED_TOP_LEVEL_FIELDS
        if unknown:
            raise ConfigError(f"Unknown fields: {', '.join(sorted(unknown))}")

        output_dir = config_dict.get('output_dir', cls.DEFAULTS['output_dir'])
        if not isinstance(output_dir, str) or not output_dir.strip():
            raise ConfigError("Field 'output_dir' must be a non-empty string", 'output_dir')

        md_section = cls._parse_section(config_dict, 'markdown_to_docx', MarkdownToDocxOptions)
        docx_section = cls._parse_section(config_dict, 'docx_to_markdown', DocxToMarkdownOptions)

        cls._check_choice(md_section, 'template', available_templates(), 'markdown_to_docx')
        cls._check_choice(md_section, 'diagram_theme', DIAGRAM_THEMES, 'markdown_to_docx')
        cls._check_choice(md_section, 'page_orientation', PAGE_ORIENTATIONS, 'markdown_to_docx')
        cls._check_choice(docx_section, 'heading_anchor_style', HEADING_ANCHOR_STYLES, 'docx_to_markdown')

        return CliConfig(
            markdown_to_docx=md_section,
            docx_to_markdown=docx_section,
            output_dir=output_dir.strip(),
        )

    @staticmethod
    def _parse_section(config_dict: Dict[str, Any], name: str, options_type: Type) -> Dict[str, Any]:
        """Validate one options section against the dataclass defaults."""
        section = config_dict.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"Section must be a dictionary, got {type(section).__name__}", name)

        defaults = options_type()
        known = {f.name: getattr(defaults, f.name) for f in fields(options_type)}
        parsed = {}
        for key, value in section.items():
            if key not in known:
                raise ConfigError(f"Unknown option '{key}'", name)
            if value is None:
                continue
            expected = known[key]
            if isinstance(expected, bool):
                if not isinstance(value, bool):
                    raise ConfigError(f"Option '{key}' must be true or false", f"{name}.{key}")
            elif isinstance(expected, (int, float)):
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ConfigError(f"Option '{key}' must be a number", f"{name}.{key}")
                if value <= 0:
                    raise ConfigError(f"Option '{key}' must be positive", f"{name}.{key}")
                value = type(expected)(value)
            elif not isinstance(value, str):
                raise ConfigError(f"Option '{key}' must be a string", f"{name}.{key}")
            parsed[key] = value
        return parsed

    @staticmethod
    def _check_choice(section: Dict[str, Any], key: str, choices, name: str) -> None:
        if key in section and section[key] not in choices:
            raise ConfigError(
                f"Option '{key}' must be one of: {', '.join(choices)}",
                f"{name}.{key}",
            )
