"""
Configuration Manager
====================

Marker names, service names and output options for an extraction run.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List

from ngtranslate_extract.exceptions import ConfigError

DEFAULT_CONFIG_FILE = "ngtranslate_extract.json"


@dataclass
class MarkupSettings:
    """Markers recognized in HTML templates."""
    element_name: str = "translate"
    attribute_name: str = "translate"
    id_attribute: str = "translate"  # non-empty value overrides the text content
    default_text_attribute: str = "translate-default"
    attribute_translation_prefix: str = "translate-attr-"
    attribute_default_text_prefix: str = "translate-default-attr-"
    suppress_attribute: str = "suppress-dynamic-translation-error"
    interpolation_start: str = "{{"
    interpolation_end: str = "}}"


@dataclass
class ScriptSettings:
    """Conventions recognized in JavaScript sources."""
    service_name: str = "$translate"
    register_object: str = "i18n"
    register_function: str = "registerTranslation"
    register_many_function: str = "registerTranslations"
    suppress_comment: str = "suppress-dynamic-translation-error"


@dataclass
class OutputSettings:
    """Where and how the catalog is written."""
    asset_name: str = "translations.js"
    output_directory: str = "dist"
    indent: int = 0  # 0 writes a single line
    report_file: str = ""
    workers: int = 4
    markup_extensions: List[str] = field(default_factory=lambda: [".html", ".htm"])
    script_extensions: List[str] = field(default_factory=lambda: [".js", ".mjs", ".cjs", ".jsx"])


def _section(cls, data: Dict[str, Any], name: str):
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{name}' must be an object")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in section '{name}': {', '.join(unknown)}")
    return cls(**data)


class ConfigManager:
    """Manages extraction configuration."""

    SECTIONS = {
        'markup': MarkupSettings,
        'script': ScriptSettings,
        'output': OutputSettings,
    }

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE):
        self.logger = logging.getLogger(__name__)
        self.config_file = Path(config_file)

        # Default configuration
        self.markup_settings = MarkupSettings()
        self.script_settings = ScriptSettings()
        self.output_settings = OutputSettings()

    def load_config(self) -> bool:
        """Load configuration from file. Returns False when the file does not exist."""
        if not self.config_file.exists():
            self.logger.info("Config file doesn't exist, using defaults")
            return False

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read config file {self.config_file}: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Config file {self.config_file} must contain an object")

        unknown = sorted(set(config_data) - set(self.SECTIONS))
        if unknown:
            raise ConfigError(f"Unknown config sections: {', '.join(unknown)}")

        if 'markup' in config_data:
            self.markup_settings = _section(MarkupSettings, config_data['markup'], 'markup')
        if 'script' in config_data:
            self.script_settings = _section(ScriptSettings, config_data['script'], 'script')
        if 'output' in config_data:
            self.output_settings = _section(OutputSettings, config_data['output'], 'output')

        self.logger.info("Configuration loaded successfully")
        return True

    def save_config(self) -> bool:
        """Save configuration to file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            self.logger.error(f"Error saving config: {e}")
            return False
        self.logger.info("Configuration saved successfully")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'markup': asdict(self.markup_settings),
            'script': asdict(self.script_settings),
            'output': asdict(self.output_settings),
        }
