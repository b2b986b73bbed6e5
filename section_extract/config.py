"""
Configuration management for section extraction runs.

Supports:
- Loading config from YAML
- Layering a config over another one via an `extends` key
- Config validation with Pydantic
- Config hashing for reproducibility
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field

from .extract.assembler import DEFAULT_TITLE
from .extract.inputs import DEFAULT_SUFFIXES
from .parse.locator import DEFAULT_CANDIDATE_TAGS
from .parse.models import SectionMarkers
from .parse.sanitizer import DEFAULT_WRAPPER_PREFIXES
from .parse.styles import BASELINE_CSS

logger = logging.getLogger(__name__)


SUPPORTED_PARSERS = ["html.parser", "lxml"]


# =============================================================================
# Pydantic Config Models
# =============================================================================


class MarkerConfig(BaseModel):
    """Section boundary headings."""

    start: str = "【損益計算書】"  # Income statement
    end: str = "【資本変動計算書】"  # Statement of changes in equity


class LocatorConfig(BaseModel):
    """Marker search settings."""

    # Tried in order; the first tag name with a match wins
    candidate_tags: list[str] = Field(default_factory=lambda: list(DEFAULT_CANDIDATE_TAGS))


class SanitizerConfig(BaseModel):
    """Cleaning applied to copied nodes."""

    wrapper_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_WRAPPER_PREFIXES))


class ParsingConfig(BaseModel):
    """How pages are found and parsed."""

    parser: str = "html.parser"  # html.parser | lxml
    encoding: str = "utf-8"
    file_suffixes: list[str] = Field(default_factory=lambda: list(DEFAULT_SUFFIXES))


class OutputConfig(BaseModel):
    """Assembled document settings."""

    title: str = DEFAULT_TITLE
    include_start: bool = True  # Keep the start heading itself in the output
    baseline_css: str = BASELINE_CSS


class ExtractorConfig(BaseModel):
    """Complete extraction configuration."""

    markers: MarkerConfig = Field(default_factory=MarkerConfig)
    locator: LocatorConfig = Field(default_factory=LocatorConfig)
    sanitizer: SanitizerConfig = Field(default_factory=SanitizerConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    def config_hash(self) -> str:
        """
        Generate hash of config for reproducibility tracking.

        Returns:
            SHA256 hash of serialized config (first 12 chars)
        """
        config_json = self.model_dump_json()
        return hashlib.sha256(config_json.encode()).hexdigest()[:12]

    def section_markers(self) -> SectionMarkers:
        return SectionMarkers(start=self.markers.start, end=self.markers.end)


# =============================================================================
# Config Loading Functions
# =============================================================================


def load_yaml(path: Union[str, Path]) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Override values take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _resolve_config_dict(config_path: Path, seen: set[Path]) -> dict[str, Any]:
    config_path = config_path.resolve()
    if config_path in seen:
        raise ValueError(f"Circular 'extends' chain at {config_path}")
    seen.add(config_path)

    config_dict = load_yaml(config_path)
    parent = config_dict.pop("extends", None)
    if parent is None:
        return config_dict

    parent_path = Path(parent)
    if not parent_path.is_absolute():
        parent_path = config_path.parent / parent_path

    base_dict = _resolve_config_dict(parent_path, seen)
    logger.info(f"Merged config from {config_path} with base {parent_path}")
    return deep_merge(base_dict, config_dict)


def load_config(config_path: Optional[Union[str, Path]] = None) -> ExtractorConfig:
    """
    Load extraction configuration from YAML.

    A config whose top level has an `extends` key is deep-merged over the
    config it names (relative paths resolve against the config's folder).

    Args:
        config_path: Path to config file; None gives the defaults

    Returns:
        ExtractorConfig with all settings resolved
    """
    if config_path is None:
        return ExtractorConfig()

    config_dict = _resolve_config_dict(Path(config_path), set())
    config = ExtractorConfig.model_validate(config_dict)

    logger.info(f"Loaded config {config_path} (hash: {config.config_hash()})")
    return config


def save_config(config: ExtractorConfig, output_path: Union[str, Path]) -> Path:
    """Save resolved config to a YAML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(dump_config(config))

    logger.info(f"Saved config to {output_path}")
    return output_path


def dump_config(config: ExtractorConfig) -> str:
    """Resolved config as YAML text."""
    return yaml.safe_dump(
        config.model_dump(mode="json"),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


# =============================================================================
# Config Validation
# =============================================================================


def validate_config(config: ExtractorConfig) -> list[str]:
    """
    Validate config and return list of warnings/issues.

    Returns:
        List of warning messages (empty if all good)
    """
    warnings = []

    if config.parsing.parser not in SUPPORTED_PARSERS:
        warnings.append(
            f"Invalid parser: {config.parsing.parser}. "
            f"Valid options: {SUPPORTED_PARSERS}"
        )

    if not config.markers.start.strip():
        warnings.append("Start marker is empty")
    if not config.markers.end.strip():
        warnings.append("End marker is empty")
    if config.markers.start and config.markers.start == config.markers.end:
        warnings.append("Start and end markers are identical")

    if not config.locator.candidate_tags:
        warnings.append("No candidate tags configured; markers can never be found")

    if not config.parsing.file_suffixes:
        warnings.append("No file suffixes configured; directories will look empty")

    for prefix in config.sanitizer.wrapper_prefixes:
        if not prefix.endswith(":"):
            warnings.append(
                f"Wrapper prefix {prefix!r} has no ':'; it may unwrap ordinary HTML tags"
            )

    return warnings
