"""
Configuration management and loading.

Handles report display settings and sale qualification rules.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml


DEFAULT_SALE_STATUSES = ("satis", "satış", "satil", "satıl", "sale")
DEFAULT_AFFIRMATIVE_ANSWERS = ("evet", "yes")


@dataclass(frozen=True)
class DisplayConfig:
    """How report figures are presented."""
    currency: str = "TL"
    decimal_places: int = 2
    default_project: str = "all"

    def __post_init__(self):
        """Validate display values."""
        if not self.currency or not self.currency.strip():
            raise ValueError("currency cannot be empty")
        if not 0 <= self.decimal_places <= 6:
            raise ValueError("decimal_places must be between 0 and 6")
        if not self.default_project or not self.default_project.strip():
            raise ValueError("default_project cannot be empty")


@dataclass(frozen=True)
class SaleRuleConfig:
    """Which lead statuses and answers count as a sale."""
    statuses: Tuple[str, ...] = DEFAULT_SALE_STATUSES
    affirmative: Tuple[str, ...] = DEFAULT_AFFIRMATIVE_ANSWERS

    def __post_init__(self):
        """Validate rule lists."""
        if not self.statuses and not self.affirmative:
            raise ValueError("sale rule needs at least one status or affirmative answer")
        for value in self.statuses + self.affirmative:
            if not value or not value.strip():
                raise ValueError("sale rule entries cannot be empty")


@dataclass(frozen=True)
class ReportConfig:
    """Complete report configuration."""
    display: DisplayConfig = field(default_factory=DisplayConfig)
    sales: SaleRuleConfig = field(default_factory=SaleRuleConfig)

    @classmethod
    def default(cls) -> "ReportConfig":
        return cls()


def load_report_config(path: Optional[str] = None) -> ReportConfig:
    """Load and validate report configuration from YAML file.

    Strict validation ensures typos in the config file surface as errors
    instead of silently falling back to defaults.

    Args:
        path: Path to YAML configuration file; None returns the defaults

    Returns:
        Validated ReportConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    if path is None:
        return ReportConfig.default()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Report config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")

    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'report', 'sales'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    display = _parse_display_config(raw_config.get('report', {}))
    sales = _parse_sale_rule_config(raw_config.get('sales', {}))

    return ReportConfig(display=display, sales=sales)


def _parse_display_config(data: Dict) -> DisplayConfig:
    """Parse and validate the 'report' section.

    Raises:
        ValueError: If configuration is invalid
    """
    if not isinstance(data, dict):
        raise ValueError("'report' must be a dictionary")

    allowed_keys = {'currency', 'decimal_places', 'default_project'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in report: {unknown_keys}")

    defaults = DisplayConfig()

    currency = data.get('currency', defaults.currency)
    if not isinstance(currency, str):
        raise ValueError("'currency' in report must be a string")

    places = data.get('decimal_places', defaults.decimal_places)
    if isinstance(places, bool) or not isinstance(places, int):
        raise ValueError("'decimal_places' in report must be an integer")

    default_project = data.get('default_project', defaults.default_project)
    if not isinstance(default_project, str):
        raise ValueError("'default_project' in report must be a string")

    return DisplayConfig(
        currency=currency,
        decimal_places=places,
        default_project=default_project
    )


def _parse_sale_rule_config(data: Dict) -> SaleRuleConfig:
    """Parse and validate the 'sales' section.

    Raises:
        ValueError: If configuration is invalid
    """
    if not isinstance(data, dict):
        raise ValueError("'sales' must be a dictionary")

    allowed_keys = {'statuses', 'affirmative'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in sales: {unknown_keys}")

    defaults = SaleRuleConfig()
    statuses = _parse_string_list(data, 'statuses', defaults.statuses)
    affirmative = _parse_string_list(data, 'affirmative', defaults.affirmative)

    return SaleRuleConfig(statuses=statuses, affirmative=affirmative)


def _parse_string_list(data: Dict, key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if key not in data:
        return default

    values = data[key]
    if not isinstance(values, list):
        raise ValueError(f"'{key}' in sales must be a list")
    for value in values:
        if not isinstance(value, str):
            raise ValueError(f"'{key}' in sales must contain only strings")
    return tuple(values)
