"""
Engine configuration for rdf-graphcore.

Provides:
- Matcher tuning (pattern ordering, parallel group evaluation)
- Isomorphism tuning (signature pruning)
- JSON load/save
- Configuration validation

None of these settings change results; they only affect how the searches
are carried out.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "engine.json"

PATTERN_ORDERS = ("selectivity", "given")


class ConfigValidationError(Exception):
    """Configuration validation error."""
    pass


@dataclass
class EngineConfig:
    """Settings for the pattern matcher and the isomorphism checker."""
    pattern_order: str = "selectivity"
    parallel_groups: bool = False
    max_workers: int = 4
    use_signatures: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern_order": self.pattern_order,
            "parallel_groups": self.parallel_groups,
            "max_workers": self.max_workers,
            "use_signatures": self.use_signatures,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        order = data.get("pattern_order", "selectivity")
        if order not in PATTERN_ORDERS:
            logger.warning(f"Unknown pattern_order {order!r}, using 'selectivity'")
            order = "selectivity"

        return cls(
            pattern_order=order,
            parallel_groups=data.get("parallel_groups", False),
            max_workers=data.get("max_workers", 4),
            use_signatures=data.get("use_signatures", True),
        )

    def save(self, path: Path) -> Path:
        """Save configuration to ``engine.json`` inside ``path``."""
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        config_file = path / CONFIG_FILENAME
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved engine configuration to {config_file}")
        return config_file

    @classmethod
    def load(cls, path: Path) -> "EngineConfig":
        """Load configuration from ``path``, falling back to defaults."""
        config_file = Path(path) / CONFIG_FILENAME
        if config_file.exists():
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls.from_dict(data)
        return cls()


class ConfigValidator:
    """Validates engine configuration."""

    @staticmethod
    def validate(config: EngineConfig) -> List[str]:
        """
        Validate configuration.

        Returns list of error messages (empty if valid).
        """
        errors = []

        if config.pattern_order not in PATTERN_ORDERS:
            errors.append(f"Invalid pattern_order: {config.pattern_order}")

        if not isinstance(config.max_workers, int) or config.max_workers < 1:
            errors.append("max_workers must be at least 1")

        return errors

    @staticmethod
    def validate_or_raise(config: EngineConfig) -> None:
        """Validate configuration, raising on errors."""
        errors = ConfigValidator.validate(config)
        if errors:
            raise ConfigValidationError("; ".join(errors))


DEFAULT_CONFIG = EngineConfig()
