"""Configuration management for completion-rank.

Single JSON file holding the scoring table and proximity settings:
- ~/.config/completion-rank/config.json

The scoring weights are empirically tuned, so every constant the matcher
uses lives here instead of in the scorer. Files are written atomically with
0600 permissions. Unreadable or invalid files fall back to defaults.
"""

from __future__ import annotations

import json
import logging
import os
import stat
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from ..models.exceptions import ConfigValidationError
from .events import ConfigChangedEvent, EventBus
from .validation import validate_weights, validate_word_distance


logger = logging.getLogger(__name__)


def _secure_write_json(path: Path, data: dict) -> None:
    """Write JSON to file with restricted permissions (0600)."""
    content = json.dumps(data, indent=2)
    temp_path = path.with_suffix(".tmp")
    try:
        fd = os.open(str(temp_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.write(fd, content.encode())
        finally:
            os.close(fd)
        temp_path.replace(path)
    except OSError as e:
        logger.warning(f"Atomic config write failed, writing in place: {e}")
        path.write_text(content)
        try:
            path.chmod(stat.S_IRUSR | stat.S_IWUSR)
        except OSError:
            pass  # Best effort on systems that don't support chmod


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the fuzzy match scoring table.

    "exact" weights apply when the aligned characters are identical,
    "ignore_case" weights when they only match case-insensitively.
    """

    # First query character
    start_exact: float = 5.0  # Matched at index 0
    start_ignore_case: float = 2.5
    boundary_exact: float = 2.0  # Matched at a word boundary
    boundary_ignore_case: float = 1.0
    interior_exact: float = 1.0  # Matched anywhere else
    interior_ignore_case: float = 0.5

    # Following query characters
    contiguous_exact: float = 1.0  # Right after the previous match
    contiguous_ignore_case: float = 0.5
    follow_boundary_exact: float = 1.0
    follow_boundary_ignore_case: float = 0.75
    follow_interior_exact: float = 0.1
    follow_interior_ignore_case: float = 0.05

    # Multiplier per word boundary skipped before a boundary match
    boundary_decay: float = 0.5
    # Uppercase query characters only match uppercase
    smart_case: bool = True

    def to_dict(self) -> dict:
        """Serialize only the values that differ from the defaults."""
        defaults = ScoringWeights()
        return {
            key: value
            for key, value in asdict(self).items()
            if value != getattr(defaults, key)
        }

    @classmethod
    def from_dict(cls, data: dict) -> ScoringWeights:
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown scoring weight: {key}")
                continue
            if key == "smart_case":
                values[key] = bool(value)
            else:
                values[key] = float(value)
        return cls(**values)

    def merge_with(self, override: dict) -> ScoringWeights:
        """Return new weights with the given values replaced."""
        return ScoringWeights.from_dict({**asdict(self), **override})

    def validated(self) -> ScoringWeights:
        """Return self, or raise ConfigValidationError on invalid weights."""
        result = validate_weights(self)
        if not result.is_valid:
            raise ConfigValidationError(
                result.first_error or "invalid scoring weights",
                suggestion="all weights must be positive and decay within (0, 1]",
            )
        return self


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass
class WordDistanceSettings:
    """Settings for the structural proximity signal.

    The word-range index request is raced against ``index_timeout``
    (seconds); a slow provider degrades to "no signal".
    """

    enabled: bool = True
    index_timeout: float = 0.03

    def to_dict(self) -> dict:
        return {"enabled": self.enabled, "index_timeout": self.index_timeout}

    @classmethod
    def from_dict(cls, data: dict) -> WordDistanceSettings:
        return cls(
            enabled=bool(data.get("enabled", True)),
            index_timeout=float(data.get("index_timeout", 0.03)),
        )


@dataclass
class Config:
    """Unified completion-rank configuration.

    Stored in ~/.config/completion-rank/config.json
    """

    scoring: ScoringWeights = field(default_factory=ScoringWeights)
    word_distance: WordDistanceSettings = field(default_factory=WordDistanceSettings)

    def to_dict(self) -> dict:
        result: dict = {"word_distance": self.word_distance.to_dict()}
        # Only save scoring overrides
        scoring = self.scoring.to_dict()
        if scoring:
            result["scoring"] = scoring
        return result

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        return cls(
            scoring=ScoringWeights.from_dict(data.get("scoring", {})),
            word_distance=WordDistanceSettings.from_dict(data.get("word_distance", {})),
        )


class ConfigManager:
    """Loads, validates and persists the configuration file."""

    def __init__(self, config_dir: Path | None = None):
        if config_dir is None:
            config_dir = Path.home() / ".config" / "completion-rank"
        self._config_dir = config_dir
        self._config_file = config_dir / "config.json"
        self._config: Config | None = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def _load_config(self) -> Config:
        """Load config from disk, falling back to defaults."""
        if not self._config_file.exists():
            return Config()
        try:
            data = json.loads(self._config_file.read_text())
            config = Config.from_dict(data)
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Failed to load config file, using defaults: {e}")
            return Config()

        result = validate_weights(config.scoring).merge(validate_word_distance(config.word_distance))
        if not result.is_valid:
            logger.warning(f"Invalid config ({result.first_error}), using defaults")
            return Config()
        for warning in result.warnings:
            logger.warning(f"Config: {warning}")
        return config

    def save_config(self, config: Config) -> None:
        """Save config to disk with secure permissions."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        _secure_write_json(self._config_file, config.to_dict())
        self._config = config

    def update_scoring(self, weights: ScoringWeights) -> None:
        """Validate and persist a new scoring table."""
        config = self.config
        config.scoring = weights.validated()
        self.save_config(config)
        EventBus.get().emit(ConfigChangedEvent(key="scoring"))

    def update_word_distance(self, settings: WordDistanceSettings) -> None:
        """Validate and persist proximity settings."""
        result = validate_word_distance(settings)
        if not result.is_valid:
            raise ConfigValidationError(result.first_error or "invalid word distance settings")
        config = self.config
        config.word_distance = settings
        self.save_config(config)
        EventBus.get().emit(ConfigChangedEvent(key="word_distance"))

    def reset(self) -> None:
        """Restore defaults on disk."""
        self.save_config(Config())
        EventBus.get().emit(ConfigChangedEvent(key="all"))
