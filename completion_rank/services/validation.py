"""Validation for scoring tables and proximity settings.

Provides ValidationResult and validators used by the config layer.
Errors block a configuration; warnings flag tables that break the ordering
the scorer is tuned for (start > boundary > interior, exact > ignore-case)
but still produce valid scores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import ScoringWeights, WordDistanceSettings

MAX_INDEX_TIMEOUT = 1.0

# (stronger, weaker) pairs that should keep their order
_ORDERING = [
    ("start_exact", "boundary_exact"),
    ("start_ignore_case", "boundary_ignore_case"),
    ("boundary_exact", "interior_exact"),
    ("boundary_ignore_case", "interior_ignore_case"),
    ("follow_boundary_exact", "follow_interior_exact"),
    ("follow_boundary_ignore_case", "follow_interior_ignore_case"),
    ("start_exact", "start_ignore_case"),
    ("boundary_exact", "boundary_ignore_case"),
    ("interior_exact", "interior_ignore_case"),
    ("contiguous_exact", "contiguous_ignore_case"),
    ("follow_boundary_exact", "follow_boundary_ignore_case"),
    ("follow_interior_exact", "follow_interior_ignore_case"),
]


@dataclass
class ValidationResult:
    """Result of a validation check.

    Supports errors (blocking) and warnings (advisory).
    """

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        """Check if there are any errors or warnings."""
        return bool(self.errors or self.warnings)

    @property
    def first_error(self) -> str | None:
        return self.errors[0] if self.errors else None

    @property
    def first_warning(self) -> str | None:
        return self.warnings[0] if self.warnings else None

    def add_error(self, message: str) -> None:
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Merge another result into this one."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )


def validate_weights(weights: ScoringWeights) -> ValidationResult:
    """Validate a scoring table.

    Every weight must be positive: a matched alignment must never score 0,
    since 0 is reserved for "no match".
    """
    result = ValidationResult()

    for name, value in vars(weights).items():
        if name in ("boundary_decay", "smart_case"):
            continue
        if value <= 0:
            result.add_error(f"{name} must be positive (got {value})")

    if not 0 < weights.boundary_decay <= 1:
        result.add_error(f"boundary_decay must be within (0, 1] (got {weights.boundary_decay})")

    if not result.is_valid:
        return result

    for stronger, weaker in _ORDERING:
        if getattr(weights, stronger) < getattr(weights, weaker):
            result.add_warning(f"{stronger} is lower than {weaker}")

    return result


def validate_word_distance(settings: WordDistanceSettings) -> ValidationResult:
    """Validate proximity settings."""
    result = ValidationResult()
    if settings.index_timeout <= 0:
        result.add_error("index_timeout must be positive")
    elif settings.index_timeout > MAX_INDEX_TIMEOUT:
        result.add_warning(
            f"index_timeout of {settings.index_timeout}s may stall the completion popup"
        )
    return result
