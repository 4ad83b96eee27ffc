"""Edge-label vocabulary used to classify branches.

Matching is case-insensitive substring matching, so the German and English
defaults recognize labels such as "Ja", "yes (x > 0)" or "FALSE".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Tuple

from ..core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..config.settings import Settings

DEFAULT_AFFIRMATIVE_TERMS = ("ja", "yes", "true")
DEFAULT_NEGATIVE_TERMS = ("nein", "no", "false")
DEFAULT_EXIT_TERMS = ("exit",)


def _normalize_terms(name: str, terms: Iterable[str]) -> Tuple[str, ...]:
    normalized = tuple(term.strip().lower() for term in terms if term and term.strip())
    if not normalized:
        raise ConfigurationError(f"{name} vocabulary cannot be empty")
    return normalized


@dataclass(frozen=True)
class BranchVocabulary:
    affirmative: Tuple[str, ...] = DEFAULT_AFFIRMATIVE_TERMS
    negative: Tuple[str, ...] = DEFAULT_NEGATIVE_TERMS
    exit: Tuple[str, ...] = DEFAULT_EXIT_TERMS

    def __post_init__(self) -> None:
        object.__setattr__(self, "affirmative", _normalize_terms("affirmative", self.affirmative))
        object.__setattr__(self, "negative", _normalize_terms("negative", self.negative))
        object.__setattr__(self, "exit", _normalize_terms("exit", self.exit))

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BranchVocabulary":
        return cls(
            affirmative=tuple(settings.affirmative_terms),
            negative=tuple(settings.negative_terms),
            exit=tuple(settings.exit_terms),
        )

    @staticmethod
    def _contains(label: str, terms: Tuple[str, ...]) -> bool:
        text = (label or "").lower()
        return any(term in text for term in terms)

    def is_affirmative(self, label: str) -> bool:
        return self._contains(label, self.affirmative)

    def is_negative(self, label: str) -> bool:
        return self._contains(label, self.negative)

    def is_binary(self, label: str) -> bool:
        """True if the label reads as either side of a yes/no decision."""
        return self.is_affirmative(label) or self.is_negative(label)

    def is_exit(self, label: str) -> bool:
        return self._contains(label, self.exit)
