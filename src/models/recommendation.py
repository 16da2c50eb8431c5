# src/models/recommendation.py

"""Request and result types for the budget recommender."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from src.models.product import Product


class Occasion(str, Enum):
    """Shopping occasions the recommender knows about."""

    DAILY = "daily"
    PARTY = "party"
    ROMANTIC = "romantic"
    FAMILY = "family"
    SNACKS = "snacks"

    @classmethod
    def parse(cls, value: "str | Occasion") -> "Occasion":
        """Accept an Occasion or its (case-insensitive) string value."""
        if isinstance(value, Occasion):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(o.value for o in cls)
            msg = f"Unknown occasion '{value}' (expected one of: {valid})"
            raise ValueError(msg) from None


@dataclass(frozen=True)
class RecommendationRequest:
    """Parameters of a single recommendation session.

    ``servings`` is accepted and carried along but does not affect
    scoring.
    """

    budget: float
    dietary: frozenset[str] = frozenset()
    preferences: frozenset[str] = frozenset()
    occasion: Occasion = Occasion.DAILY
    servings: int = 2

    @classmethod
    def build(
        cls,
        budget: float,
        dietary: Iterable[str] = (),
        preferences: Iterable[str] = (),
        occasion: "str | Occasion" = Occasion.DAILY,
        servings: int = 2,
    ) -> "RecommendationRequest":
        """Validate user input and return a frozen request.

        Raises ``ValueError`` for a non-positive budget, fewer than
        one serving, or an unknown occasion.
        """
        if budget <= 0:
            msg = f"Budget must be positive, got {budget}"
            raise ValueError(msg)
        if servings < 1:
            msg = f"Servings must be at least 1, got {servings}"
            raise ValueError(msg)
        return cls(
            budget=float(budget),
            dietary=frozenset(d.strip() for d in dietary if d.strip()),
            preferences=frozenset(
                p.strip() for p in preferences if p.strip()
            ),
            occasion=Occasion.parse(occasion),
            servings=int(servings),
        )


@dataclass(frozen=True)
class ScoredCandidate:
    """A product paired with its desirability score."""

    product: Product
    score: float


@dataclass
class RecommendationResult:
    """Accepted products in acceptance order and their summed price."""

    selected: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    total_cost: float = 0.0
    budget: float = 0.0

    @property
    def remaining_budget(self) -> float:
        """Budget left after the selected products."""
        return max(0.0, self.budget - self.total_cost)
