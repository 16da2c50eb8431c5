# src/services/recommendation_selector.py

"""Budget-constrained product suggestions.

Candidates are scored with a small random term plus additive
preference bonuses, sorted by score, and packed first-fit into the
budget. Packing never backtracks, so a cheaper combination that would
use the budget better can be missed.

Because of the random term, two calls with identical input are not
guaranteed to return the same selection. Pass a seeded ``rng`` to make
the output reproducible.
"""

import logging
import random
from collections.abc import Iterable
from typing import Protocol

from src.config.settings import Settings
from src.models.product import Product
from src.models.recommendation import (
    Occasion,
    RecommendationRequest,
    RecommendationResult,
    ScoredCandidate,
)

logger = logging.getLogger("pos_shop.recommender")

BUDGET_EFFICIENCY_WEIGHT = 0.3
BUDGET_FRIENDLY_PRICE = 5.0

# (tag, bonus, categories)
_DIETARY_CATEGORY_BONUSES: list[tuple[str, float, frozenset[str]]] = [
    ("Vegetarian", 0.3, frozenset({"Fruits", "Vegetables", "Dairy"})),
]
_PREFERENCE_CATEGORY_BONUSES: list[tuple[str, float, frozenset[str]]] = [
    ("Healthy", 0.3, frozenset({"Fruits", "Vegetables"})),
]
_OCCASION_BONUSES: dict[Occasion, tuple[float, frozenset[str]]] = {
    Occasion.PARTY: (0.3, frozenset({"Beverages", "Snacks"})),
    Occasion.DAILY: (
        0.2,
        frozenset({"Fruits", "Vegetables", "Dairy", "Bakery"}),
    ),
}
ORGANIC_BONUS = 0.4
BUDGET_FRIENDLY_BONUS = 0.2


class RandomSource(Protocol):
    """Anything with a ``random()`` method returning a float in [0, 1)."""

    def random(self) -> float: ...


class RecommendationSelector:
    """Score catalog products against a request and pack the budget."""

    def __init__(self, rng: RandomSource | None = None) -> None:
        self._rng: RandomSource = rng or random.Random()

    def score(
        self, product: Product, request: RecommendationRequest
    ) -> float:
        """Return the desirability score of *product* for *request*."""
        score = self._rng.random() * Settings.SCORE_JITTER

        price_ratio = product.price / request.budget
        score += (1 - min(price_ratio, 1.0)) * BUDGET_EFFICIENCY_WEIGHT

        if (
            "Organic" in request.dietary
            and "organic" in product.name.lower()
        ):
            score += ORGANIC_BONUS
        for tag, bonus, categories in _DIETARY_CATEGORY_BONUSES:
            if tag in request.dietary and product.category in categories:
                score += bonus
        for tag, bonus, categories in _PREFERENCE_CATEGORY_BONUSES:
            if (
                tag in request.preferences
                and product.category in categories
            ):
                score += bonus
        if (
            "Budget-Friendly" in request.preferences
            and product.price < BUDGET_FRIENDLY_PRICE
        ):
            score += BUDGET_FRIENDLY_BONUS

        occasion_rule = _OCCASION_BONUSES.get(request.occasion)
        if occasion_rule is not None:
            bonus, categories = occasion_rule
            if product.category in categories:
                score += bonus

        return score

    def rank(
        self,
        catalog: Iterable[Product],
        request: RecommendationRequest,
    ) -> list[ScoredCandidate]:
        """Score in-stock products and sort them, best first.

        The sort is stable, so equal scores keep catalog order.
        """
        candidates = [
            ScoredCandidate(product=p, score=self.score(p, request))
            for p in catalog
            if p.stock_quantity > 0
        ]
        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates

    def select(
        self,
        catalog: Iterable[Product],
        request: RecommendationRequest,
    ) -> RecommendationResult:
        """Greedily accept ranked candidates that still fit the budget."""
        result = RecommendationResult(budget=request.budget)
        if request.budget <= 0:
            return result

        limit = Settings.MAX_RECOMMENDATIONS
        running = 0.0
        for candidate in self.rank(catalog, request):
            if len(result.selected) >= limit:
                break
            price = candidate.product.price
            if running + price <= request.budget:
                result.selected.append(candidate.product)
                running += price

        result.total_cost = running
        logger.info(
            "Selected %d products for %.2f of %.2f budget "
            "(occasion=%s, dietary=%s, preferences=%s)",
            len(result.selected),
            running,
            request.budget,
            request.occasion.value,
            sorted(request.dietary),
            sorted(request.preferences),
        )
        return result


def select(
    catalog: Iterable[Product],
    request: RecommendationRequest,
    rng: RandomSource | None = None,
) -> RecommendationResult:
    """Convenience wrapper around :meth:`RecommendationSelector.select`."""
    return RecommendationSelector(rng).select(catalog, request)
