"""
Relocation risk scoring.

Scores how likely a company is to need new premises soon (0-100) from:
- Years since the move (up to 40)
- Absolute employee change (up to 30)
- Absolute percentage change (up to 30)

The scorer is a pure function of one item's metrics and keeps no state.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from lokalradar.analysis.metrics import MoveMetrics, MovedItem, metrics_for
from lokalradar.clustering.engine import ClusterMember, ClusteringResult

logger = logging.getLogger(__name__)


def _band(value: float, bands: tuple[tuple[float, int], ...], floor: int) -> int:
    """Points for the first band whose lower bound the value reaches."""
    for lower_bound, points in bands:
        if value >= lower_bound:
            return points
    return floor


@dataclass
class RiskFactors:
    """Points contributed by each factor."""

    years_since_move: int = 0
    employee_change: int = 0
    change_percent: int = 0

    def total_score(self) -> int:
        """Sum of factors, capped at 100."""
        total = self.years_since_move + self.employee_change + self.change_percent
        return min(total, RelocationRiskScorer.MAX_SCORE)

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "years_since_move": self.years_since_move,
            "employee_change": self.employee_change,
            "change_percent": self.change_percent,
            "total_score": self.total_score(),
        }


@dataclass
class ScoredMember:
    """A cluster member with its risk score."""

    member: ClusterMember
    risk_score: int

    @property
    def orgnr(self) -> str:
        return self.member.orgnr

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {**self.member.to_dict(), "risk_score": self.risk_score}


class RelocationRiskScorer:
    """
    Banded additive risk score.

    The bands sum to at most 100; the cap in total_score() only guards
    against future band changes.
    """

    MAX_SCORE = 100

    YEARS_BANDS = ((8, 40), (5, 30), (3, 20))
    YEARS_FLOOR = 10

    CHANGE_BANDS = ((100, 30), (50, 20), (20, 10))
    CHANGE_FLOOR = 5

    PERCENT_BANDS = ((100, 30), (50, 20), (25, 10))
    PERCENT_FLOOR = 5

    # Distribution bands for a high-risk list
    VERY_HIGH_SCORE = 85
    HIGH_SCORE = 75

    def factors(self, metrics: MoveMetrics) -> RiskFactors:
        """Points per factor for one set of move metrics."""
        percent = abs(metrics.change_percent)
        if math.isnan(percent):
            percent_points = self.PERCENT_FLOOR
        else:
            percent_points = _band(percent, self.PERCENT_BANDS, self.PERCENT_FLOOR)

        return RiskFactors(
            years_since_move=_band(metrics.years_since_move, self.YEARS_BANDS, self.YEARS_FLOOR),
            employee_change=_band(abs(metrics.employee_change), self.CHANGE_BANDS, self.CHANGE_FLOOR),
            change_percent=percent_points,
        )

    def score(self, metrics: MoveMetrics) -> int:
        """Risk score in [0, 100]."""
        return self.factors(metrics).total_score()

    def score_item(self, item: MovedItem, reference_year: Optional[int] = None) -> int:
        """Score an event (at-move metrics) or a candidate (since-move metrics)."""
        return self.score(metrics_for(item, reference_year))

    def rank_members(self, members: Sequence[ClusterMember]) -> list[ScoredMember]:
        """Score members and sort descending; equal scores keep input order."""
        scored = [ScoredMember(member=m, risk_score=self.score(m.metrics)) for m in members]
        scored.sort(key=lambda s: s.risk_score, reverse=True)
        return scored

    def high_risk(self, result: ClusteringResult, threshold: int = 70) -> list[ScoredMember]:
        """
        Members of all clusters scoring at or above the threshold.

        Args:
            result: A clustering result
            threshold: Minimum score, 0-100

        Returns:
            Scored members, highest score first
        """
        if not 0 <= threshold <= self.MAX_SCORE:
            raise ValueError(f"threshold must be between 0 and {self.MAX_SCORE}, got {threshold}")

        ranked = self.rank_members(result.members())
        selected = [s for s in ranked if s.risk_score >= threshold]
        logger.debug(f"{len(selected)} of {len(ranked)} members at or above risk {threshold}")
        return selected

    def distribution(self, scored: Sequence[ScoredMember], threshold: int = 70) -> dict[str, int]:
        """Count a high-risk list by band: very high, high, moderate."""
        return {
            "very_high": sum(1 for s in scored if s.risk_score >= self.VERY_HIGH_SCORE),
            "high": sum(
                1 for s in scored
                if self.HIGH_SCORE <= s.risk_score < self.VERY_HIGH_SCORE
            ),
            "moderate": sum(
                1 for s in scored
                if threshold <= s.risk_score < self.HIGH_SCORE
            ),
        }
