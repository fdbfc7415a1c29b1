"""Popularity scoring."""

import math

from src.modules.items.domain.entities import ItemMetrics


class PopularityScorer:
    """Maps engagement metrics to a bounded 0-100 score.

    score = clamp(0, 100, (primary*0.6 + secondary*0.3 + engagement*0.1) / 10)

    Negative or missing components are floored to 0 before weighting, so the
    scorer never raises on upstream data.
    """

    PRIMARY_WEIGHT = 0.6
    SECONDARY_WEIGHT = 0.3
    ENGAGEMENT_WEIGHT = 0.1
    SCALE = 10.0
    MAX_SCORE = 100.0

    def score(
        self,
        primary: float,
        secondary: float | None = None,
        engagement: float | None = None,
    ) -> float:
        weighted = (
            self._floor(primary) * self.PRIMARY_WEIGHT
            + self._floor(secondary) * self.SECONDARY_WEIGHT
            + self._floor(engagement) * self.ENGAGEMENT_WEIGHT
        )
        return max(0.0, min(self.MAX_SCORE, weighted / self.SCALE))

    def score_metrics(self, metrics: ItemMetrics) -> int:
        """Score an item's metrics, rounded for persistence."""
        # 四舍五入（半数向上），不使用银行家舍入
        return math.floor(
            self.score(metrics.primary, metrics.secondary, metrics.engagement) + 0.5
        )

    @staticmethod
    def _floor(value: float | None) -> float:
        if value is None or value < 0:
            return 0.0
        return float(value)
