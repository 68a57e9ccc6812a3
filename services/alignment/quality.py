"""
FUJIALIGN Quality Scorer

Maps the geometric deviations of an alignment into an accuracy tier and a
0-100 quality score.
"""

from dataclasses import dataclass
import math
from typing import Optional

from fujialign.config import SearchConfig
from fujialign.types import Accuracy, AlignmentCandidate

# Tier upper bounds in degrees, best first. The summit is about 0.53° wide.
TIER_THRESHOLDS = (
    (0.1, Accuracy.PERFECT),
    (0.25, Accuracy.EXCELLENT),
    (0.4, Accuracy.GOOD),
)


@dataclass(frozen=True)
class QualityResult:
    """Accuracy tier and score of one candidate."""
    accuracy: Accuracy
    quality_score: int


class QualityScorer:
    """Pure scoring of alignment candidates."""

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()

    @staticmethod
    def tier(deviation: float) -> Accuracy:
        """Accuracy tier for a single deviation in degrees."""
        for limit, accuracy in TIER_THRESHOLDS:
            if deviation <= limit:
                return accuracy
        return Accuracy.FAIR

    def overall_accuracy(self, azimuth_diff: float, elevation_diff: float) -> Accuracy:
        """The worse of the azimuth and elevation tiers."""
        return Accuracy.worst(self.tier(azimuth_diff), self.tier(elevation_diff))

    def quality_score(self, azimuth_diff: float, elevation: float) -> int:
        """
        0-100 score from azimuth error and body elevation.

        Components:
            azimuth (0-50): linear falloff to 0 at the azimuth tolerance
            elevation (0-30): full once the body is 0° or higher
            visibility (0-20): 2 points per degree above the horizon
        """
        tolerance = self.config.azimuth_tolerance_deg
        azimuth_score = max(0.0, 50 - (azimuth_diff / tolerance) * 50)
        elevation_score = min(30.0, max(0.0, elevation + 2) * 15)
        visibility_score = min(20.0, max(0.0, elevation) * 2)
        total = azimuth_score + elevation_score + visibility_score
        # Halves round up
        return int(math.floor(total + 0.5))

    def score(self, candidate: AlignmentCandidate) -> QualityResult:
        """Accuracy and quality score for a candidate."""
        return QualityResult(
            accuracy=self.overall_accuracy(candidate.azimuth_diff, candidate.elevation_diff),
            quality_score=self.quality_score(
                candidate.azimuth_diff, candidate.position.elevation
            ),
        )
