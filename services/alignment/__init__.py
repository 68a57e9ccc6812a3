"""
FUJIALIGN Alignment Service

Detects Diamond (Sun) and Pearl (Moon) alignments with the summit.
"""

from .windows import (
    SeasonalWindowSelector,
    ShootingConditions,
)
from .quality import (
    QualityResult,
    QualityScorer,
)
from .engine import AlignmentSearchEngine
from .batch import BatchCalculator

__all__ = [
    "AlignmentSearchEngine",
    "BatchCalculator",
    "QualityResult",
    "QualityScorer",
    "SeasonalWindowSelector",
    "ShootingConditions",
]
