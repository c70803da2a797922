"""
phonescan/detectors - rule-based message classification.

Deterministic: the same body always yields the same category.
"""

from phonescan.detectors.keyword_detector import (
    CATEGORY_ORDER,
    Classification,
    classify,
)

__all__ = [
    "CATEGORY_ORDER",
    "Classification",
    "classify",
]
