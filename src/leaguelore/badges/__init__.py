"""Achievement and blunder badges."""

from .collector import BadgeCollector
from .engine import BadgeResult, compute_badges, compute_badges_from_raw

__all__ = ["BadgeCollector", "BadgeResult", "compute_badges", "compute_badges_from_raw"]
