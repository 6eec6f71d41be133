"""Badge rules. Every rule is a pure function from a context to a list of badges."""

from .career import CAREER_RULES
from .common import CareerContext, SeasonContext, award, extremes, percentile
from .draft import DRAFT_RULES
from .matchups import MATCHUP_RULES
from .season import SEASON_RULES
from .transactions import TRANSACTION_RULES, season_fees

PER_SEASON_RULES = SEASON_RULES + MATCHUP_RULES + DRAFT_RULES + TRANSACTION_RULES

__all__ = [
    "CAREER_RULES",
    "CareerContext",
    "DRAFT_RULES",
    "MATCHUP_RULES",
    "PER_SEASON_RULES",
    "SEASON_RULES",
    "SeasonContext",
    "TRANSACTION_RULES",
    "award",
    "extremes",
    "percentile",
    "season_fees",
]
