from app.models.crush import Crush
from app.models.match import Match
from app.models.season import Season
from app.models.stats import GlobalStats, SeasonDailyCount, SeasonStats, SeasonTargetCount
from app.models.user import User

__all__ = [
    "User",
    "Season",
    "Crush",
    "Match",
    "GlobalStats",
    "SeasonStats",
    "SeasonDailyCount",
    "SeasonTargetCount",
]
