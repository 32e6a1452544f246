from .team_api import TeamApi
from .team_log_api import TeamLogApi

__all__ = ["TeamApi", "TeamLogApi"]
