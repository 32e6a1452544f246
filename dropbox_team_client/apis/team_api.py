from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from dropbox_team_client.config import AppSettings
from dropbox_team_client.models import MemberPage, TeamInfo

EndpointCaller = Callable[[str, Optional[Dict[str, Any]]], Dict[str, Any]]

TEAM_INFO_PATH = "/team/get_info"
MEMBERS_LIST_PATH = "/team/members/list_v2"
MEMBERS_CONTINUE_PATH = "/team/members/list/continue_v2"


class TeamApi:
    def __init__(self, settings: AppSettings, call_endpoint: EndpointCaller):
        self._settings = settings
        self._call_endpoint = call_endpoint

    def get_info(self) -> TeamInfo:
        return TeamInfo.from_payload(self._call_endpoint(TEAM_INFO_PATH, None))

    def list_members(self, cursor: str | None = None) -> MemberPage:
        """Fetch a single page of members; a cursor continues a previous listing."""
        if cursor:
            payload = self._call_endpoint(MEMBERS_CONTINUE_PATH, {"cursor": cursor})
        else:
            payload = self._call_endpoint(
                MEMBERS_LIST_PATH,
                {
                    "limit": self._settings.member_page_size,
                    "include_removed": False,
                },
            )
        return MemberPage.from_payload(payload)
