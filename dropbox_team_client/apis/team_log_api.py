from __future__ import annotations

from dropbox_team_client.apis.team_api import EndpointCaller
from dropbox_team_client.config import AppSettings
from dropbox_team_client.models import EventPage

EVENTS_PATH = "/team_log/get_events"
EVENTS_CONTINUE_PATH = "/team_log/get_events/continue"
SIGN_IN_CATEGORY = "logins"


class TeamLogApi:
    def __init__(self, settings: AppSettings, call_endpoint: EndpointCaller):
        self._settings = settings
        self._call_endpoint = call_endpoint

    def get_sign_in_events(self, cursor: str | None = None) -> EventPage:
        if cursor:
            payload = self._call_endpoint(EVENTS_CONTINUE_PATH, {"cursor": cursor})
        else:
            payload = self._call_endpoint(
                EVENTS_PATH,
                {
                    "limit": self._settings.event_page_size,
                    "category": {".tag": SIGN_IN_CATEGORY},
                },
            )
        return EventPage.from_payload(payload)
