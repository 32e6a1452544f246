from __future__ import annotations

import logging
from typing import Any

from dropbox_team_client.apis import TeamApi, TeamLogApi
from dropbox_team_client.auth import AuthManager
from dropbox_team_client.config import AppSettings
from dropbox_team_client.errors import ApiHttpError, NotAuthenticatedError
from dropbox_team_client.http import HttpClient
from dropbox_team_client.models import (
    AuthState,
    AuthorizationRequest,
    Credentials,
    EventPage,
    MemberPage,
    TeamInfo,
)

logger = logging.getLogger(__name__)


class TokenAuthorizedClient:
    """Owns one credentials pair and issues authenticated Dropbox team API calls.

    Starts unauthenticated; ``exchange_code_for_tokens`` moves it to
    authenticated and ``refresh_access_token`` swaps the access token in place.
    A 401 is retried once after a refresh only when ``settings.auto_refresh``
    is set and a refresh token is held.
    """

    def __init__(
        self,
        settings: AppSettings,
        http_client: HttpClient,
        auth_manager: AuthManager | None = None,
    ):
        self._settings = settings
        self._http_client = http_client
        self._auth_manager = auth_manager or AuthManager(settings, http_client)
        self._team_api = TeamApi(settings, self.call_authenticated_endpoint)
        self._team_log_api = TeamLogApi(settings, self.call_authenticated_endpoint)

    @property
    def credentials(self) -> Credentials:
        return self._auth_manager.credentials

    def auth_state(self) -> AuthState:
        return self._auth_manager.get_auth_state()

    def build_authorization_request(self) -> AuthorizationRequest:
        return self._auth_manager.build_authorization_request()

    def build_authorization_url(self, request: AuthorizationRequest | None = None) -> str:
        return self._auth_manager.build_authorization_url(request)

    def exchange_code_for_tokens(self, code: str) -> Credentials:
        return self._auth_manager.exchange_code_for_tokens(code)

    def refresh_access_token(self) -> str:
        return self._auth_manager.refresh_access_token()

    def sign_out(self) -> None:
        self._auth_manager.sign_out()

    def call_authenticated_endpoint(
        self,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        token = self.credentials.access_token
        if not token:
            raise NotAuthenticatedError("Not authenticated: exchange an authorization code first")

        try:
            return self._http_client.post_json(token, path, payload)
        except ApiHttpError as exc:
            if exc.status_code != 401 or not self._can_refresh():
                raise
            logger.info("%s returned 401, refreshing access token and retrying once", path)

        token = self.refresh_access_token()
        return self._http_client.post_json(token, path, payload)

    def get_team_info(self) -> TeamInfo:
        return self._team_api.get_info()

    def get_team_members(self, cursor: str | None = None) -> MemberPage:
        return self._team_api.list_members(cursor)

    def get_sign_in_events(self, cursor: str | None = None) -> EventPage:
        return self._team_log_api.get_sign_in_events(cursor)

    def _can_refresh(self) -> bool:
        return self._settings.auto_refresh and bool(self.credentials.refresh_token)


def build_client(settings: AppSettings, access_token: str | None = None) -> TokenAuthorizedClient:
    http_client = HttpClient(settings)
    auth_manager = AuthManager(settings, http_client, Credentials(access_token=access_token))
    return TokenAuthorizedClient(settings, http_client, auth_manager)
