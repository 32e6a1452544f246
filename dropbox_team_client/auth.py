from __future__ import annotations

import logging
import secrets
from typing import Any
from urllib.parse import urlencode

import requests

from dropbox_team_client.config import AppSettings
from dropbox_team_client.errors import AuthenticationError
from dropbox_team_client.http import HttpClient
from dropbox_team_client.models import AuthState, AuthorizationRequest, Credentials

logger = logging.getLogger(__name__)


class AuthManager:
    def __init__(
        self,
        settings: AppSettings,
        http_client: HttpClient,
        credentials: Credentials | None = None,
    ):
        self._settings = settings
        self._http_client = http_client
        self._credentials = credentials if credentials is not None else Credentials()

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def build_authorization_request(self) -> AuthorizationRequest:
        return AuthorizationRequest(
            client_id=self._settings.client_id,
            redirect_uri=self._settings.redirect_uri,
            scopes=frozenset(self._settings.scopes),
            state=secrets.token_urlsafe(24),
        )

    def build_authorization_url(self, request: AuthorizationRequest | None = None) -> str:
        request = request or self.build_authorization_request()
        params = {
            "client_id": request.client_id,
            "response_type": "code",
            "redirect_uri": request.redirect_uri,
            "scope": " ".join(sorted(request.scopes)),
            "state": request.state,
            "token_access_type": request.access_type,
        }
        return f"{self._settings.auth_url}?{urlencode(params)}"

    def exchange_code_for_tokens(self, code: str) -> Credentials:
        code = (code or "").strip()
        if not code:
            raise ValueError("Authorization code is required")

        response = self._http_client.post_form(
            self._settings.token_url,
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._settings.redirect_uri,
                "client_id": self._settings.client_id,
                "client_secret": self._settings.client_secret,
            },
        )
        token_payload = self._parse_token_response(response, "Token exchange failed")

        self._credentials.access_token = str(token_payload["access_token"])
        refresh_token = token_payload.get("refresh_token")
        self._credentials.refresh_token = str(refresh_token) if refresh_token else None
        logger.info("Token exchange succeeded (refresh token: %s)", bool(refresh_token))
        return self._credentials

    def refresh_access_token(self) -> str:
        if not self._credentials.refresh_token:
            raise AuthenticationError("No refresh token available")

        response = self._http_client.post_form(
            self._settings.token_url,
            {
                "grant_type": "refresh_token",
                "refresh_token": self._credentials.refresh_token,
                "client_id": self._settings.client_id,
                "client_secret": self._settings.client_secret,
            },
        )
        token_payload = self._parse_token_response(response, "Token refresh failed")

        self._credentials.access_token = str(token_payload["access_token"])
        logger.info("Access token refreshed")
        return self._credentials.access_token

    def get_auth_state(self) -> AuthState:
        return AuthState(
            is_authenticated=self._credentials.is_authenticated,
            has_refresh_token=bool(self._credentials.refresh_token),
        )

    def sign_out(self) -> None:
        self._credentials.clear()

    @staticmethod
    def _parse_token_response(response: requests.Response, failure: str) -> dict[str, Any]:
        body = response.text or ""
        if response.status_code != 200:
            logger.warning("%s with HTTP %s", failure, response.status_code)
            raise AuthenticationError(
                f"{failure}: HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthenticationError(
                f"{failure}: response is not JSON",
                status_code=response.status_code,
                body=body,
            ) from exc

        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise AuthenticationError(
                f"{failure}: access_token missing from response",
                status_code=response.status_code,
                body=body,
            )
        return payload
