from __future__ import annotations

import json
import logging
from typing import Any

import requests

from dropbox_team_client.config import AppSettings
from dropbox_team_client.errors import ApiHttpError, MalformedResponseError

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(self, settings: AppSettings, session: requests.Session | None = None):
        self._settings = settings
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def post_form(self, url: str, form: dict[str, str]) -> requests.Response:
        logger.debug("POST %s (form)", url)
        try:
            response = self._session.post(
                url,
                data=form,
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise ApiHttpError(status_code=0, message=f"Request to {url} failed: {exc}") from exc
        logger.debug("POST %s -> %s", url, response.status_code)
        return response

    def post_json(
        self,
        token: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._settings.base_url}{path}"
        headers = {"Authorization": f"Bearer {token}"}

        # Dropbox reads a request without body or content type as a null argument.
        request_kwargs: dict[str, Any] = {}
        if payload is not None:
            headers["Content-Type"] = "application/json"
            request_kwargs["data"] = json.dumps(payload)

        logger.debug("POST %s", url)
        try:
            response = self._session.post(
                url,
                headers=headers,
                timeout=self._settings.timeout_seconds,
                **request_kwargs,
            )
        except requests.RequestException as exc:
            raise ApiHttpError(status_code=0, message=f"Request to {url} failed: {exc}") from exc

        if response.status_code == 200:
            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError as exc:
                raise MalformedResponseError(f"{path} returned a non-JSON body") from exc

        raise self.build_error(response)

    @staticmethod
    def build_error(response: requests.Response) -> ApiHttpError:
        body = response.text or ""
        error_summary = None
        error_details = None
        try:
            parsed = json.loads(body)
            if isinstance(parsed, dict):
                if parsed.get("error_summary"):
                    error_summary = str(parsed["error_summary"])
                error_details = parsed.get("error")
        except ValueError:
            pass

        logger.warning("HTTP %s from %s", response.status_code, response.url)
        return ApiHttpError(
            status_code=response.status_code,
            message=f"HTTP {response.status_code}: {body[:500]}",
            body=body,
            error_summary=error_summary,
            error_details=error_details,
        )
