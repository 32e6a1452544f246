from __future__ import annotations

from http.server import BaseHTTPRequestHandler, HTTPServer
import logging
import time
from typing import Callable, Protocol
from urllib.parse import parse_qs, urlparse
import webbrowser

import typer

from dropbox_team_client.errors import AuthenticationError, StateMismatchError
from dropbox_team_client.models import AuthorizationRequest

logger = logging.getLogger(__name__)


class CodeProvider(Protocol):
    def get_code(self, request: AuthorizationRequest, authorization_url: str) -> str:
        ...


def extract_code(raw_value: str, expected_state: str) -> str:
    """Accept either a bare code or the full redirect URL the browser landed on."""
    value = raw_value.strip()
    if not value:
        raise AuthenticationError("No authorization code provided")

    if "?" not in value and "code=" not in value and "error=" not in value:
        return value

    # scheme-less pastes such as localhost:8080/callback?code=... do not parse as URLs
    query = value.split("?", 1)[1] if "?" in value else value
    params = parse_qs(query)
    if "error" in params:
        description = params.get("error_description", params["error"])[0]
        raise AuthenticationError(f"Authorization denied: {description}")

    state = params.get("state", [""])[0]
    if state != expected_state:
        raise StateMismatchError("State mismatch in redirect URL")

    code = params.get("code", [""])[0].strip()
    if not code:
        raise AuthenticationError("No authorization code found in redirect URL")
    return code


class ConsoleCodeProvider:
    def __init__(
        self,
        read_line: Callable[[str], str] = input,
        open_browser: bool = True,
    ):
        self._read_line = read_line
        self._open_browser = open_browser

    def get_code(self, request: AuthorizationRequest, authorization_url: str) -> str:
        typer.echo("=== Dropbox OAuth Authorization ===")
        typer.echo(f"Authorization URL: {authorization_url}")
        if self._open_browser:
            _try_open_browser(authorization_url)

        typer.echo("\nAfter authorization, you'll be redirected to:")
        typer.echo(f"{request.redirect_uri}?code=AUTHORIZATION_CODE&state={request.state}")
        typer.echo("\nPaste the 'code' parameter (or the whole redirect URL) below.")
        raw_value = self._read_line("Enter the authorization code: ")
        return extract_code(raw_value, request.state)


class LoopbackCodeProvider:
    """Catches the redirect on the redirect URI's host and port."""

    def __init__(self, timeout_seconds: int = 120, open_browser: bool = True):
        self._timeout_seconds = timeout_seconds
        self._open_browser = open_browser

    def get_code(self, request: AuthorizationRequest, authorization_url: str) -> str:
        parsed = urlparse(request.redirect_uri)
        host = parsed.hostname or "localhost"
        port = parsed.port or 80
        callback_path = parsed.path or "/"

        captured: dict[str, str] = {}

        class _CallbackHandler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:
                url = urlparse(self.path)
                if url.path != callback_path:
                    self.send_response(404)
                    self.end_headers()
                    return

                params = parse_qs(url.query)
                for key in ("code", "state", "error", "error_description"):
                    if key in params:
                        captured[key] = params[key][0]

                self.send_response(200)
                self.send_header("Content-Type", "text/html; charset=utf-8")
                self.end_headers()
                self.wfile.write(
                    b"<html><body><h3>Authorization received.</h3>"
                    b"<p>You can close this window and return to the console.</p></body></html>"
                )

            def log_message(self, format: str, *args) -> None:
                logger.debug("callback server: " + format, *args)

        try:
            server = HTTPServer((host, port), _CallbackHandler)
        except OSError as exc:
            raise AuthenticationError(f"Cannot listen on {request.redirect_uri}: {exc}") from exc
        server.timeout = 1
        typer.echo(f"Authorization URL: {authorization_url}")
        typer.echo(f"Waiting for redirect on {request.redirect_uri} ...")
        if self._open_browser:
            _try_open_browser(authorization_url)

        deadline = time.monotonic() + self._timeout_seconds
        try:
            while "code" not in captured and "error" not in captured:
                if time.monotonic() > deadline:
                    raise AuthenticationError(
                        f"Timed out after {self._timeout_seconds}s waiting for the authorization redirect"
                    )
                server.handle_request()
        finally:
            server.server_close()

        if "error" in captured:
            description = captured.get("error_description") or captured["error"]
            raise AuthenticationError(f"Authorization denied: {description}")
        if captured.get("state") != request.state:
            raise StateMismatchError("State mismatch in authorization redirect")
        return captured["code"]


def build_code_provider(name: str, timeout_seconds: int = 120) -> CodeProvider:
    if name == "loopback":
        return LoopbackCodeProvider(timeout_seconds=timeout_seconds)
    return ConsoleCodeProvider()


def _try_open_browser(url: str) -> None:
    try:
        if webbrowser.open(url):
            typer.echo("Opened browser for authorization...")
    except webbrowser.Error as exc:
        logger.info("Could not open a browser: %s", exc)
