from typing import Callable, Optional, TypeVar

import typer
from typing_extensions import Annotated

from dropbox_team_client.code_providers import build_code_provider
from dropbox_team_client.config import CODE_PROVIDERS, AppSettings, ConfigurationError
from dropbox_team_client.console import (
    mask_token,
    print_api_error,
    print_auth_error,
    print_event_page,
    print_member_page,
    print_team_info,
)
from dropbox_team_client.errors import ApiHttpError, AuthenticationError, MalformedResponseError
from dropbox_team_client.logging_utils import configure_logging
from dropbox_team_client.services import TokenAuthorizedClient, build_client

T = TypeVar("T")

_log_level_override: Optional[str] = None

app = typer.Typer(
    name="dropbox-team",
    help="Dropbox Business team API console client.",
    no_args_is_help=True,
)

AccessTokenOption = Annotated[
    str,
    typer.Option(
        envvar="DROPBOX_ACCESS_TOKEN",
        help="Existing access token to call the API with.",
        show_default=False,
    ),
]
CursorOption = Annotated[
    Optional[str],
    typer.Option(help="Pagination cursor from a previous listing."),
]


@app.callback()
def main_callback(
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR (default from DROPBOX_LOG_LEVEL)."),
    ] = None,
):
    """Run the OAuth demo or issue single team API calls."""
    global _log_level_override
    _log_level_override = log_level
    configure_logging(log_level or "WARNING")


def _load_settings(require_client_credentials: bool = True) -> AppSettings:
    try:
        settings = AppSettings.from_env(require_client_credentials)
    except ConfigurationError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        typer.echo(
            "Set DROPBOX_CLIENT_ID and DROPBOX_CLIENT_SECRET from an app created at "
            "https://www.dropbox.com/developers/apps (Business API scopes required).",
            err=True,
        )
        raise typer.Exit(code=2)

    if _log_level_override is None:
        configure_logging(settings.log_level)
    return settings


def _run_call(api_name: str, call: Callable[[], T], render: Callable[[T], None]) -> bool:
    typer.echo(f"\n=== {api_name} ===")
    try:
        result = call()
    except ApiHttpError as exc:
        print_api_error(api_name, exc)
        return False
    except MalformedResponseError as exc:
        typer.secho(f"{api_name} returned an unexpected response: {exc}", fg=typer.colors.RED, err=True)
        return False
    except AuthenticationError as exc:
        print_auth_error(exc)
        return False

    render(result)
    return True


@app.command("demo")
def demo(
    code_provider: Annotated[
        Optional[str],
        typer.Option(help=f"How to capture the authorization code: {', '.join(CODE_PROVIDERS)}."),
    ] = None,
):
    """Authorize, exchange the code, then fetch team info, members and sign-in events."""
    typer.echo("Dropbox Business API Client")
    typer.echo("=" * 50)

    settings = _load_settings()
    provider_name = code_provider or settings.code_provider
    if provider_name not in CODE_PROVIDERS:
        typer.secho(f"Unknown code provider: {provider_name}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    client = build_client(settings)
    request = client.build_authorization_request()
    authorization_url = client.build_authorization_url(request)
    provider = build_code_provider(provider_name)

    try:
        code = provider.get_code(request, authorization_url)
        client.exchange_code_for_tokens(code)
    except AuthenticationError as exc:
        print_auth_error(exc)
        typer.secho("Failed to obtain access token!", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except ApiHttpError as exc:
        typer.secho(f"Token request failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho("Authentication successful!", fg=typer.colors.GREEN)
    typer.echo(f"Access Token: {mask_token(client.credentials.access_token)}")

    typer.echo("\nStarting API demonstrations...")
    results = {
        "Team information retrieved": _run_call("Get Team Info", client.get_team_info, print_team_info),
        "Team members list obtained": _run_call("Get Team Members", client.get_team_members, print_member_page),
        "Sign-in events accessed": _run_call("Get Sign-in Events", client.get_sign_in_events, print_event_page),
    }

    typer.echo("\nSummary:")
    typer.echo("- [ok] OAuth 2.0 authentication completed")
    for label, succeeded in results.items():
        typer.echo(f"- [{'ok' if succeeded else 'failed'}] {label}")

    if not all(results.values()):
        raise typer.Exit(code=1)


@app.command("auth-url")
def auth_url():
    """Print a fresh authorization URL and its state value."""
    settings = _load_settings()
    client = build_client(settings)
    request = client.build_authorization_request()
    typer.echo(client.build_authorization_url(request))
    typer.echo(f"state={request.state}", err=True)


def _client_with_token(access_token: str) -> TokenAuthorizedClient:
    if not access_token.strip():
        typer.secho("An access token is required (--access-token or DROPBOX_ACCESS_TOKEN).", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    settings = _load_settings(require_client_credentials=False)
    return build_client(settings, access_token=access_token.strip())


@app.command("team-info")
def team_info(access_token: AccessTokenOption = ""):
    """Fetch organization name and license counts."""
    client = _client_with_token(access_token)
    if not _run_call("Get Team Info", client.get_team_info, print_team_info):
        raise typer.Exit(code=1)


@app.command("members")
def members(access_token: AccessTokenOption = "", cursor: CursorOption = None):
    """List one page of team members."""
    client = _client_with_token(access_token)
    if not _run_call("Get Team Members", lambda: client.get_team_members(cursor), print_member_page):
        raise typer.Exit(code=1)


@app.command("events")
def events(access_token: AccessTokenOption = "", cursor: CursorOption = None):
    """List one page of sign-in events."""
    client = _client_with_token(access_token)
    if not _run_call("Get Sign-in Events", lambda: client.get_sign_in_events(cursor), print_event_page):
        raise typer.Exit(code=1)


def cli_entry_point():
    app()


if __name__ == "__main__":
    cli_entry_point()
