from __future__ import annotations

import json
from typing import Any

import typer

from dropbox_team_client.errors import ApiHttpError, AuthenticationError
from dropbox_team_client.models import EventPage, MemberPage, TeamInfo


def mask_token(token: str | None) -> str:
    value = (token or "").strip()
    if len(value) > 20:
        return f"{value[:20]}..."
    if len(value) > 8:
        return f"{value[:4]}..."
    return "****"


def render_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def print_team_info(info: TeamInfo) -> None:
    typer.secho("Team Information Retrieved:", fg=typer.colors.GREEN)
    if info.display_name is not None:
        typer.echo(f"Organization Name: {info.display_name}")
    if info.team_id is not None:
        typer.echo(f"Team ID: {info.team_id}")
    if info.num_licensed_users is not None:
        typer.echo(f"Licensed Users: {info.num_licensed_users}")
    if info.num_provisioned_users is not None:
        typer.echo(f"Provisioned Users: {info.num_provisioned_users}")

    typer.echo("\nFull Team Info Response:")
    typer.echo(render_json(info.raw))


def print_member_page(page: MemberPage) -> None:
    typer.secho(f"Team Members Retrieved ({len(page.members)} members):", fg=typer.colors.GREEN)
    for index, member in enumerate(page.members, start=1):
        typer.echo(f"\nMember {index}:")
        typer.echo(f"   Name: {member.display_name}")
        typer.echo(f"   Email: {member.email}")
        typer.echo(f"   Status: {member.status}")
        typer.echo(f"   Member ID: {member.team_member_id}")
        typer.echo(f"   Joined: {member.joined_on}")
        if member.roles:
            typer.echo(f"   Roles: {', '.join(member.roles)}")

    print_pagination_hint("members", page.next_cursor)


def print_event_page(page: EventPage) -> None:
    typer.secho(f"Sign-in Events Retrieved ({len(page.events)} events):", fg=typer.colors.GREEN)
    for index, event in enumerate(page.events, start=1):
        typer.echo(f"\nEvent {index}:")
        typer.echo(f"   Timestamp: {event.timestamp}")
        typer.echo(f"   Event Type: {event.event_type}")
        if event.actor_name is not None:
            typer.echo(f"   User: {event.actor_name}")
        if event.actor_email is not None:
            typer.echo(f"   Email: {event.actor_email}")
        if event.city is not None or event.country is not None:
            location = ", ".join(part for part in (event.city, event.country) if part)
            typer.echo(f"   Location: {location}")
        if event.ip_address is not None:
            typer.echo(f"   IP: {event.ip_address}")

    print_pagination_hint("events", page.next_cursor)


def print_pagination_hint(kind: str, cursor: str | None) -> None:
    if cursor is None:
        return
    typer.secho(
        f"\nMore {kind} available. Use cursor for pagination: {cursor}",
        fg=typer.colors.YELLOW,
    )


def print_api_error(api_name: str, error: ApiHttpError) -> None:
    typer.secho(f"{api_name} API call failed:", fg=typer.colors.RED, err=True)
    typer.echo(f"Status Code: {error.status_code}", err=True)
    typer.echo(f"Response Body: {error.body or error}", err=True)
    if error.error_summary:
        typer.echo(f"Error Summary: {error.error_summary}", err=True)
    if error.error_details is not None:
        details = error.error_details
        if not isinstance(details, str):
            details = json.dumps(details, ensure_ascii=False)
        typer.echo(f"Error Details: {details}", err=True)


def print_auth_error(error: AuthenticationError) -> None:
    typer.secho(str(error), fg=typer.colors.RED, err=True)
    if error.status_code is not None:
        typer.echo(f"Status: {error.status_code}", err=True)
    if error.body:
        typer.echo(f"Response: {error.body}", err=True)
