from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dropbox_team_client.errors import MalformedResponseError


@dataclass
class Credentials:
    access_token: str | None = None
    refresh_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None


@dataclass(frozen=True)
class AuthorizationRequest:
    client_id: str
    redirect_uri: str
    scopes: frozenset[str]
    state: str
    access_type: str = "offline"


@dataclass(frozen=True)
class AuthState:
    is_authenticated: bool
    has_refresh_token: bool = False


@dataclass(frozen=True)
class TeamInfo:
    display_name: str | None = None
    team_id: str | None = None
    num_licensed_users: int | None = None
    num_provisioned_users: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "TeamInfo":
        name = payload.get("name")
        display_name = None
        if isinstance(name, dict) and name.get("display_name") is not None:
            display_name = str(name["display_name"])
        elif isinstance(name, str):
            display_name = name

        return TeamInfo(
            display_name=display_name,
            team_id=_optional_str(payload, "team_id"),
            num_licensed_users=_optional_int(payload, "num_licensed_users"),
            num_provisioned_users=_optional_int(payload, "num_provisioned_users"),
            raw=payload,
        )


@dataclass(frozen=True)
class TeamMember:
    display_name: str
    email: str
    status: str
    team_member_id: str
    joined_on: str
    roles: tuple[str, ...] = ()

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "TeamMember":
        profile = _required(payload, "profile", "member")
        name = _required(profile, "name", "member profile")
        status = _required(profile, "status", "member profile")

        roles = payload.get("roles") or []
        role_names = tuple(
            str(role["name"]) for role in roles if isinstance(role, dict) and role.get("name")
        )

        return TeamMember(
            display_name=str(_required(name, "display_name", "member name")),
            email=str(_required(profile, "email", "member profile")),
            status=str(_required(status, ".tag", "member status")),
            team_member_id=str(_required(profile, "team_member_id", "member profile")),
            joined_on=str(_required(profile, "joined_on", "member profile")),
            roles=role_names,
        )


@dataclass(frozen=True)
class SignInEvent:
    timestamp: str
    event_type: str
    actor_name: str | None = None
    actor_email: str | None = None
    city: str | None = None
    country: str | None = None
    ip_address: str | None = None

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "SignInEvent":
        event_type = _required(payload, "event_type", "event")

        actor_name = actor_email = None
        actor = payload.get("actor")
        if isinstance(actor, dict) and isinstance(actor.get("user"), dict):
            user = actor["user"]
            actor_name = _optional_str(user, "display_name")
            actor_email = _optional_str(user, "email")

        city = country = ip_address = None
        origin = payload.get("origin")
        if isinstance(origin, dict):
            geo = origin.get("geo_location")
            if isinstance(geo, dict):
                city = _optional_str(geo, "city")
                country = _optional_str(geo, "country")
            host = origin.get("host")
            if isinstance(host, dict):
                ip_address = _optional_str(host, "host")

        return SignInEvent(
            timestamp=str(_required(payload, "timestamp", "event")),
            event_type=str(_required(event_type, ".tag", "event type")),
            actor_name=actor_name,
            actor_email=actor_email,
            city=city,
            country=country,
            ip_address=ip_address,
        )


@dataclass(frozen=True)
class MemberPage:
    members: tuple[TeamMember, ...]
    has_more: bool
    cursor: str | None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def next_cursor(self) -> str | None:
        return self.cursor if self.has_more else None

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "MemberPage":
        members = _required(payload, "members", "member list")
        return MemberPage(
            members=tuple(TeamMember.from_payload(member) for member in members),
            has_more=bool(payload.get("has_more", False)),
            cursor=_optional_str(payload, "cursor"),
            raw=payload,
        )


@dataclass(frozen=True)
class EventPage:
    events: tuple[SignInEvent, ...]
    has_more: bool
    cursor: str | None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def next_cursor(self) -> str | None:
        return self.cursor if self.has_more else None

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "EventPage":
        events = _required(payload, "events", "event log")
        return EventPage(
            events=tuple(SignInEvent.from_payload(event) for event in events),
            has_more=bool(payload.get("has_more", False)),
            cursor=_optional_str(payload, "cursor"),
            raw=payload,
        )


def _required(node: Any, key: str, context: str) -> Any:
    if not isinstance(node, dict) or node.get(key) is None:
        raise MalformedResponseError(f"Missing '{key}' in {context} response")
    return node[key]


def _optional_str(node: dict[str, Any], key: str) -> str | None:
    value = node.get(key)
    if value is None:
        return None
    return str(value)


def _optional_int(node: dict[str, Any], key: str) -> int | None:
    value = node.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
