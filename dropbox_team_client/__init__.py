from dropbox_team_client.config import AppSettings, ConfigurationError
from dropbox_team_client.errors import (
    ApiHttpError,
    AuthenticationError,
    MalformedResponseError,
    NotAuthenticatedError,
    StateMismatchError,
)
from dropbox_team_client.services import TokenAuthorizedClient, build_client

__all__ = [
    "AppSettings",
    "ConfigurationError",
    "ApiHttpError",
    "AuthenticationError",
    "MalformedResponseError",
    "NotAuthenticatedError",
    "StateMismatchError",
    "TokenAuthorizedClient",
    "build_client",
]
