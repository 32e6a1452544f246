from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path

DEFAULT_AUTH_URL = "https://www.dropbox.com/oauth2/authorize"
DEFAULT_TOKEN_URL = "https://api.dropboxapi.com/oauth2/token"
DEFAULT_BASE_URL = "https://api.dropboxapi.com/2"
DEFAULT_REDIRECT_URI = "http://localhost:8080/callback"
DEFAULT_SCOPES = ("team_info.read", "members.read", "events.read", "team_data.member")

PLACEHOLDER_VALUES = {"YOUR_CLIENT_ID_HERE", "YOUR_CLIENT_SECRET_HERE"}
CODE_PROVIDERS = ("console", "loopback")

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class AppSettings:
    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: tuple[str, ...]
    auth_url: str = DEFAULT_AUTH_URL
    token_url: str = DEFAULT_TOKEN_URL
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: int = 30
    member_page_size: int = 100
    event_page_size: int = 10
    auto_refresh: bool = False
    code_provider: str = "console"
    log_level: str = "WARNING"

    @staticmethod
    def from_env(require_client_credentials: bool = True) -> "AppSettings":
        _load_dotenv_if_present()

        raw_scopes = os.getenv("DROPBOX_SCOPES", "").replace(",", " ").split()
        scopes = tuple(s.strip() for s in raw_scopes if s.strip()) or DEFAULT_SCOPES

        settings = AppSettings(
            client_id=os.getenv("DROPBOX_CLIENT_ID", "").strip(),
            client_secret=os.getenv("DROPBOX_CLIENT_SECRET", "").strip(),
            redirect_uri=os.getenv("DROPBOX_REDIRECT_URI", DEFAULT_REDIRECT_URI).strip(),
            scopes=scopes,
            auth_url=os.getenv("DROPBOX_AUTH_URL", DEFAULT_AUTH_URL).strip(),
            token_url=os.getenv("DROPBOX_TOKEN_URL", DEFAULT_TOKEN_URL).strip(),
            base_url=os.getenv("DROPBOX_BASE_URL", DEFAULT_BASE_URL).strip().rstrip("/"),
            timeout_seconds=_int_env("DROPBOX_TIMEOUT_SECONDS", 30),
            member_page_size=_int_env("DROPBOX_MEMBER_PAGE_SIZE", 100),
            event_page_size=_int_env("DROPBOX_EVENT_PAGE_SIZE", 10),
            auto_refresh=_bool_env("DROPBOX_AUTO_REFRESH", False),
            code_provider=os.getenv("DROPBOX_CODE_PROVIDER", "console").strip().lower(),
            log_level=os.getenv("DROPBOX_LOG_LEVEL", "WARNING").strip().upper(),
        )
        settings.validate(require_client_credentials)
        return settings

    def validate(self, require_client_credentials: bool = True) -> None:
        missing = []
        if require_client_credentials:
            if not self.client_id or self.client_id in PLACEHOLDER_VALUES:
                missing.append("DROPBOX_CLIENT_ID")
            if not self.client_secret or self.client_secret in PLACEHOLDER_VALUES:
                missing.append("DROPBOX_CLIENT_SECRET")
        if not self.redirect_uri:
            missing.append("DROPBOX_REDIRECT_URI")

        if missing:
            raise ConfigurationError(
                "Missing required settings: " + ", ".join(missing)
            )

        url_fields = {
            "DROPBOX_AUTH_URL": self.auth_url,
            "DROPBOX_TOKEN_URL": self.token_url,
            "DROPBOX_BASE_URL": self.base_url,
            "DROPBOX_REDIRECT_URI": self.redirect_uri,
        }
        invalid_urls = [
            name for name, value in url_fields.items()
            if not value.startswith(("http://", "https://"))
        ]
        if invalid_urls:
            raise ConfigurationError(
                "URLs must start with http:// or https://: " + ", ".join(invalid_urls)
            )

        if self.timeout_seconds <= 0:
            raise ConfigurationError("DROPBOX_TIMEOUT_SECONDS must be greater than 0")

        if self.member_page_size <= 0 or self.event_page_size <= 0:
            raise ConfigurationError(
                "DROPBOX_MEMBER_PAGE_SIZE and DROPBOX_EVENT_PAGE_SIZE must be greater than 0"
            )

        if self.code_provider not in CODE_PROVIDERS:
            raise ConfigurationError(
                "DROPBOX_CODE_PROVIDER must be one of: " + ", ".join(CODE_PROVIDERS)
            )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _load_dotenv_if_present(file_name: str = ".env") -> None:
    explicit = os.getenv("DROPBOX_ENV_FILE", "").strip()
    candidates = [Path(explicit).expanduser()] if explicit else []
    candidates += [Path.cwd() / file_name, Path(__file__).resolve().parent.parent / file_name]

    loaded: set[Path] = set()
    for path in candidates:
        if not path.is_file() or path.resolve() in loaded:
            continue
        loaded.add(path.resolve())
        for key, value in _read_env_file(path).items():
            os.environ.setdefault(key, value)


def _read_env_file(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return values

    for raw_line in lines:
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, value = (part.strip() for part in line.split("=", 1))
        if key:
            values[key] = value.strip('"').strip("'")
    return values
