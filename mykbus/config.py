"""
Service configuration from the environment (and an optional `.env` file).
"""

from pathlib import Path
import os
import json
import dataclasses

from dotenv import load_dotenv

from mykbus.const import TIMETABLES_URL, USER_AGENT

ENV_PATH = Path(".env")

DEFAULT_ALLOWED_ORIGINS = ["https://mykonosbusmap.com"]
PROVIDERS = ("playwright", "requests")


class ConfigError(ValueError):
    """
    An environment variable has an unusable value.
    """


@dataclasses.dataclass(frozen=True)
class Config:  # pylint: disable=too-many-instance-attributes
    """
    Service Configuration.
    """

    port: int = 3000
    refresh_secret: str | None = None
    cache_ttl: float = 3600.0
    timetables_url: str = TIMETABLES_URL
    allowed_origins: list[str] = dataclasses.field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS)
    )
    html_provider: str = "playwright"
    render_timeout: float = 60.0
    settle_delay: float = 20.0
    user_agent: str = USER_AGENT

    @property
    def pass_timeout(self) -> float:
        """
        Budget for a whole pass: page load, settle delay, and some slack for
        browser start-up and parsing.
        """

        return self.render_timeout + self.settle_delay + 15.0


def parse_origins(raw: str) -> list[str]:
    """
    Origins from a JSON array or a comma-separated string.
    """

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = None

    if isinstance(parsed, list):
        origins = [o for o in parsed if isinstance(o, str)]
    elif isinstance(parsed, str):
        origins = [parsed]
    else:
        origins = raw.split(",")

    return [o.strip().rstrip("/") for o in origins if o.strip()]


def _number(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default

    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None

    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def load_config(env_path: Path = ENV_PATH) -> Config:
    """
    Build the Config from environment variables.
    """

    # variables already set in the environment win over the file
    load_dotenv(env_path, override=False)
    defaults = Config()

    port = _number("PORT", float(defaults.port))
    if not port.is_integer() or not 0 < port < 65536:
        raise ConfigError(f"PORT must be a TCP port, got {port}")

    provider = (os.getenv("HTML_PROVIDER") or defaults.html_provider).strip().lower()
    if provider not in PROVIDERS:
        raise ConfigError(f"HTML_PROVIDER must be one of {PROVIDERS}, got {provider!r}")

    origins = parse_origins(os.getenv("ALLOWED_ORIGINS", ""))

    return Config(
        port=int(port),
        refresh_secret=os.getenv("REFRESH_SECRET") or None,
        cache_ttl=_number("CACHE_TTL_SECONDS", defaults.cache_ttl),
        timetables_url=os.getenv("TIMETABLES_URL") or defaults.timetables_url,
        allowed_origins=origins or defaults.allowed_origins,
        html_provider=provider,
        render_timeout=_number("RENDER_TIMEOUT_SECONDS", defaults.render_timeout),
        settle_delay=_number("SETTLE_DELAY_SECONDS", defaults.settle_delay),
        user_agent=os.getenv("USER_AGENT") or defaults.user_agent,
    )
