import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import yaml

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "development"
DEFAULT_TIMEOUT = 30
DEFAULT_PAGE_SIZE = 50
DEFAULT_AUTH_SCHEME = "Token"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

CONFIG_FILE_NAME = "netbox_config.yaml"


def _config_search_paths() -> List[Path]:
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / ".netbox-cli" / CONFIG_FILE_NAME,
    ]


def _normalize_netbox_url(url: str) -> str:
    """Normalize a Netbox root URL and ensure it has a host."""
    u = url.strip().rstrip("/")
    # https:///host -> https://host
    u = re.sub(r"(https?):///+", r"\1://", u)
    parsed = urlparse(u)
    if not parsed.netloc:
        raise RuntimeError(
            f"Netbox URL has no host: {url!r}. "
            "Use e.g. https://netbox.example.com (no extra slashes)."
        )
    return u


def _parse_bool(name: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "no", "n", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}={raw!r} (expected true/false).")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return _parse_bool(name, raw)


def _positive_int(name: str, raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be > 0, got {value}")
    return value


def _log_level(name: str, raw: Any) -> str:
    level = raw.strip().upper() if isinstance(raw, str) else ""
    if level not in LOG_LEVELS:
        raise RuntimeError(f"{name} must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


@dataclass
class Settings:
    environment: str
    netbox_url: str
    netbox_api_token: str
    netbox_timeout: int = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    auth_scheme: str = DEFAULT_AUTH_SCHEME
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: Optional[Path] = None


def _read_secret_file(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    p = Path(path).expanduser()
    if not p.is_file():
        logger.warning("Secret file %s does not exist", p)
        return None
    return p.read_text(encoding="utf-8").strip()


def _token_from(section: Dict[str, Any]) -> Optional[str]:
    token = section.get("api_token")
    if isinstance(token, str) and token.strip():
        return token.strip()
    token_file = section.get("api_token_file")
    if isinstance(token_file, str) and token_file.strip():
        return _read_secret_file(token_file.strip())
    return None


def _load_settings_from_yaml(path: Path, environment: str) -> Settings:
    """Load settings for one environment from a YAML config file."""
    if not path.is_file():
        raise RuntimeError(f"Config file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise RuntimeError(f"Failed to read YAML config: {path}") from exc

    if not isinstance(raw, dict):
        raise RuntimeError("YAML config root must be a mapping/object")

    netbox = raw.get("netbox") or {}
    if not isinstance(netbox, dict):
        raise RuntimeError("netbox must be a mapping/object")

    environments = netbox.get("environments") or {}
    if not isinstance(environments, dict) or not environments:
        raise RuntimeError("netbox.environments must be a non-empty mapping")

    env_cfg = environments.get(environment)
    if env_cfg is None:
        known = ", ".join(sorted(str(k) for k in environments))
        raise RuntimeError(f"Unrecognized environment: {environment!r} (configured: {known})")
    if isinstance(env_cfg, str):
        env_cfg = {"url": env_cfg}
    if not isinstance(env_cfg, dict):
        raise RuntimeError(f"netbox.environments.{environment} must be a mapping or a URL")

    netbox_url = env_cfg.get("url")
    if not isinstance(netbox_url, str) or not netbox_url.strip():
        raise RuntimeError(f"netbox.environments.{environment}.url is required")
    netbox_url = _normalize_netbox_url(netbox_url)

    # Per-environment token wins over the shared one.
    nb_token = _token_from(env_cfg) or _token_from(netbox)
    if not nb_token:
        raise RuntimeError("netbox.api_token (or netbox.api_token_file) is required")

    verify_ssl = env_cfg.get("verify_ssl", netbox.get("verify_ssl", True))
    if not isinstance(verify_ssl, bool):
        raise RuntimeError("netbox.verify_ssl must be boolean")

    auth_scheme = netbox.get("auth_scheme", DEFAULT_AUTH_SCHEME)
    if not isinstance(auth_scheme, str) or not auth_scheme.strip():
        raise RuntimeError("netbox.auth_scheme must be a non-empty string")

    netbox_timeout = _positive_int("netbox.timeout", netbox.get("timeout", DEFAULT_TIMEOUT))
    page_size = _positive_int("netbox.page_size", netbox.get("page_size", DEFAULT_PAGE_SIZE))

    runtime = raw.get("runtime") or {}
    if not isinstance(runtime, dict):
        raise RuntimeError("runtime must be a mapping/object")

    log_level = _log_level("runtime.log_level", runtime.get("log_level", DEFAULT_LOG_LEVEL))

    log_dir = runtime.get("log_dir")
    if log_dir is not None and not isinstance(log_dir, str):
        raise RuntimeError("runtime.log_dir must be a path string")

    return Settings(
        environment=environment,
        netbox_url=netbox_url,
        netbox_api_token=nb_token,
        netbox_timeout=netbox_timeout,
        verify_ssl=verify_ssl,
        auth_scheme=auth_scheme.strip(),
        page_size=page_size,
        log_level=log_level,
        log_dir=Path(log_dir).expanduser() if log_dir else None,
    )


def _load_settings_from_env(environment: str) -> Settings:
    netbox_url = os.getenv("NETBOX_URL")
    if not netbox_url:
        raise RuntimeError(
            f"No {CONFIG_FILE_NAME} found and NETBOX_URL not set. "
            "Pass --config or set NETBOX_URL=https://netbox.example.com"
        )
    netbox_url = _normalize_netbox_url(netbox_url)

    # Prioritize direct env var over file-based token
    nb_token = os.getenv("NETBOX_API_TOKEN")
    if not nb_token:
        nb_token = _read_secret_file(os.getenv("NETBOX_API_TOKEN_FILE"))
    if not nb_token:
        raise RuntimeError(
            "Netbox API token not configured. Set NETBOX_API_TOKEN or NETBOX_API_TOKEN_FILE."
        )

    log_dir = os.getenv("LOG_DIR")

    return Settings(
        environment=environment,
        netbox_url=netbox_url,
        netbox_api_token=nb_token.strip(),
        netbox_timeout=_positive_int("NETBOX_TIMEOUT", os.getenv("NETBOX_TIMEOUT", DEFAULT_TIMEOUT)),
        verify_ssl=_env_bool("NETBOX_VERIFY_SSL", default=True),
        auth_scheme=os.getenv("NETBOX_AUTH_SCHEME", DEFAULT_AUTH_SCHEME).strip() or DEFAULT_AUTH_SCHEME,
        page_size=_positive_int("NETBOX_PAGE_SIZE", os.getenv("NETBOX_PAGE_SIZE", DEFAULT_PAGE_SIZE)),
        log_level=_log_level("LOG_LEVEL", os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
    )


def find_config_file(explicit: Optional[str] = None) -> Optional[Path]:
    """Return the config file to use, or None to fall back to environment variables."""
    if explicit:
        return Path(explicit).expanduser()

    from_env = os.getenv("NETBOX_CLI_CONFIG")
    if from_env:
        return Path(from_env).expanduser()

    for candidate in _config_search_paths():
        if candidate.is_file():
            return candidate
    return None


def load_settings(environment: str = DEFAULT_ENVIRONMENT, config_file: Optional[str] = None) -> Settings:
    """Load settings from a YAML config file, or from environment variables when there is none."""
    path = find_config_file(config_file)
    if path is not None:
        logger.debug("Loading settings for %s from %s", environment, path)
        return _load_settings_from_yaml(path, environment)

    logger.debug("No config file found, loading settings from environment")
    return _load_settings_from_env(environment)
