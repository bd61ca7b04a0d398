"""Config loading for DetectSecure.

Reads `.detectsecure/config.yaml` (or `~/.detectsecure/config.yaml`).
Raises SystemExit on parse errors or a missing `version` field.
If no config file is found, returns default values; store credentials then
come from the environment only.

Config search order:
  1. `config_path` argument (explicit override, used by tests)
  2. DETECTSECURE_CONFIG environment variable (if set)
  3. `.detectsecure/config.yaml` (working directory)
  4. `~/.detectsecure/config.yaml` (home directory)

Environment variable overrides (always win over the file):
  SUPABASE_URL               — store.url
  SUPABASE_ANON_KEY          — store.anon_key (read-only access)
  SUPABASE_SERVICE_ROLE_KEY  — store.service_role_key (privileged access);
                               SUPABASE_KEY is accepted as a fallback name
  DETECTSECURE_HOST          — server.host
  PORT / DETECTSECURE_PORT   — server.port (DETECTSECURE_PORT wins when both set)
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import yaml

from detectsecure.constants import (
    DEFAULT_CORS_ORIGINS,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DETECTORS_TABLE,
    FOUND_REPORTS_TABLE,
)
from detectsecure.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_CONFIG_PATHS = [
    ".detectsecure/config.yaml",
    os.path.expanduser("~/.detectsecure/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class StoreConfig:
    """Supabase project credentials and table names.

    url:              Project URL (shared by both credential pairs)
    anon_key:         Publishable key — read-only detector lookups
    service_role_key: Service-role key — owner resolution and report inserts
    """

    url: str = ""
    anon_key: str = ""
    service_role_key: str = ""
    detectors_table: str = DETECTORS_TABLE
    reports_table: str = FOUND_REPORTS_TABLE

    @property
    def has_read_credentials(self) -> bool:
        return bool(self.url and self.anon_key)

    @property
    def has_write_credentials(self) -> bool:
        return bool(self.url and self.service_role_key)


@dataclass
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass
class CorsConfig:
    allow_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))


@dataclass
class Config:
    """Root configuration object populated from .detectsecure/config.yaml.

    All fields have safe defaults — the service starts without any config
    file and without credentials (both store capabilities disabled).
    """

    version: int = SUPPORTED_CONFIG_VERSION
    store: StoreConfig = field(default_factory=StoreConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    cors: CorsConfig = field(default_factory=CorsConfig)
    path: Optional[str] = None

    @classmethod
    def defaults(cls) -> "Config":
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are ignored.
        Empty/null credential values stay empty strings.
        """
        store_raw = raw.get("store") or {}
        store = StoreConfig(
            url=str(store_raw.get("url") or ""),
            anon_key=str(store_raw.get("anon_key") or ""),
            service_role_key=str(store_raw.get("service_role_key") or ""),
            detectors_table=store_raw.get("detectors_table", DETECTORS_TABLE),
            reports_table=store_raw.get("reports_table", FOUND_REPORTS_TABLE),
        )

        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", DEFAULT_HOST),
            port=server_raw.get("port", DEFAULT_PORT),
        )

        cors_raw = raw.get("cors") or {}
        cors = CorsConfig(
            allow_origins=list(cors_raw.get("allow_origins", DEFAULT_CORS_ORIGINS)),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            store=store,
            server=server,
            cors=cors,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate DetectSecure configuration.

    If no file is found at any search path, returns default Config (not an error).
    If a file is found but invalid, writes the error to stderr and raises SystemExit(1).
    Environment overrides are applied in both cases.

    Raises:
        SystemExit(1): On YAML parse error, non-mapping document, missing or
                       unsupported ``version``, or an invalid port override.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("DETECTSECURE_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        msg = (
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "DetectSecure refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    except OSError as exc:
        msg = f"CONFIG ERROR: Could not read {found_path}: {exc}"
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if not isinstance(raw, dict):
        if raw is None:
            msg = (
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        else:
            msg = (
                f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
                "The config file must be a YAML dictionary at the top level."
            )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    version = raw.get("version")
    if version is None:
        msg = (
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if version not in SUPPORTED_VERSIONS:
        msg = (
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        has_read_credentials=config.store.has_read_credentials,
        has_write_credentials=config.store.has_write_credentials,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Unset variables leave the file value alone; a variable set to an empty
    string clears it.

    Raises:
        SystemExit(1): If PORT / DETECTSECURE_PORT is set but not an integer.
    """
    env_url = os.environ.get("SUPABASE_URL")
    if env_url is not None:
        config.store.url = env_url.strip()

    env_anon = os.environ.get("SUPABASE_ANON_KEY")
    if env_anon is not None:
        config.store.anon_key = env_anon.strip()

    env_service = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    if env_service is None:
        env_service = os.environ.get("SUPABASE_KEY")
    if env_service is not None:
        config.store.service_role_key = env_service.strip()

    env_host = os.environ.get("DETECTSECURE_HOST")
    if env_host:
        config.server.host = env_host

    for var in ("PORT", "DETECTSECURE_PORT"):
        env_port = os.environ.get(var)
        if env_port is None:
            continue
        try:
            config.server.port = int(env_port)
        except ValueError:
            msg = (
                f"CONFIG ERROR: {var} environment variable is not a valid "
                f"integer: '{env_port}'"
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)
