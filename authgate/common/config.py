# authgate/common/config.py
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple
import yaml

DEFAULT_CONFIG_PATH = "config/authgate.yaml"
DEV_CSRF_SECRET = "dev-only-csrf-secret-not-for-production"

DEFAULT_EXEMPT_PREFIXES = (
    "/api/auth/",
    "/api/csrf",
    "/api/health",
    "/api/cron/",
    "/api/internal/",
    "/api/webhooks/",
)

@dataclass(frozen=True)
class JobSpec:
    name: str
    interval_sec: int

@dataclass(frozen=True)
class GuardConfig:
    """
    Immutable process-wide settings. Built once at start-up and handed to
    every issuer/validator/comparator; nothing else reads the environment.
    """
    csrf_secret: str
    internal_secret: Optional[str] = None
    environment: str = "development"

    token_ttl_sec: int = 3600
    clock_skew_ms: int = 0
    accept_legacy_tokens: bool = True

    csrf_header: str = "x-csrf-token"
    csrf_cookie: str = "csrf-token"
    csrf_form_field: str = "csrf_token"
    csrf_exempt_prefixes: Tuple[str, ...] = DEFAULT_EXEMPT_PREFIXES

    log_dir: str = "./logs"
    listen_port: int = 8080
    base_url: str = "http://127.0.0.1:8080"

    rpc_timeout_sec: int = 10
    rpc_max_attempts: int = 3
    rpc_base_backoff_ms: int = 200
    rpc_max_backoff_ms: int = 2000

    jobs: Tuple[JobSpec, ...] = field(default_factory=tuple)

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def freshness_window_ms(self) -> int:
        return self.token_ttl_sec * 1000

def load_cfg(path: Optional[str] = None) -> Dict[str, Any]:
    path = path or os.environ.get("AUTHGATE_CONFIG", DEFAULT_CONFIG_PATH)
    if not os.path.exists(path):
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}

def _env_name(raw: Mapping[str, Any], env: Mapping[str, str]) -> str:
    return env.get("AUTHGATE_ENV") or env.get("NODE_ENV") or str(raw.get("environment", "development"))

def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off"):
        return False
    raise RuntimeError(f"{key} must be a boolean, got {value!r}")

def build_config(raw: Mapping[str, Any], env: Optional[Mapping[str, str]] = None) -> GuardConfig:
    """
    Merge a loaded YAML mapping with environment overrides.

    CSRF_SECRET (or NEXTAUTH_SECRET) and CRON_SECRET win over the file.
    A missing CSRF secret is fatal in production and falls back to a fixed
    development secret elsewhere.
    """
    env = os.environ if env is None else env
    environment = _env_name(raw, env)
    is_prod = environment.strip().lower() == "production"

    csrf_secret = env.get("CSRF_SECRET") or env.get("NEXTAUTH_SECRET") or raw.get("csrf_secret") or ""
    if not csrf_secret:
        if is_prod:
            raise RuntimeError(
                "CSRF_SECRET or NEXTAUTH_SECRET must be set in production. "
                "Generate a random value: python -c \"import secrets; print(secrets.token_hex(32))\""
            )
        csrf_secret = DEV_CSRF_SECRET

    internal_secret = env.get("CRON_SECRET") or raw.get("internal_secret") or None

    jobs = tuple(
        JobSpec(name=str(j["name"]), interval_sec=int(j.get("interval_sec", 60)))
        for j in raw.get("jobs") or []
    )

    kw: Dict[str, Any] = {}
    for key in ("token_ttl_sec", "clock_skew_ms", "listen_port",
                "rpc_timeout_sec", "rpc_max_attempts", "rpc_base_backoff_ms", "rpc_max_backoff_ms"):
        if key in raw:
            kw[key] = int(raw[key])
    for key in ("csrf_header", "csrf_cookie", "csrf_form_field", "log_dir", "base_url"):
        if key in raw:
            kw[key] = str(raw[key])
    if "accept_legacy_tokens" in raw:
        kw["accept_legacy_tokens"] = _as_bool("accept_legacy_tokens", raw["accept_legacy_tokens"])
    if "csrf_exempt_prefixes" in raw:
        kw["csrf_exempt_prefixes"] = tuple(raw["csrf_exempt_prefixes"])

    if kw.get("token_ttl_sec", 1) <= 0:
        raise RuntimeError("token_ttl_sec must be positive")
    if kw.get("clock_skew_ms", 0) < 0:
        raise RuntimeError("clock_skew_ms must not be negative")

    return GuardConfig(
        csrf_secret=csrf_secret,
        internal_secret=internal_secret,
        environment=environment,
        jobs=jobs,
        **kw,
    )
