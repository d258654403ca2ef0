"""Tests for YAML + environment configuration."""

from __future__ import annotations

import pytest

from authgate.common.config import DEV_CSRF_SECRET, JobSpec, build_config, load_cfg


def test_defaults_outside_production():
    cfg = build_config({}, env={})
    assert cfg.csrf_secret == DEV_CSRF_SECRET
    assert cfg.internal_secret is None
    assert cfg.environment == "development"
    assert not cfg.is_production
    assert cfg.freshness_window_ms == 3600 * 1000
    assert cfg.accept_legacy_tokens
    assert "/api/cron/" in cfg.csrf_exempt_prefixes


def test_missing_csrf_secret_is_fatal_in_production():
    with pytest.raises(RuntimeError):
        build_config({"environment": "production"}, env={})
    with pytest.raises(RuntimeError):
        build_config({}, env={"NODE_ENV": "production"})


def test_env_overrides_file():
    raw = {"csrf_secret": "file", "internal_secret": "file-cron", "environment": "development"}
    cfg = build_config(raw, env={"CSRF_SECRET": "env", "CRON_SECRET": "env-cron", "AUTHGATE_ENV": "production"})
    assert cfg.csrf_secret == "env"
    assert cfg.internal_secret == "env-cron"
    assert cfg.is_production


def test_nextauth_secret_fallback():
    cfg = build_config({}, env={"NEXTAUTH_SECRET": "na"})
    assert cfg.csrf_secret == "na"


def test_production_without_internal_secret_still_loads():
    # the comparator reports the misconfiguration per request
    cfg = build_config({"environment": "production", "csrf_secret": "s"}, env={})
    assert cfg.internal_secret is None


def test_file_values():
    raw = {
        "csrf_secret": "s",
        "token_ttl_sec": 60,
        "clock_skew_ms": 250,
        "accept_legacy_tokens": False,
        "csrf_header": "x-token",
        "csrf_exempt_prefixes": ["/api/open/"],
        "jobs": [{"name": "prune-notes", "interval_sec": 30}, {"name": "ping"}],
    }
    cfg = build_config(raw, env={})
    assert cfg.freshness_window_ms == 60_000
    assert cfg.clock_skew_ms == 250
    assert not cfg.accept_legacy_tokens
    assert cfg.csrf_header == "x-token"
    assert cfg.csrf_exempt_prefixes == ("/api/open/",)
    assert cfg.jobs == (JobSpec("prune-notes", 30), JobSpec("ping", 60))


@pytest.mark.parametrize("raw", [{"token_ttl_sec": 0}, {"clock_skew_ms": -1}])
def test_bad_numbers(raw):
    with pytest.raises(RuntimeError):
        build_config(raw, env={})


def test_load_cfg_reads_yaml(tmp_path):
    p = tmp_path / "authgate.yaml"
    p.write_text("environment: staging\ntoken_ttl_sec: 120\n")
    raw = load_cfg(str(p))
    assert raw == {"environment": "staging", "token_ttl_sec": 120}
    assert build_config(raw, env={}).environment == "staging"


def test_load_cfg_missing_file(tmp_path):
    assert load_cfg(str(tmp_path / "nope.yaml")) == {}


def test_load_cfg_empty_file(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert load_cfg(str(p)) == {}


@pytest.mark.parametrize(
    "value, expected",
    [(False, False), (True, True), ("false", False), ("False", False), ("0", False), ("true", True), ("1", True)],
)
def test_legacy_flag_parses_quoted_values(value, expected):
    cfg = build_config({"accept_legacy_tokens": value}, env={})
    assert cfg.accept_legacy_tokens is expected


def test_legacy_flag_rejects_nonsense():
    with pytest.raises(RuntimeError):
        build_config({"accept_legacy_tokens": "maybe"}, env={})


def test_quoted_false_in_yaml_disables_legacy(tmp_path):
    p = tmp_path / "authgate.yaml"
    p.write_text('accept_legacy_tokens: "false"\n')
    assert not build_config(load_cfg(str(p)), env={}).accept_legacy_tokens
