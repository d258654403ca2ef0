"""Shared fixtures for authgate tests."""

from __future__ import annotations

import logging

import pytest

from authgate.common.config import GuardConfig

SECRET = "test-secret-do-not-use-in-production"
INTERNAL = "my-super-secret-cron-key"


@pytest.fixture
def cfg() -> GuardConfig:
    return GuardConfig(csrf_secret=SECRET, internal_secret=INTERNAL, environment="test")


@pytest.fixture
def prod_cfg() -> GuardConfig:
    return GuardConfig(csrf_secret=SECRET, internal_secret=INTERNAL, environment="production")


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("authgate-test")
