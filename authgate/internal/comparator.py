# authgate/internal/comparator.py
from __future__ import annotations
from typing import Optional
from authgate.common.config import GuardConfig
from authgate.common.models import Decision
from authgate.common.security import constant_time_equal, fixed_digest

def verify_bearer(presented_header: Optional[str], expected_secret: Optional[str], environment: str) -> Decision:
    """
    Check an ``Authorization`` header against ``Bearer <expected_secret>``.

    Both sides are hashed to 32-byte digests before the constant-time
    compare, so a length difference or a shared prefix does not change the
    work done. Any encoding failure is reported as plain ``unauthorized``.
    """
    if not expected_secret:
        if environment.strip().lower() == "production":
            return Decision.reject("server_misconfigured")
        return Decision.accept("dev_bypass")

    if not presented_header:
        return Decision.reject("missing_credential")

    try:
        got = fixed_digest(presented_header)
        want = fixed_digest(f"Bearer {expected_secret}")
    except (UnicodeError, TypeError, AttributeError):
        return Decision.reject("unauthorized")

    if not constant_time_equal(got, want):
        return Decision.reject("unauthorized")
    return Decision.accept()

class SecretComparator:
    def __init__(self, cfg: GuardConfig):
        self.secret = cfg.internal_secret
        self.environment = cfg.environment

    def verify(self, presented_header: Optional[str]) -> Decision:
        return verify_bearer(presented_header, self.secret, self.environment)
