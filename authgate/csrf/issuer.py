# authgate/csrf/issuer.py
from __future__ import annotations
from typing import Callable
from authgate.common.config import GuardConfig
from authgate.common.security import sign, new_nonce
from authgate.common.util import now_ms

class TokenIssuer:
    """
    Creates anti-forgery tokens of the form ``{ts_ms}.{nonce}.{sig}``.
    """
    def __init__(self, cfg: GuardConfig, clock: Callable[[], int] = now_ms):
        self.secret = cfg.csrf_secret
        self.clock = clock

    def issue(self) -> str:
        ts = str(self.clock())
        nonce = new_nonce()
        sig = sign(f"{ts}.{nonce}", self.secret)
        return f"{ts}.{nonce}.{sig}"
