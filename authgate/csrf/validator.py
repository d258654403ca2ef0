# authgate/csrf/validator.py
from __future__ import annotations
from typing import Optional
from authgate.common.config import GuardConfig
from authgate.common.models import Decision, CurrentToken, LegacyToken, ParsedToken
from authgate.common.security import sign, constant_time_equal, is_hex32, is_digits
from authgate.common.util import now_ms

# 16 digits of milliseconds covers every date until year 318857
MAX_TS_DIGITS = 16
MAX_TOKEN_LEN = MAX_TS_DIGITS + 1 + 32 + 1 + 32

def parse_token(token: str, accept_legacy: bool = True) -> Optional[ParsedToken]:
    """
    Strict syntactic parse. Returns None for anything that is not a
    well-formed current (ts.nonce.sig) or legacy (ts.sig) token.
    """
    if not token or len(token) > MAX_TOKEN_LEN:
        return None
    parts = token.split(".")
    if len(parts) not in (2, 3) or any(p == "" for p in parts):
        return None

    if len(parts) == 3:
        ts, nonce, sig = parts
        if not is_hex32(nonce):
            return None
        parsed: ParsedToken = CurrentToken(ts=ts, nonce=nonce, sig=sig)
    else:
        if not accept_legacy:
            return None
        ts, sig = parts
        parsed = LegacyToken(ts=ts, sig=sig)

    if len(ts) > MAX_TS_DIGITS or not is_digits(ts):
        return None
    if not is_hex32(sig):
        return None
    return parsed

class TokenValidator:
    def __init__(self, cfg: GuardConfig):
        self.secret = cfg.csrf_secret
        self.window_ms = cfg.freshness_window_ms
        self.skew_ms = cfg.clock_skew_ms
        self.accept_legacy = cfg.accept_legacy_tokens

    def validate(self, token: Optional[str], now: Optional[int] = None) -> Decision:
        parsed = parse_token(token or "", self.accept_legacy)
        if parsed is None:
            return Decision.reject("malformed_token")

        expected = sign(parsed.payload(), self.secret)
        if not constant_time_equal(parsed.sig.encode("ascii"), expected.encode("ascii")):
            return Decision.reject("invalid_signature")

        now = now_ms() if now is None else now
        age = now - parsed.issued_at_ms
        if age < -self.skew_ms:
            return Decision.reject("future_timestamp")
        if age > self.window_ms:
            return Decision.reject("expired")
        return Decision.accept()

    def needs_reissue(self, token: Optional[str], now: Optional[int] = None) -> bool:
        return not self.validate(token, now).ok
