# authgate/common/models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Union

RejectReason = Literal[
    "malformed_token",
    "invalid_signature",
    "future_timestamp",
    "expired",
    "missing_token",
    "token_mismatch",
    "missing_credential",
    "unauthorized",
    "server_misconfigured",
]

AcceptReason = Literal[
    "ok",
    "dev_bypass",
]

@dataclass(frozen=True)
class Decision:
    """
    Outcome of a verification. Never raised, always returned.
    """
    ok: bool
    reason: str

    @staticmethod
    def accept(reason: AcceptReason = "ok") -> "Decision":
        return Decision(ok=True, reason=reason)

    @staticmethod
    def reject(reason: RejectReason) -> "Decision":
        return Decision(ok=False, reason=reason)

@dataclass(frozen=True)
class CurrentToken:
    ts: str
    nonce: str
    sig: str

    @property
    def issued_at_ms(self) -> int:
        return int(self.ts)

    def payload(self) -> str:
        return f"{self.ts}.{self.nonce}"

@dataclass(frozen=True)
class LegacyToken:
    """
    Two-field token issued before the nonce existed. Signed over the timestamp only.
    """
    ts: str
    sig: str

    @property
    def issued_at_ms(self) -> int:
        return int(self.ts)

    def payload(self) -> str:
        return self.ts

ParsedToken = Union[CurrentToken, LegacyToken]
