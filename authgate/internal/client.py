# authgate/internal/client.py
import asyncio, random
import httpx
from authgate.common.config import GuardConfig

class InternalClient:
    """
    Caller side of the bearer-secret protocol, used by scheduled jobs.
    """
    def __init__(self, base_url: str, secret: str | None, timeout_sec: int, max_attempts: int,
                 base_backoff_ms: int, max_backoff_ms: int, logger, transport: httpx.AsyncBaseTransport | None = None):
        self.base = base_url.rstrip("/")
        self.secret = secret
        self.timeout = timeout_sec
        self.max_attempts = max(1, max_attempts)
        self.base_backoff = base_backoff_ms
        self.max_backoff = max_backoff_ms
        self.logger = logger
        self.transport = transport

    @classmethod
    def from_config(cls, cfg: GuardConfig, logger, transport: httpx.AsyncBaseTransport | None = None):
        return cls(
            base_url=cfg.base_url,
            secret=cfg.internal_secret,
            timeout_sec=cfg.rpc_timeout_sec,
            max_attempts=cfg.rpc_max_attempts,
            base_backoff_ms=cfg.rpc_base_backoff_ms,
            max_backoff_ms=cfg.rpc_max_backoff_ms,
            logger=logger,
            transport=transport,
        )

    def _headers(self) -> dict:
        if not self.secret:
            return {}
        return {"authorization": f"Bearer {self.secret}"}

    async def call(self, path: str, payload: dict | None = None) -> dict:
        backoff = self.base_backoff / 1000.0
        last_err = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as c:
                    r = await c.post(self.base + path, json=payload or {}, headers=self._headers())
                    if 400 <= r.status_code < 500 or r.status_code == 500:
                        # client errors and server misconfiguration do not get better by retrying
                        raise PermissionError(f"{path} rejected status={r.status_code}")
                    r.raise_for_status()
                    return r.json()
            except PermissionError:
                raise
            except Exception as e:
                last_err = e
                self.logger.warning(f"internal call fail attempt={attempt}/{self.max_attempts} path={path} err={e}")
                if attempt == self.max_attempts:
                    break
                await self._sleep(backoff)
                backoff = min(backoff * 2, self.max_backoff / 1000.0)

        raise RuntimeError(f"internal call failed after retries: {last_err}")

    async def _sleep(self, seconds: float):
        # jitter
        await asyncio.sleep(seconds * (0.7 + random.random() * 0.6))
