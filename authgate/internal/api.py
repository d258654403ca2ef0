# authgate/internal/api.py
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from authgate.common.log import client_ip
from authgate.internal.comparator import SecretComparator

class InternalRejected(HTTPException):
    def __init__(self, status_code: int, error: str):
        self.error = error
        super().__init__(status_code=status_code)

def build_internal_guard(app: FastAPI, comparator: SecretComparator, logger):
    """
    FastAPI dependency for routes called by cron jobs and other services.
    Returns the accept reason ("ok" or "dev_bypass").
    """
    @app.exception_handler(InternalRejected)
    async def internal_rejected(req: Request, exc: InternalRejected):
        return JSONResponse({"error": exc.error}, status_code=exc.status_code)

    async def require_internal_caller(req: Request) -> str:
        d = comparator.verify(req.headers.get("authorization"))
        ip = client_ip(req.headers, req.client.host if req.client else "-")
        if d.ok:
            if d.reason == "dev_bypass":
                logger.warning(f"internal secret not configured, running without auth path={req.url.path}")
            return d.reason

        if d.reason == "server_misconfigured":
            logger.error(f"internal secret not set in production path={req.url.path}")
            raise InternalRejected(500, "Server misconfiguration")

        logger.warning(f"internal auth rejected reason={d.reason} method={req.method} path={req.url.path} ip={ip}")
        raise InternalRejected(401, "Unauthorized")

    return require_internal_caller
