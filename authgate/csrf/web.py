# authgate/csrf/web.py
"""
HTTP side of anti-forgery protection.

API routes use the double-submit cookie pattern: the token travels in the
``x-csrf-token`` header and in the ``csrf-token`` cookie, and both must be
present, equal and valid. HTML form posts carry it in a hidden field
instead of the header. Clients only ever see one generic 403 body; the
precise reason stays in the server log.
"""
from typing import Optional
from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from authgate.common.config import GuardConfig
from authgate.common.log import client_ip
from authgate.common.models import Decision
from authgate.common.security import constant_time_equal, fixed_digest
from authgate.csrf.issuer import TokenIssuer
from authgate.csrf.validator import TokenValidator

STATE_CHANGING = ("POST", "PUT", "PATCH", "DELETE")

CSRF_ERROR_BODY = {
    "success": False,
    "error": "CSRF validation failed",
    "message": "Please refresh the page and try again",
}

class CsrfRejected(HTTPException):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(status_code=403)

def csrf_error_response() -> JSONResponse:
    return JSONResponse(CSRF_ERROR_BODY, status_code=403)

def is_exempt(path: str, cfg: GuardConfig) -> bool:
    return any(path.startswith(p) for p in cfg.csrf_exempt_prefixes)

def check_pair(presented: Optional[str], cookie: Optional[str], validator: TokenValidator,
               now: Optional[int] = None) -> Decision:
    if not presented or not cookie:
        return Decision.reject("missing_token")
    if not constant_time_equal(fixed_digest(presented), fixed_digest(cookie)):
        return Decision.reject("token_mismatch")
    return validator.validate(presented, now)

def set_token_cookie(resp, token: str, cfg: GuardConfig):
    # readable by page scripts, which copy it into the header
    resp.set_cookie(
        cfg.csrf_cookie, token,
        max_age=cfg.token_ttl_sec, path="/",
        httponly=False, secure=cfg.is_production, samesite="strict",
    )

def _sets_cookie(resp, name: str) -> bool:
    prefix = f"{name}=".encode("latin-1")
    return any(v.startswith(prefix) for k, v in resp.raw_headers if k == b"set-cookie")

def _log_reject(logger, req: Request, reason: str):
    ip = client_ip(req.headers, req.client.host if req.client else "-")
    logger.warning(f"csrf rejected reason={reason} method={req.method} path={req.url.path} ip={ip}")

def install_csrf(app: FastAPI, cfg: GuardConfig, issuer: TokenIssuer, validator: TokenValidator, logger):
    """
    Validate state-changing /api/ calls and keep a fresh token cookie on page responses.
    """
    @app.exception_handler(CsrfRejected)
    async def csrf_rejected(req: Request, exc: CsrfRejected):
        _log_reject(logger, req, exc.reason)
        return csrf_error_response()

    @app.middleware("http")
    async def csrf_middleware(req: Request, call_next):
        path = req.url.path
        is_api = path.startswith("/api/")

        if is_api and req.method in STATE_CHANGING and not is_exempt(path, cfg):
            d = check_pair(req.headers.get(cfg.csrf_header), req.cookies.get(cfg.csrf_cookie), validator)
            if not d.ok:
                _log_reject(logger, req, d.reason)
                return csrf_error_response()

        resp = await call_next(req)

        if not is_api and req.method == "GET" and not _sets_cookie(resp, cfg.csrf_cookie):
            if validator.needs_reissue(req.cookies.get(cfg.csrf_cookie)):
                set_token_cookie(resp, issuer.issue(), cfg)
        return resp

def build_form_guard(cfg: GuardConfig, validator: TokenValidator):
    """
    Dependency for HTML form posts: hidden field vs cookie.
    """
    async def require_form_token(req: Request) -> None:
        form = await req.form()
        presented = form.get(cfg.csrf_form_field)
        if not isinstance(presented, str):
            presented = None
        d = check_pair(presented, req.cookies.get(cfg.csrf_cookie), validator)
        if not d.ok:
            raise CsrfRejected(d.reason)

    return require_form_token

def current_or_new_token(req: Request, cfg: GuardConfig, issuer: TokenIssuer, validator: TokenValidator):
    """
    Token to embed in a rendered page. Returns (token, is_new).
    """
    existing = req.cookies.get(cfg.csrf_cookie)
    if existing and not validator.needs_reissue(existing):
        return existing, False
    return issuer.issue(), True

def build_router(cfg: GuardConfig, issuer: TokenIssuer):
    r = APIRouter()

    @r.get("/api/csrf")
    async def csrf_token():
        tok = issuer.issue()
        resp = JSONResponse({"token": tok, "header": cfg.csrf_header})
        set_token_cookie(resp, tok, cfg)
        return resp

    return r
