# authgate/server/app.py
import time
from typing import Callable, Dict
from fastapi import FastAPI, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from authgate.common.config import GuardConfig
from authgate.csrf.issuer import TokenIssuer
from authgate.csrf.validator import TokenValidator
from authgate.csrf.web import install_csrf, build_router, build_form_guard, current_or_new_token, set_token_cookie
from authgate.internal.api import build_internal_guard
from authgate.internal.comparator import SecretComparator
from authgate.server.pages import INDEX_TEMPLATE

MAX_NOTES = 200

def build_app(cfg: GuardConfig, logger, jobs: Dict[str, Callable[[], dict]] | None = None):
    app = FastAPI()
    issuer = TokenIssuer(cfg)
    validator = TokenValidator(cfg)
    comparator = SecretComparator(cfg)

    install_csrf(app, cfg, issuer, validator, logger)
    app.include_router(build_router(cfg, issuer))
    require_form_token = build_form_guard(cfg, validator)
    require_internal_caller = build_internal_guard(app, comparator, logger)

    # stand-in for the real store
    notes: list[dict] = []

    def add_note(text: str) -> dict:
        n = {"ts": time.time(), "text": text[:500]}
        notes.append(n)
        del notes[:-MAX_NOTES]
        return n

    def prune_notes() -> dict:
        before = len(notes)
        cutoff = time.time() - 24 * 3600
        notes[:] = [n for n in notes if n["ts"] >= cutoff]
        return {"removed": before - len(notes)}

    handlers: Dict[str, Callable[[], dict]] = {"prune-notes": prune_notes}
    if jobs:
        handlers.update(jobs)

    @app.get("/", response_class=HTMLResponse)
    async def index(req: Request):
        tok, is_new = current_or_new_token(req, cfg, issuer, validator)
        view = [{"text": n["text"], "created_h": time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(n["ts"]))}
                for n in reversed(notes)]
        resp = HTMLResponse(INDEX_TEMPLATE.render(
            token=tok, field=cfg.csrf_form_field, header=cfg.csrf_header, cookie=cfg.csrf_cookie, notes=view,
        ))
        if is_new:
            set_token_cookie(resp, tok, cfg)
        return resp

    @app.post("/notes", dependencies=[Depends(require_form_token)])
    async def notes_form(text: str = Form("")):
        if text.strip():
            add_note(text.strip())
        return RedirectResponse("/", status_code=303)

    @app.get("/api/health")
    async def health():
        return {"ok": True}

    @app.get("/api/notes")
    async def list_notes():
        return {"ok": True, "notes": notes[-50:]}

    @app.post("/api/notes")
    async def create_note(req: Request):
        try:
            data = await req.json()
        except ValueError:
            raise HTTPException(400, "invalid json")
        text = str(data.get("text", "")).strip() if isinstance(data, dict) else ""
        if not text:
            raise HTTPException(400, "text required")
        return {"ok": True, "note": add_note(text)}

    @app.api_route("/api/cron/{job}", methods=["GET", "POST"])
    async def cron(job: str, auth: str = Depends(require_internal_caller)):
        fn = handlers.get(job)
        if not fn:
            raise HTTPException(404, "unknown job")
        out = fn()
        logger.info(f"cron {job} done auth={auth}")
        return {"ok": True, "job": job, "result": out}

    return app
