# authgate/server/main.py
from authgate.common.config import load_cfg, build_config
from authgate.common.log import setup_logger
from authgate.server.app import build_app

CFG = build_config(load_cfg())
logger = setup_logger("authgate", CFG.log_dir)
app = build_app(CFG, logger)

@app.on_event("startup")
async def startup():
    logger.info(f"authgate started env={CFG.environment} legacy_tokens={CFG.accept_legacy_tokens} "
                f"internal_auth={'on' if CFG.internal_secret else 'off'}")
