"""FastAPI application receiving Telegram callback updates."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request

from .config import Settings
from .correlator import AnswerCorrelator, InboundAction
from .metrics import METRICS
from .models import TelegramUpdate
from .wiring import build_correlator, build_store


logger = logging.getLogger(__name__)

app = FastAPI(title="leetquiz", version="0.1.0")

OK: Dict[str, Any] = {"ok": True}


def get_correlator() -> AnswerCorrelator:
    return app.state.correlator


@app.on_event("startup")
def startup() -> None:
    settings = Settings.from_env()
    store = build_store(settings)
    app.state.settings = settings
    app.state.store = store
    app.state.correlator = build_correlator(settings, store)


@app.on_event("shutdown")
def shutdown() -> None:
    store = getattr(app.state, "store", None)
    if store is not None:
        store.close()


@app.post("/telegram-webhook")
async def telegram_webhook(
    request: Request, correlator: AnswerCorrelator = Depends(get_correlator)
) -> Dict[str, Any]:
    """Always answers 200 so Telegram only retries on transport failures."""

    try:
        update = TelegramUpdate.model_validate(await request.json())
    except ValueError as exc:
        logger.warning("Ignoring unparseable update: %s", exc)
        return OK

    if update.callback_query is None:
        return OK

    action = InboundAction.from_callback_query(update.callback_query)
    try:
        outcome = await correlator.handle_inbound_action(action)
    except Exception:
        logger.exception("Unhandled error for callback %s", action.action_id)
        return OK
    logger.info("Handled callback %s: %s", action.action_id, outcome.value)
    return OK


@app.get("/healthz")
def healthz() -> Dict[str, Any]:
    return {"status": "ok", "metrics": METRICS.snapshot()}


__all__ = ["app"]
