"""
FastAPI backend: Twilio SMS webhook.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import os
from pathlib import Path
from typing import Annotated
from xml.sax.saxutils import escape

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Form, Request
from fastapi.responses import Response
from neo4j import GraphDatabase
from pydantic import BaseModel

from smsbook.application import Dispatcher, WorkflowState
from smsbook.application.dispatcher import INTERNAL_ERROR_REPLY
from smsbook.infrastructure import (
    DEFAULT_REGION,
    InMemoryContactStore,
    Neo4jContactStore,
    decode_vcards,
    ensure_store_constraints,
    make_canonicalizer,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
)
logger = logging.getLogger(__name__)

VCARD_CONTENT_TYPES = ("text/vcard", "text/x-vcard")
MEDIA_TIMEOUT_SECONDS = 10.0


def _get_driver():
    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    return GraphDatabase.driver(uri, auth=(user, password))


def _store_backend() -> str:
    return os.environ.get("SMSBOOK_STORE", "neo4j").strip().lower()


def _twilio_auth() -> tuple[str, str] | None:
    sid = os.environ.get("TWILIO_ACCOUNT_SID", "").strip()
    token = os.environ.get("TWILIO_AUTH_TOKEN", "").strip()
    if sid and token:
        return (sid, token)
    return None


def build_dispatcher(app: FastAPI) -> Dispatcher:
    """Create the dispatcher for the configured store. Workflow state lives as long as the app."""
    if _store_backend() == "memory":
        store = InMemoryContactStore()
    else:
        if getattr(app.state, "driver", None) is None:
            app.state.driver = _get_driver()
        store = Neo4jContactStore(app.state.driver)
    region = os.environ.get("DEFAULT_REGION", DEFAULT_REGION).strip() or None
    return Dispatcher(store, make_canonicalizer(region), workflow=WorkflowState())


def get_dispatcher(app: FastAPI) -> Dispatcher:
    if getattr(app.state, "dispatcher", None) is None:
        app.state.dispatcher = build_dispatcher(app)
    return app.state.dispatcher


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    app.state.dispatcher = None
    logger.info(
        "Twilio webhook: POST /sms. "
        "Point the number's messaging webhook at a public HTTPS URL (e.g. ngrok)."
    )
    try:
        if _store_backend() != "memory":
            app.state.driver = _get_driver()
            ensure_store_constraints(app.state.driver)
        app.state.dispatcher = build_dispatcher(app)
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            app.state.driver.close()


app = FastAPI(title="smsbook", lifespan=lifespan)


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- Twilio webhook ---


class SmsMessage(BaseModel):
    """Inbound SMS/MMS as posted by Twilio. Field names match the API exactly."""

    Body: str = ""
    From: str
    NumMedia: str | None = None
    MediaContentType0: str | None = None
    MediaUrl0: str | None = None

    def vcard_url(self) -> str | None:
        """Media URL when the message carries exactly one vCard attachment."""
        if (
            self.NumMedia == "1"
            and (self.MediaContentType0 or "").lower() in VCARD_CONTENT_TYPES
            and self.MediaUrl0
        ):
            return self.MediaUrl0
        return None


def _fetch_media(url: str) -> str:
    response = httpx.get(
        url,
        auth=_twilio_auth(),
        follow_redirects=True,
        timeout=MEDIA_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    return response.text


def process_message(dispatcher: Dispatcher, message: SmsMessage) -> str:
    """Route one inbound message to the core and return the reply text."""
    url = message.vcard_url()
    if url is not None:
        cards = decode_vcards(_fetch_media(url))
        return dispatcher.handle_card_batch(message.From, cards)
    return dispatcher.handle_text(message.From, message.Body)


def _twiml(text: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<Response><Message>{escape(text)}</Message></Response>"
    )


@app.post("/sms")
def webhook_sms(message: Annotated[SmsMessage, Form()], request: Request):
    """Handle an inbound Twilio message. Set the number's webhook to https://<your-domain>/sms"""
    dispatcher = get_dispatcher(request.app)
    try:
        reply = process_message(dispatcher, message)
    except Exception:
        logger.exception("Error handling message from %s", message.From)
        reply = INTERNAL_ERROR_REPLY
    logger.debug("Sending response: %s", reply)
    return Response(content=_twiml(reply), media_type="application/xml")
