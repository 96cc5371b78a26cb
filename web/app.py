"""
Flask web server for the structural-code knowledge assistant.

Routes
──────
GET  /               Single-page UI (catalog sidebar, search, settings, article)
GET  /api/topics     Topic catalog (JSON); ?category=<id> for one category
GET  /api/config     Current provider config (JSON, camelCase)
PUT  /api/config     Replace the provider config; persisted immediately
POST /api/query      {"query": "..."} or {"topic": "..."} → rendered result
GET  /api/state      {"state", "loading", "activeTopic"}

Run with ``python web/app.py`` or ``flask --app web.app run``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, render_template, request
from pydantic import ValidationError

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

from config.settings import Settings
from structkb import config_store
from structkb.assistant import Assistant, QueryOutcome, QueryState
from structkb.catalog import DEFAULT_EXPANDED, find_category, get_categories, topic_question
from structkb.errors import AssistantError, ErrorKind
from structkb.models import Config
from structkb.providers import build_provider
from web.rendering import render_markdown

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

#: HTTP status returned for each error kind.
ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.MISSING_CREDENTIAL: 400,
    ErrorKind.NETWORK_FAILURE: 504,
    ErrorKind.PROVIDER_ERROR: 502,
    ErrorKind.EMPTY_RESPONSE: 502,
}

bp = Blueprint("structkb", __name__)


def _assistant() -> Assistant:
    return current_app.extensions["structkb"]


def _outcome_json(outcome: QueryOutcome) -> dict:
    """Serialise one request's own outcome; ``stale`` marks a superseded query."""
    result = outcome.result
    return {
        "text": result.text,
        "html": render_markdown(result.text),
        "sources": [s.model_dump() for s in result.sources],
        "image": result.image,
        "state": QueryState.SUCCESS.value,
        "generation": outcome.generation,
        "stale": outcome.stale,
    }


# ── UI ─────────────────────────────────────────────────────────────────────

@bp.route("/")
def index():
    return render_template(
        "index.html",
        categories=get_categories(),
        default_expanded=DEFAULT_EXPANDED,
    )


# ── Catalog & config API ───────────────────────────────────────────────────

@bp.route("/api/topics")
def list_topics():
    """Return the topic catalog as JSON.

    Query params:
      category  (optional) — return only this category, 404 if unknown
    """
    category_id = request.args.get("category", "").strip()
    if category_id:
        category = find_category(category_id)
        if category is None:
            return jsonify({"error": {"kind": "not_found", "message": f"unknown category {category_id!r}"}}), 404
        return jsonify(category.model_dump())

    return jsonify(
        {
            "defaultExpanded": DEFAULT_EXPANDED,
            "categories": [c.model_dump() for c in get_categories()],
        }
    )


@bp.route("/api/config")
def get_config():
    return jsonify(_assistant().config.to_wire())


@bp.route("/api/config", methods=["PUT"])
def put_config():
    """Replace the config with the JSON body (camelCase field names)."""
    try:
        config = Config.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return jsonify({"error": {"kind": "invalid_config", "message": str(exc)}}), 400
    _assistant().update_config(config)
    return jsonify(config.to_wire())


# ── Query ──────────────────────────────────────────────────────────────────

@bp.route("/api/query", methods=["POST"])
def query():
    """Dispatch a typed query or a catalog topic.

    Body:
      query  — free text, dispatched as-is
      topic  — catalog topic, dispatched as the topic question
    """
    body = request.get_json(silent=True) or {}
    text = (body.get("query") or "").strip()
    topic = (body.get("topic") or "").strip()
    if not text and not topic:
        return jsonify({"error": {"kind": "invalid_query", "message": "query or topic is required"}}), 400

    assistant = _assistant()
    try:
        if topic:
            outcome = assistant.dispatch(topic_question(topic), topic=topic)
        else:
            outcome = assistant.dispatch(text)
    except AssistantError as exc:
        logger.exception("Query error for query=%r topic=%r", text, topic)
        return jsonify({"error": exc.to_dict()}), ERROR_STATUS[exc.kind]

    return jsonify(_outcome_json(outcome))


@bp.route("/api/state")
def state():
    assistant = _assistant()
    return jsonify(
        {
            "state": assistant.state.value,
            "loading": assistant.loading,
            "activeTopic": assistant.active_topic,
        }
    )


# ── App factory ────────────────────────────────────────────────────────────

def create_app(
    settings: Optional[Settings] = None,
    provider_factory=build_provider,
) -> Flask:
    """Build the Flask app with its own config store and dispatch flow."""
    settings = settings or Settings()
    try:
        settings.validate()
    except ValueError as exc:
        logger.warning("%s Only the DeepSeek provider will work.", exc)

    holder = config_store.open_store(settings.config_db_path)
    app = Flask(__name__)
    app.extensions["structkb"] = Assistant(settings, holder, provider_factory)
    app.register_blueprint(bp)
    return app


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    settings = Settings()
    app = create_app(settings)
    app.run(debug=settings.debug, host="0.0.0.0", port=settings.port)
