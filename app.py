from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, request
from werkzeug.middleware.proxy_fix import ProxyFix

from calc_cache import CalculationCache, cache_key
from lighting_config import LightingConfig, load_config
from lighting_worker import handle

load_dotenv()  # this will load .env into os.environ

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "invalid_input": 400,
    "degenerate_input": 400,
    "unsupported_operation": 404,
    "internal_error": 500,
}


def _status_for(replies) -> int:
    for r in replies:
        if r.get("type") == "error":
            return ERROR_STATUS.get(r.get("code"), 500)
    return 200


def create_app(config: LightingConfig | None = None) -> Flask:
    app = Flask(__name__, static_folder=None)
    calc_config = config or load_config(dotenv=False)
    cache = CalculationCache(calc_config.cache_size)
    app.config["LIGHTING_CONFIG"] = calc_config
    app.extensions["calc_cache"] = cache

    def _dispatch(message):
        """Run one worker message, memoising successful calculate replies."""
        key = None
        if isinstance(message, dict) and message.get("type") == "calculate" and isinstance(message.get("data"), dict):
            data = message["data"]
            key = cache_key(data.get("fixtures"), data.get("room"), data.get("options"))
            cached = cache.get(key)
            if cached is not None:
                logger.debug("calculate: cache hit")
                return [dict(r) for r in cached], True
        replies = handle(message, calc_config)
        if key is not None and _status_for(replies) == 200:
            cache.put(key, [{k: v for k, v in r.items() if k != "id"} for r in replies])
        return replies, False

    def _respond(message):
        replies, cached = _dispatch(message)
        if isinstance(message, dict) and message.get("id") is not None:
            for r in replies:
                r["id"] = message["id"]
        status = _status_for(replies)
        body = {"ok": status == 200, "replies": replies, "cached": cached}
        if status != 200:
            body["error"] = replies[0]["error"]
        elif request.args.get("render") == "1":
            heatmap = next((r["data"] for r in replies if r["type"] == "heatmap"), None)
            if heatmap:
                from visualize_ppfd import heatmap_data_url
                try:
                    body["heatmapImage"] = heatmap_data_url(heatmap)
                except Exception as e:
                    logger.exception("Heatmap render failed")
                    body["heatmapImageError"] = str(e)
        return jsonify(body), status

    @app.post("/api/lighting")
    def api_lighting():
        message = request.get_json(silent=True)
        if message is None:
            return jsonify(ok=False, error="Request body must be JSON"), 400
        return _respond(message)

    @app.post("/api/lighting/calculate")
    def api_calculate():
        data = request.get_json(silent=True) or {}
        return _respond({"type": "calculate", "data": data})

    @app.post("/api/lighting/optimize")
    def api_optimize():
        data = request.get_json(silent=True) or {}
        return _respond({"type": "optimize", "data": data})

    @app.get("/healthz")
    def healthz():
        return "ok", 200

    # --- JSON 405 everywhere (so you never see HTML error pages) ---
    @app.errorhandler(405)
    def _json_405(_e):
        return jsonify(ok=False, error="Method Not Allowed"), 405

    @app.errorhandler(404)
    def _json_404(_e):
        return jsonify(ok=False, error="Not Found"), 404

    # --- Catch-all OPTIONS to prevent preflight 405s on unknown routes ---
    @app.route("/<path:_any>", methods=["OPTIONS"])
    def _any_options(_any):
        return Response("", 204)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)
    return app


# ---- Local dev ------------------------------------------------------
if __name__ == "__main__":
    cfg = load_config()
    logging.basicConfig(level=cfg.log_level)
    port = int(os.environ.get("PORT", 5001))  # 5000 is taken locally
    create_app(cfg).run(debug=True, use_reloader=False, host="0.0.0.0", port=port)
