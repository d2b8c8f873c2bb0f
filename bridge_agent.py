import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from config import Settings
from errors import (BranchNotFoundError, BridgeError, ConcurrentUpdateError,
                    ConfigurationError, DeadlineExceededError, UpstreamError,
                    ValidationError)
from tools import BridgeTools

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ValidationError: 400,
    ConfigurationError: 400,
    BranchNotFoundError: 404,
    ConcurrentUpdateError: 409,
    UpstreamError: 502,
    DeadlineExceededError: 504,
}


def status_for(error):
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def create_app(settings=None, tools=None):
    settings = settings or Settings.from_env()
    tools = tools or BridgeTools(settings)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = 25 * 1024 * 1024

    @app.errorhandler(BridgeError)
    def handle_bridge_error(e):
        return jsonify(e.to_dict()), status_for(e)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({"ok": False, "error": e.description}), e.code
        logger.exception("unhandled error on %s", request.path)
        return jsonify({"ok": False, "error": "internal error"}), 500

    @app.route("/")
    def index():
        return "MatriXx360 MCP Bridge is running. POST /mcp/git_commit_and_push to commit files.", 200

    @app.route("/health")
    def health():
        return jsonify({"ok": True})

    @app.route("/mcp/git_commit_and_push", methods=["POST"])
    def git_commit_and_push():
        payload = request.get_json(silent=True)
        if payload is None:
            raise ValidationError("request body must be JSON")
        return jsonify(tools.git_commit_and_push(payload))

    @app.route("/mcp/render_deploy", methods=["POST"])
    def render_deploy():
        payload = request.get_json(silent=True) or {}
        return jsonify(tools.render_deploy(payload))

    return app


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app(settings)
    app.run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
