"""Flask front end for the webhook handler.

Usage:
    app = create_app(load("codehealth-config.yaml"))
    app.run(port=8080)
"""

import logging

from flask import Flask, Response, redirect, request

from codehealth_bridge.config import Config
from codehealth_bridge.handler import WebhookHandler
from codehealth_bridge.signature import SIGNATURE_HEADER

logger = logging.getLogger(__name__)


def create_app(config: Config, handler: WebhookHandler | None = None) -> Flask:
    app = Flask(__name__)
    webhook = handler or WebhookHandler(config)

    @app.route("/", methods=["GET", "POST"])
    def index():
        # Raw bytes: the signature covers the body exactly as sent.
        result = webhook.handle(
            request.method,
            request.headers.get(SIGNATURE_HEADER),
            request.get_data(),
        )
        logger.debug("Webhook from %s -> %s", request.remote_addr, result.outcome.value)
        if result.location:
            return redirect(result.location, code=result.status)
        return Response(result.body, status=result.status, mimetype="text/plain")

    return app
