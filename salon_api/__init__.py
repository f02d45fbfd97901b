from __future__ import annotations

import logging
from collections.abc import Mapping

from flasgger import Swagger
from flask import Flask
from flask_cors import CORS

from .config import Config
from .errors import register_error_handlers
from .extensions import db, limiter
from .routes import register_routes

SWAGGER_TEMPLATE = {
    "info": {
        "title": "Salon API",
        "description": "Salon and spa booking and content management API",
        "version": "1.0.0",
    },
    "securityDefinitions": {
        "bearerAuth": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "JWT access token as 'Bearer <token>'",
        }
    },
}


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    if isinstance(config_object, Mapping):
        app.config.from_object(Config)
        app.config.update(config_object)
    elif config_object:
        app.config.from_object(config_object)
    else:
        app.config.from_object(Config)
        app.config.from_envvar("APP_SETTINGS", silent=True)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    db.init_app(app)
    limiter.init_app(app)

    # Only the admin dashboard origins may call the API with credentials.
    CORS(app,
         origins=app.config.get("CORS_ORIGINS") or ["*"],
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )

    Swagger(app, template=SWAGGER_TEMPLATE)

    register_error_handlers(app)
    register_routes(app)

    app.logger.info("Salon API configured for %s", app.config.get("ENV_NAME"))
    return app
