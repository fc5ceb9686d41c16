"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from auth_service.core.config import BaseConfig, get_config
from auth_service.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Token settings are validated here so a bad TTL pair or a missing secret
    stops the process at start-up instead of on the first request.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from auth_service.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from auth_service.api import init_app as init_api
    from auth_service.api.deps import token_issuer

    token_issuer(app)
    init_api(app)

    from auth_service.core import errors

    errors.init_app(app)

    from auth_service import cli as app_cli

    app_cli.init_app(app)

    return app
