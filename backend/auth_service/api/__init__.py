"""HTTP surface: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from flask import Flask


def init_app(app: Flask) -> None:
    """Mount every v1 blueprint at ``<API_BASE_PREFIX>/v1<relative prefix>``."""

    from auth_service.api.v1 import API_VERSION, REGISTRY

    version_root = f"{app.config.get('API_BASE_PREFIX', '/api').rstrip('/')}/{API_VERSION}"
    for bp, rel_prefix in REGISTRY:
        app.register_blueprint(bp, url_prefix=version_root + rel_prefix)


__all__ = ["init_app"]
