"""Contribution patrol HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that receives GitHub webhooks.

Usage
-----
Create and run the application::

    from patrol.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # full mode with the webhook endpoint

Public API
----------
create_app
    Application factory that configures the Falcon ASGI app with
    health endpoints and, when moderation services are provided, the
    GitHub webhook endpoint.
"""

from patrol.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
