"""Entry points for the recipe API.

``handler`` is the serverless function (``main.handler``) receiving API
gateway style events. ``app`` is the WSGI application for Gunicorn or
``flask --app main run`` during local development; ``entrypoint`` serves
Cloud Functions, which pass a Flask request. Importing this module opens no
connection, storage is reached on the first request.
"""

from flask import Request, Response

from recipekeeper import create_app, event_from_request, to_flask_response
from recipekeeper.config import Settings

settings = Settings.from_env()

app = create_app(settings=settings)
handler = app.config["RECIPE_HANDLER"]


def entrypoint(request: Request) -> Response:
    return to_flask_response(handler(event_from_request(request)))


__all__ = ["app", "entrypoint", "handler"]
