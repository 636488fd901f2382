from typing import Any, Dict, Optional

from flask import Flask, Request, Response, request

from .config import Settings, configure_logging
from .handler import Handler, create_handler
from .models import Recipe
from .storage import RecipeRepository
from .uploads import UploadService

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def create_app(
    storage: Optional[RecipeRepository] = None,
    *,
    settings: Optional[Settings] = None,
    uploads: Optional[UploadService] = None,
) -> Flask:
    """Create a Flask application serving the recipe API.

    Every request is converted to an event and passed to the same handler
    the serverless entry point uses, so routing and responses are identical.

    Parameters
    ----------
    storage:
        Optional recipe repository. When ``None`` the backend selected by
        :class:`Settings` (Firestore by default) is opened on first request.
    """

    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.config.setdefault("MAX_CONTENT_LENGTH", 1024 * 1024)
    app.config["RECIPE_HANDLER"] = create_handler(settings, storage=storage, uploads=uploads)

    @app.route("/", defaults={"path": ""}, methods=HTTP_METHODS)
    @app.route("/<path:path>", methods=HTTP_METHODS)
    def dispatch(path: str) -> Response:
        handler: Handler = app.config["RECIPE_HANDLER"]
        return to_flask_response(handler(event_from_request(request)))

    return app


def event_from_request(req: Request) -> Dict[str, Any]:
    """Build a legacy (``httpMethod``/``path``) event from a Flask request."""

    body = req.get_data(as_text=True)
    return {
        "httpMethod": req.method,
        "path": req.path,
        "headers": dict(req.headers),
        "queryStringParameters": req.args.to_dict() or None,
        "pathParameters": None,
        "body": body if body else None,
    }


def to_flask_response(result: Dict[str, Any]) -> Response:
    return Response(
        result.get("body", ""),
        status=result["statusCode"],
        headers=result.get("headers") or {},
    )


__all__ = ["Recipe", "create_app", "create_handler", "event_from_request", "to_flask_response"]
