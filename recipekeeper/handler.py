from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

from . import responses
from .config import Settings
from .connection import LazyResource, open_storage
from .controllers import RecipeController, UploadController
from .router import Router
from .service import RecipeService
from .storage import RecipeRepository
from .uploads import UploadService

log = logging.getLogger("recipekeeper.handler")

Handler = Callable[..., Dict[str, Any]]


def build_router(service: RecipeService, uploads: UploadService) -> Router:
    recipes = RecipeController(service)
    upload = UploadController(uploads)

    router = Router()
    router.add_route("POST", "/recipes/upload", upload.create_upload_url)
    router.add_route("POST", "/recipes", recipes.create_recipe)
    router.add_route("GET", "/recipes/{id}", recipes.get_recipe)
    router.add_route("GET", "/recipes", recipes.list_recipes)
    return router


def create_handler(
    settings: Optional[Settings] = None,
    *,
    storage: Optional[RecipeRepository] = None,
    uploads: Optional[UploadService] = None,
) -> Handler:
    """Create the serverless entry point.

    Nothing is opened here: the storage connection and the route table are
    built on the first invocation and reused by later ones.
    """

    settings = settings or Settings.from_env()
    upload_service = uploads or UploadService.from_settings(settings)

    if storage is None:
        connection: LazyResource[RecipeRepository] = LazyResource(
            lambda: open_storage(settings), name="recipe storage"
        )
    else:
        connection = LazyResource.ready(storage, name="recipe storage")

    routes: LazyResource[Router] = LazyResource(
        lambda: build_router(RecipeService(connection.get()), upload_service),
        name="route table",
    )

    def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        if log.isEnabledFor(logging.DEBUG):
            log.debug("Event: %s", json.dumps(event, default=str))

        try:
            return routes.get().route(event)
        except Exception as exc:
            log.exception("Unhandled error while handling request")
            return responses.server_error("Internal server error", str(exc))

    return handler


__all__ = ["build_router", "create_handler"]
