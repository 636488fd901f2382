"""HTTP adapters: turn events into service calls and results into responses."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

from . import responses
from .errors import DuplicateStepOrder, InvalidQuery, UploadRejected, ValidationFailed
from .models import RecipeQuery
from .service import RecipeService
from .uploads import UploadService

log = logging.getLogger("recipekeeper.controllers")

Event = Dict[str, Any]
Response = Dict[str, Any]

DEFAULT_LIMIT = 50


def parse_json_body(event: Event) -> Tuple[bool, Any]:
    """Return ``(True, data)`` for a JSON body and ``(False, None)`` otherwise."""

    body = event.get("body")
    if body is None:
        return True, None
    try:
        return True, json.loads(body)
    except (TypeError, ValueError):
        return False, None


def _positive_int(value: Optional[str], default: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class RecipeController:
    def __init__(self, service: RecipeService) -> None:
        self._service = service

    def create_recipe(self, event: Event) -> Response:
        """POST /recipes"""

        parsed, data = parse_json_body(event)
        if not parsed:
            return responses.bad_request("Request body must be valid JSON")
        if not isinstance(data, dict):
            return responses.bad_request("Request body must be a JSON object")

        try:
            recipe = self._service.add_recipe(data)
        except (ValidationFailed, DuplicateStepOrder) as exc:
            log.info("Rejected recipe: %s", exc)
            return responses.bad_request(str(exc))
        except Exception:
            log.exception("Failed to create recipe")
            return responses.server_error("Internal server error")

        return responses.ok({"message": "Recipe created", "data": recipe})

    def get_recipe(self, event: Event) -> Response:
        """GET /recipes/{id}"""

        recipe_id = (event.get("pathParameters") or {}).get("id")
        if not recipe_id:
            return responses.bad_request("Missing recipe id")

        try:
            recipe = self._service.get_recipe_by_id(recipe_id)
        except Exception:
            log.exception("Failed to fetch recipe %s", recipe_id)
            return responses.server_error("Internal server error")

        if recipe is None:
            return responses.not_found("Recipe not found")
        return responses.ok({"data": recipe})

    def list_recipes(self, event: Event) -> Response:
        """GET /recipes"""

        params = event.get("queryStringParameters") or {}
        raw_tags = params.get("tags")
        tags = [tag.strip() for tag in raw_tags.split(",") if tag.strip()] if raw_tags else None

        options = RecipeQuery(
            limit=_positive_int(params.get("limit"), DEFAULT_LIMIT),
            skip=_positive_int(params.get("skip"), 0),
            sort_by=params.get("sortBy") or "createdAt",
            sort_order=params.get("sortOrder") or "desc",
            tags=tags,
        )

        try:
            recipes = self._service.get_all_recipes(options)
        except InvalidQuery as exc:
            return responses.bad_request(str(exc))
        except Exception:
            log.exception("Failed to list recipes")
            return responses.server_error("Internal server error")

        return responses.ok({"count": len(recipes), "data": recipes})


class UploadController:
    def __init__(self, uploads: UploadService) -> None:
        self._uploads = uploads

    def create_upload_url(self, event: Event) -> Response:
        """POST /recipes/upload"""

        parsed, data = parse_json_body(event)
        if not parsed or not isinstance(data, dict):
            return responses.bad_request(
                "Request body must be JSON with fileName, contentType and fileSize"
            )

        file_name = data.get("fileName")
        content_type = data.get("contentType")
        file_size = data.get("fileSize")
        if not file_name or not content_type or not file_size:
            return responses.bad_request("fileName, contentType and fileSize are required")
        if not isinstance(file_size, int) or isinstance(file_size, bool):
            return responses.bad_request("fileSize must be an integer number of bytes")

        try:
            result = self._uploads.generate_presigned_upload_url(file_name, content_type, file_size)
        except UploadRejected as exc:
            return responses.bad_request(str(exc))
        except Exception:
            log.exception("Failed to generate upload URL")
            return responses.server_error("Internal server error")

        return responses.ok({"message": "Upload URL generated", "data": result})


__all__ = ["RecipeController", "UploadController", "parse_json_body"]
