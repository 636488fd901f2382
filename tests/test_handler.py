from __future__ import annotations

from pathlib import Path
import json
import sys
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import recipekeeper.handler as handler_module
from recipekeeper.config import Settings
from recipekeeper.errors import StorageUnavailable
from recipekeeper.handler import create_handler
from recipekeeper.memory_storage import InMemoryRecipeStorage
from recipekeeper.uploads import UploadService


class BrokenStorage:
    def create(self, document):
        raise StorageUnavailable(ConnectionError("connection reset"))

    def find_by_id(self, recipe_id):
        raise StorageUnavailable(ConnectionError("connection reset"))

    def find(self, recipe_filter):
        raise StorageUnavailable(ConnectionError("connection reset"))


def v2_event(method: str, path: str, body=None, query=None) -> dict:
    return {
        "requestContext": {"http": {"method": method, "path": path}},
        "body": json.dumps(body) if body is not None else None,
        "queryStringParameters": query,
    }


def make_handler(storage=None, uploads=None):
    return create_handler(
        Settings(storage_backend="memory"),
        storage=storage if storage is not None else InMemoryRecipeStorage(),
        uploads=uploads or UploadService(bucket_name=None),
    )


RECIPE = {
    "title": "Pizza Margherita",
    "servings": 4,
    "ingredients": [{"name": "Mozzarella", "quantity": 1, "unit": "Ball"}],
    "steps": [{"order": 1, "text": "Bake."}],
    "tags": ["Italien"],
}


def test_create_then_get_through_events():
    handler = make_handler()

    created = handler(v2_event("POST", "/recipes", RECIPE))
    recipe = json.loads(created["body"])["data"]
    fetched = handler({"httpMethod": "GET", "path": f"/recipes/{recipe['id']}"})

    assert created["statusCode"] == 200
    assert fetched["statusCode"] == 200
    assert json.loads(fetched["body"])["data"]["tags"] == ["italien"]


def test_null_body_is_a_bad_request():
    handler = make_handler()

    response = handler(v2_event("POST", "/recipes"))

    assert response["statusCode"] == 400


def test_listing_without_query_parameters_uses_defaults():
    handler = make_handler()
    handler(v2_event("POST", "/recipes", RECIPE))

    response = handler(v2_event("GET", "/recipes", query=None))

    body = json.loads(response["body"])
    assert response["statusCode"] == 200
    assert body["count"] == 1


def test_storage_failures_become_server_errors():
    handler = make_handler(storage=BrokenStorage())

    created = handler(v2_event("POST", "/recipes", RECIPE))
    fetched = handler(v2_event("GET", "/recipes/abc"))
    listed = handler(v2_event("GET", "/recipes"))

    assert created["statusCode"] == 500
    assert fetched["statusCode"] == 500
    assert listed["statusCode"] == 500
    assert json.loads(listed["body"]) == {"error": "Internal server error"}


def test_unexpected_errors_are_caught_by_the_handler(monkeypatch):
    def explode(settings):
        raise RuntimeError("no credentials")

    monkeypatch.setattr(handler_module, "open_storage", explode)
    handler = create_handler(Settings(), uploads=UploadService(bucket_name=None))

    response = handler(v2_event("GET", "/recipes"))

    assert response["statusCode"] == 500
    assert json.loads(response["body"]) == {
        "error": "Internal server error",
        "message": "no credentials",
    }


def test_storage_is_opened_once_per_process(monkeypatch):
    storage = InMemoryRecipeStorage()
    opener = MagicMock(return_value=storage)
    monkeypatch.setattr(handler_module, "open_storage", opener)
    handler = create_handler(Settings(), uploads=UploadService(bucket_name=None))

    assert opener.call_count == 0
    handler(v2_event("GET", "/recipes"))
    handler(v2_event("GET", "/recipes"))

    assert opener.call_count == 1


def test_upload_route_is_registered():
    uploads = MagicMock(spec=UploadService)
    uploads.generate_presigned_upload_url.return_value = {"uploadUrl": "https://signed", "key": "k"}
    handler = make_handler(uploads=uploads)

    response = handler(
        v2_event(
            "POST",
            "/recipes/upload",
            {"fileName": "pizza.png", "contentType": "image/png", "fileSize": 1024},
        )
    )

    assert response["statusCode"] == 200
    assert json.loads(response["body"])["data"]["uploadUrl"] == "https://signed"
    uploads.generate_presigned_upload_url.assert_called_once_with("pizza.png", "image/png", 1024)


def test_upload_requires_file_details():
    handler = make_handler()

    missing = handler(v2_event("POST", "/recipes/upload", {"fileName": "pizza.png"}))
    invalid = handler({"httpMethod": "POST", "path": "/recipes/upload", "body": "{oops"})

    assert missing["statusCode"] == 400
    assert invalid["statusCode"] == 400


def test_upload_rejections_are_client_errors():
    handler = make_handler(uploads=UploadService(bucket_name="recipe-uploads", client=MagicMock()))

    response = handler(
        v2_event(
            "POST",
            "/recipes/upload",
            {"fileName": "notes.txt", "contentType": "text/plain", "fileSize": 10},
        )
    )

    assert response["statusCode"] == 400
    assert "File type not allowed" in json.loads(response["body"])["error"]
