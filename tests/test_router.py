from __future__ import annotations

from pathlib import Path
import json
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recipekeeper.router import Router, compile_pattern


class RecordingHandler:
    """Handler double remembering the events it was called with."""

    def __init__(self, response=None) -> None:
        self.calls: list[dict] = []
        self.response = response if response is not None else {"statusCode": 200}

    def __call__(self, event):
        self.calls.append(event)
        return self.response


def make_event(method: str, path: str, **extra) -> dict:
    event = {"requestContext": {"http": {"method": method, "path": path}}}
    event.update(extra)
    return event


def test_add_route_appends_in_order():
    router = Router()
    first, second = RecordingHandler(), RecordingHandler()

    router.add_route("GET", "/test1", first)
    router.add_route("POST", "/test2", second)

    assert [(route.method, route.path) for route in router.routes] == [
        ("GET", "/test1"),
        ("POST", "/test2"),
    ]
    assert router.routes[0].handler is first


def test_duplicate_routes_are_kept():
    router = Router()
    router.add_route("GET", "/recipes", RecordingHandler())
    router.add_route("GET", "/recipes", RecordingHandler())

    assert len(router.routes) == 2


def test_exact_match_passes_original_event():
    router = Router()
    handler = RecordingHandler()
    router.add_route("GET", "/recipes", handler)
    event = make_event("GET", "/recipes")

    result = router.route(event)

    assert result == {"statusCode": 200}
    assert handler.calls == [event]
    assert handler.calls[0] is event


def test_method_selects_handler():
    router = Router()
    get_handler = RecordingHandler({"statusCode": 200})
    post_handler = RecordingHandler({"statusCode": 201})
    router.add_route("GET", "/recipes", get_handler)
    router.add_route("POST", "/recipes", post_handler)

    result = router.route(make_event("POST", "/recipes"))

    assert result == {"statusCode": 201}
    assert post_handler.calls
    assert not get_handler.calls


def test_extracts_path_parameter():
    router = Router()
    handler = RecordingHandler()
    router.add_route("GET", "/recipes/{id}", handler)
    event = make_event("GET", "/recipes/123")

    router.route(event)

    assert handler.calls
    assert event["pathParameters"] == {"id": "123"}


def test_extracts_multiple_path_parameters():
    router = Router()
    router.add_route("GET", "/users/{userId}/recipes/{recipeId}", RecordingHandler())
    event = make_event("GET", "/users/456/recipes/789")

    router.route(event)

    assert event["pathParameters"] == {"userId": "456", "recipeId": "789"}


def test_existing_path_parameters_are_preserved():
    router = Router()
    router.add_route("GET", "/recipes/{id}", RecordingHandler())
    event = make_event("GET", "/recipes/123", pathParameters={"existingParam": "value", "id": "old"})

    router.route(event)

    assert event["pathParameters"] == {"existingParam": "value", "id": "123"}


def test_placeholder_matches_a_single_segment_only():
    router = Router()
    handler = RecordingHandler()
    router.add_route("GET", "/recipes/{id}", handler)

    result = router.route(make_event("GET", "/recipes/123/steps"))

    assert result["statusCode"] == 404
    assert not handler.calls


def test_literal_segments_are_not_regex():
    router = Router()
    handler = RecordingHandler()
    router.add_route("GET", "/files/{name}.json", handler)

    assert router.route(make_event("GET", "/files/abcxjson"))["statusCode"] == 404

    event = make_event("GET", "/files/menu.json")
    router.route(event)
    assert event["pathParameters"] == {"name": "menu"}


def test_legacy_event_format():
    router = Router()
    handler = RecordingHandler()
    router.add_route("GET", "/recipes", handler)

    result = router.route({"httpMethod": "GET", "path": "/recipes"})

    assert result == {"statusCode": 200}
    assert handler.calls


def test_first_registered_pattern_wins_over_more_specific_literal():
    router = Router()
    by_id = RecordingHandler({"statusCode": 200, "body": "by id"})
    special = RecordingHandler({"statusCode": 200, "body": "special"})
    router.add_route("GET", "/recipes/{id}", by_id)
    router.add_route("GET", "/recipes/special", special)
    event = make_event("GET", "/recipes/special")

    result = router.route(event)

    assert result["body"] == "by id"
    assert event["pathParameters"] == {"id": "special"}
    assert not special.calls


def test_literal_registered_first_takes_precedence():
    router = Router()
    by_id = RecordingHandler()
    special = RecordingHandler()
    router.add_route("GET", "/recipes/special", special)
    router.add_route("GET", "/recipes/{id}", by_id)

    router.route(make_event("GET", "/recipes/special"))

    assert special.calls
    assert not by_id.calls


def test_unknown_path_returns_404():
    router = Router()
    handler = RecordingHandler()
    router.add_route("GET", "/recipes", handler)

    result = router.route(make_event("GET", "/unknown"))

    assert result["statusCode"] == 404
    assert result["headers"]["Content-Type"] == "application/json"
    assert json.loads(result["body"]) == {"error": "Route not found"}
    assert not handler.calls


def test_method_mismatch_is_reported_as_404():
    router = Router()
    router.add_route("GET", "/recipes", RecordingHandler())
    router.add_route("POST", "/recipes", RecordingHandler())

    result = router.route(make_event("DELETE", "/recipes"))

    assert result["statusCode"] == 404


def test_handler_errors_propagate():
    router = Router()

    def failing(event):
        raise RuntimeError("Handler error")

    router.add_route("GET", "/recipes", failing)

    with pytest.raises(RuntimeError, match="Handler error"):
        router.route(make_event("GET", "/recipes"))


def test_compile_pattern_reports_parameter_names():
    pattern, names = compile_pattern("/users/{userId}/recipes/{recipeId}")

    assert names == ("userId", "recipeId")
    assert pattern.fullmatch("/users/1/recipes/2").groups() == ("1", "2")
