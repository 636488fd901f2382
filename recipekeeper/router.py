from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import responses

log = logging.getLogger("recipekeeper.router")

Event = Dict[str, Any]
Handler = Callable[[Event], Dict[str, Any]]

_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


def compile_pattern(path: str) -> Tuple[re.Pattern[str], Tuple[str, ...]]:
    """Turn ``/recipes/{id}`` into an anchored regex and its parameter names.

    Each placeholder matches exactly one path segment; literal parts are
    matched verbatim.
    """

    parts = _PLACEHOLDER.split(path)
    literals, names = parts[0::2], parts[1::2]
    regex = "".join(
        re.escape(literal) + ("([^/]+)" if index < len(names) else "")
        for index, literal in enumerate(literals)
    )
    return re.compile(regex), tuple(names)


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler: Handler
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)
    param_names: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pattern, names = compile_pattern(self.path)
        object.__setattr__(self, "pattern", pattern)
        object.__setattr__(self, "param_names", names)

    def match(self, path: str) -> Optional[Dict[str, str]]:
        if self.path == path:
            return {}
        found = self.pattern.fullmatch(path)
        if found is None:
            return None
        return dict(zip(self.param_names, found.groups()))


def request_line(event: Event) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(method, path)`` from an HTTP API v2 or a legacy v1 event."""

    request_http = (event.get("requestContext") or {}).get("http") or {}
    method = request_http.get("method") or event.get("httpMethod")
    path = request_http.get("path") or event.get("path")
    return method, path


class Router:
    """Dispatches events to the first registered route that matches.

    Routes are tried in registration order, so a pattern such as
    ``/recipes/{id}`` registered before ``/recipes/special`` captures
    ``special`` as an id. Register the more specific path first when that is
    not wanted.
    """

    def __init__(self) -> None:
        self.routes: List[Route] = []

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        self.routes.append(Route(method, path, handler))

    def route(self, event: Event) -> Dict[str, Any]:
        method, path = request_line(event)
        log.info("Routing: %s %s", method, path)

        for route in self.routes:
            if route.method != method:
                continue

            params = route.match(path) if path is not None else None
            if params is None:
                continue

            if params:
                path_parameters = event.get("pathParameters") or {}
                path_parameters.update(params)
                event["pathParameters"] = path_parameters
            return route.handler(event)

        return responses.not_found("Route not found")


__all__ = ["Route", "Router", "compile_pattern", "request_line"]
