from __future__ import annotations

import copy
import re
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from .errors import MalformedIdentifier
from .models import Recipe, RecipeFilter
from .schema import validate_recipe_document
from .storage import ASCENDING, DESCENDING, RecipeRepository

_ID_PATTERN = re.compile(r"[0-9a-f]{32}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRecipeCursor:
    def __init__(self, recipes: List[Recipe]) -> None:
        self._recipes = recipes
        self._sort: Optional[tuple[str, str]] = None
        self._skip = 0
        self._limit = 0

    def sort(self, field: str, direction: str = ASCENDING) -> "InMemoryRecipeCursor":
        self._sort = (field, direction)
        return self

    def skip(self, count: int) -> "InMemoryRecipeCursor":
        self._skip = max(count, 0)
        return self

    def limit(self, count: int) -> "InMemoryRecipeCursor":
        self._limit = max(count, 0)
        return self

    def to_list(self) -> List[Recipe]:
        recipes = list(self._recipes)
        if self._sort is not None:
            field, direction = self._sort
            recipes.sort(
                key=lambda recipe: _sort_key(getattr(recipe, field, None)),
                reverse=direction == DESCENDING,
            )
        recipes = recipes[self._skip:]
        if self._limit:
            recipes = recipes[: self._limit]
        return [copy.deepcopy(recipe) for recipe in recipes]


def _sort_key(value: Any) -> tuple[bool, Any]:
    # Missing values sort first, like null in a document store.
    return (value is not None, value)


class InMemoryRecipeStorage(RecipeRepository):
    """Process-local storage backend used for tests and local development."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._recipes: Dict[str, Recipe] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def create(self, document: Mapping[str, Any]) -> Recipe:
        data = validate_recipe_document(document)
        now = self._clock()
        data["created_at"] = now
        data["updated_at"] = now

        recipe = Recipe.from_document(uuid.uuid4().hex, data)
        with self._lock:
            self._recipes[recipe.id] = recipe
        return copy.deepcopy(recipe)

    def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        if not isinstance(recipe_id, str) or not _ID_PATTERN.fullmatch(recipe_id):
            raise MalformedIdentifier(recipe_id)

        recipe = self._recipes.get(recipe_id)
        return copy.deepcopy(recipe) if recipe is not None else None

    def find(self, recipe_filter: RecipeFilter) -> InMemoryRecipeCursor:
        with self._lock:
            recipes = list(self._recipes.values())
        return InMemoryRecipeCursor([recipe for recipe in recipes if recipe_filter.matches(recipe)])


__all__ = ["InMemoryRecipeCursor", "InMemoryRecipeStorage"]
