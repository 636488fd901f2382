from __future__ import annotations

import logging
from numbers import Real
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional

from .errors import (
    DuplicateStepOrder,
    InvalidQuery,
    MalformedIdentifier,
    RecordValidationError,
    ValidationFailed,
)
from .models import Recipe, RecipeFilter, RecipeQuery
from .storage import ASCENDING, DESCENDING, SORTABLE_FIELDS, RecipeRepository

log = logging.getLogger("recipekeeper.service")

# API field names mapped to stored field names.
SORT_ALIASES = {"createdAt": "created_at", "updatedAt": "updated_at"}


def normalize_tags(tags: Iterable[Any]) -> List[Any]:
    """Trim and lowercase tags, dropping repeats but keeping first-seen order.

    Non-string values are passed through untouched for the schema to reject.
    """

    normalized: List[Any] = []
    for tag in tags:
        if isinstance(tag, str):
            tag = tag.strip().lower()
        if tag not in normalized:
            normalized.append(tag)
    return normalized


def sort_steps(steps: List[Any]) -> List[Any]:
    """Return steps ordered by ``order``.

    Steps are left as given when an order is missing or not a number, the
    schema reports those.
    """

    orders = [step.get("order") if isinstance(step, Mapping) else None for step in steps]
    if not all(isinstance(order, Real) and not isinstance(order, bool) for order in orders):
        return list(steps)
    return sorted(steps, key=lambda step: step["order"])


def check_step_orders(steps: List[Any]) -> None:
    orders = [step.get("order") for step in steps if isinstance(step, Mapping)]
    orders = [order for order in orders if isinstance(order, Hashable)]
    if len(set(orders)) < len(orders):
        raise DuplicateStepOrder()


class RecipeService:
    """Business rules around recipes, independent of the HTTP layer."""

    def __init__(self, repository: RecipeRepository) -> None:
        self._repository = repository

    def add_recipe(self, data: Mapping[str, Any]) -> Recipe:
        """Validate, normalize and store a new recipe.

        Raises :class:`DuplicateStepOrder` before touching storage when two
        steps share an order, and :class:`ValidationFailed` when storage
        rejects the document. Other storage errors propagate as they are.
        """

        document: Dict[str, Any] = dict(data)
        steps = document.get("steps")
        tags = document.get("tags")

        if isinstance(steps, list) and steps:
            check_step_orders(steps)
            document["steps"] = sort_steps(steps)

        if isinstance(tags, list) and tags:
            document["tags"] = normalize_tags(tags)

        try:
            recipe = self._repository.create(document)
        except RecordValidationError as exc:
            raise ValidationFailed(exc.fields) from exc

        log.info("Created recipe %s", recipe.id)
        return recipe

    def get_recipe_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """Return the recipe, or ``None`` if it is missing.

        An identifier the storage cannot parse names no recipe, so it also
        yields ``None``.
        """

        try:
            return self._repository.find_by_id(recipe_id)
        except MalformedIdentifier:
            log.debug("Malformed recipe id %r treated as not found", recipe_id)
            return None

    def get_all_recipes(self, options: Optional[RecipeQuery] = None) -> List[Recipe]:
        """List recipes carrying every tag in ``options.tags``, sorted then paginated.

        Only title, servings, createdAt and updatedAt can be sorted on, each
        needs a Firestore index; other fields raise :class:`InvalidQuery`.
        """

        options = options or RecipeQuery()

        recipe_filter = RecipeFilter(tags=tuple(options.tags)) if options.tags else RecipeFilter()
        field = self._sort_field(options.sort_by)
        direction = DESCENDING if options.sort_order == "desc" else ASCENDING

        return (
            self._repository.find(recipe_filter)
            .sort(field, direction)
            .limit(options.limit)
            .skip(options.skip)
            .to_list()
        )

    @staticmethod
    def _sort_field(sort_by: str) -> str:
        field = SORT_ALIASES.get(sort_by, sort_by)
        if field not in SORTABLE_FIELDS:
            raise InvalidQuery(
                f"Cannot sort by '{sort_by}'. "
                f"Use one of: title, servings, createdAt, updatedAt."
            )
        return field


__all__ = ["RecipeService", "check_step_orders", "normalize_tags", "sort_steps"]
