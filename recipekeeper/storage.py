from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol

from .models import Recipe, RecipeFilter

# Same values as ``google.cloud.firestore.Query.ASCENDING``/``DESCENDING``.
ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"

SORTABLE_FIELDS = ("title", "servings", "created_at", "updated_at")


class RecipeCursor(Protocol):
    """Lazy result set returned by :meth:`RecipeRepository.find`.

    Sorting, skipping and limiting are applied in that order when the cursor
    is materialized, whatever order the calls were chained in. A limit of
    ``0`` means no limit.
    """

    def sort(self, field: str, direction: str = ASCENDING) -> "RecipeCursor":
        """Order results by a single field."""

    def skip(self, count: int) -> "RecipeCursor":
        """Drop the first ``count`` matching recipes."""

    def limit(self, count: int) -> "RecipeCursor":
        """Return at most ``count`` recipes."""

    def to_list(self) -> List[Recipe]:
        """Run the query and return the matching recipes."""


class RecipeRepository(Protocol):
    """Protocol describing the behaviour required by :class:`RecipeService`."""

    def create(self, document: Mapping[str, Any]) -> Recipe:
        """Validate and persist a new recipe.

        Raises :class:`~recipekeeper.errors.RecordValidationError` when the
        document does not satisfy the recipe schema.
        """

    def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """Return a recipe or ``None`` if it does not exist.

        Raises :class:`~recipekeeper.errors.MalformedIdentifier` when
        ``recipe_id`` can never name a stored recipe.
        """

    def find(self, recipe_filter: RecipeFilter) -> RecipeCursor:
        """Return a cursor over the recipes matching ``recipe_filter``."""


__all__ = ["ASCENDING", "DESCENDING", "SORTABLE_FIELDS", "RecipeCursor", "RecipeRepository"]
