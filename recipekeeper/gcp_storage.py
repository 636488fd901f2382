from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from google.api_core import exceptions as gcloud_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .config import Settings
from .errors import MalformedIdentifier, StorageUnavailable
from .models import Recipe, RecipeFilter
from .schema import validate_recipe_document
from .storage import ASCENDING, RecipeRepository

log = logging.getLogger("recipekeeper.gcp_storage")

MAX_DOCUMENT_ID_BYTES = 1500

_UNAVAILABLE = (
    gcloud_exceptions.ServiceUnavailable,
    gcloud_exceptions.DeadlineExceeded,
    gcloud_exceptions.RetryError,
)


def _check_document_id(recipe_id: Any) -> None:
    if not isinstance(recipe_id, str) or not recipe_id:
        raise MalformedIdentifier(recipe_id)
    if "/" in recipe_id or recipe_id in {".", ".."}:
        raise MalformedIdentifier(recipe_id)
    if recipe_id.startswith("__") and recipe_id.endswith("__"):
        raise MalformedIdentifier(recipe_id)
    if len(recipe_id.encode("utf-8")) > MAX_DOCUMENT_ID_BYTES:
        raise MalformedIdentifier(recipe_id)


class FirestoreRecipeCursor:
    """Builds a Firestore query once the cursor is materialized.

    Firestore accepts a single ``array_contains`` clause per query, so only
    the first requested tag is filtered server side. When more tags are
    requested the remaining ones are checked here and pagination happens
    after that check.
    """

    def __init__(self, collection: Any, recipe_filter: RecipeFilter) -> None:
        self._collection = collection
        self._filter = recipe_filter
        self._sort: Optional[tuple[str, str]] = None
        self._skip = 0
        self._limit = 0

    def sort(self, field: str, direction: str = ASCENDING) -> "FirestoreRecipeCursor":
        self._sort = (field, direction)
        return self

    def skip(self, count: int) -> "FirestoreRecipeCursor":
        self._skip = max(count, 0)
        return self

    def limit(self, count: int) -> "FirestoreRecipeCursor":
        self._limit = max(count, 0)
        return self

    def to_list(self) -> List[Recipe]:
        query = self._collection
        tags = self._filter.tags
        if tags:
            query = query.where(filter=FieldFilter("tags", "array_contains", tags[0]))
        if self._sort is not None:
            field, direction = self._sort
            query = query.order_by(field, direction=direction)

        if len(tags) <= 1:
            if self._skip:
                query = query.offset(self._skip)
            if self._limit:
                query = query.limit(self._limit)
            return list(self._stream(query))

        recipes = [recipe for recipe in self._stream(query) if self._filter.matches(recipe)]
        recipes = recipes[self._skip:]
        if self._limit:
            recipes = recipes[: self._limit]
        return recipes

    def _stream(self, query: Any) -> Iterable[Recipe]:
        try:
            for doc in query.stream():
                yield Recipe.from_document(doc.id, doc.to_dict() or {})
        except _UNAVAILABLE as exc:
            raise StorageUnavailable(exc) from exc


class FirestoreRecipeStorage(RecipeRepository):
    """GCP backed recipe storage using a Firestore collection."""

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        database: Optional[str] = None,
        collection_name: str = "recipes",
        client: Optional[firestore.Client] = None,
    ) -> None:
        self._project = project
        self._collection_name = collection_name

        if client is None:
            client = firestore.Client(project=project, database=database)
        self._firestore_client = client
        self._collection = self._firestore_client.collection(collection_name)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirestoreRecipeStorage":
        log.info(
            "Connecting to Firestore database %s (collection %s)",
            settings.firestore_database,
            settings.recipes_collection,
        )
        return cls(
            project=settings.gcp_project,
            database=settings.firestore_database,
            collection_name=settings.recipes_collection,
        )

    def create(self, document: Mapping[str, Any]) -> Recipe:
        doc = validate_recipe_document(document)
        doc["created_at"] = firestore.SERVER_TIMESTAMP
        doc["updated_at"] = firestore.SERVER_TIMESTAMP

        try:
            doc_ref = self._collection.document()
            doc_ref.set(doc)
            snapshot = doc_ref.get()
        except _UNAVAILABLE as exc:
            raise StorageUnavailable(exc) from exc

        return Recipe.from_document(snapshot.id, snapshot.to_dict() or {})

    def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        _check_document_id(recipe_id)

        try:
            snapshot = self._collection.document(recipe_id).get()
        except ValueError as exc:
            raise MalformedIdentifier(recipe_id) from exc
        except _UNAVAILABLE as exc:
            raise StorageUnavailable(exc) from exc

        if not snapshot.exists:
            return None
        return Recipe.from_document(snapshot.id, snapshot.to_dict() or {})

    def find(self, recipe_filter: RecipeFilter) -> FirestoreRecipeCursor:
        return FirestoreRecipeCursor(self._collection, recipe_filter)


__all__ = ["FirestoreRecipeCursor", "FirestoreRecipeStorage"]
