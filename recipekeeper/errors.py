from __future__ import annotations

from typing import Mapping


class RecipeError(Exception):
    """Base class for errors raised by :class:`RecipeService`."""


class DuplicateStepOrder(RecipeError):
    def __init__(self) -> None:
        super().__init__("Step order values must be unique")


class ValidationFailed(RecipeError):
    """Field errors reported by the storage layer, folded into one message."""

    prefix = "Validation failed"

    def __init__(self, fields: Mapping[str, str]) -> None:
        self.fields = dict(fields)
        super().__init__(f"{self.prefix}: {', '.join(self.fields.values())}")


class InvalidQuery(RecipeError, ValueError):
    pass


class StorageError(Exception):
    """Base class for errors raised at the persistence boundary."""


class RecordValidationError(StorageError):
    def __init__(self, fields: Mapping[str, str]) -> None:
        self.fields = dict(fields)
        super().__init__(f"Invalid recipe document: {self.fields}")


class MalformedIdentifier(StorageError):
    def __init__(self, recipe_id: object) -> None:
        self.recipe_id = recipe_id
        super().__init__(f"'{recipe_id}' is not a valid recipe identifier.")


class StorageUnavailable(StorageError):
    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Recipe storage is unavailable: {cause}")


class UploadRejected(ValueError):
    pass


class UnsupportedFileType(UploadRejected):
    pass


class FileTooLarge(UploadRejected):
    pass


__all__ = [
    "DuplicateStepOrder",
    "FileTooLarge",
    "InvalidQuery",
    "MalformedIdentifier",
    "RecipeError",
    "RecordValidationError",
    "StorageError",
    "StorageUnavailable",
    "UnsupportedFileType",
    "UploadRejected",
    "ValidationFailed",
]
