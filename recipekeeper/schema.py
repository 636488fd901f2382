"""Document schema shared by every storage backend.

Backends call :func:`validate_recipe_document` right before writing so that a
bad document is reported the same way whichever engine stores it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import RecordValidationError

TITLE_MAX_LENGTH = 200

_LABELS = {
    "title": "Recipe title",
    "servings": "Number of servings",
    "ingredients": "ingredient",
    "steps": "step",
    "name": "Ingredient name",
    "quantity": "Ingredient quantity",
    "unit": "Ingredient unit",
    "order": "Step order",
    "text": "Step text",
    "tags": "Tags",
}

_LIST_FIELDS = {"ingredients", "steps"}


class _Document(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class IngredientDocument(_Document):
    name: str = Field(min_length=1)
    quantity: Union[int, float] = 1
    unit: Optional[str] = None

    @field_validator("unit")
    @classmethod
    def _lowercase_unit(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value is not None else None


class StepDocument(_Document):
    order: int = Field(ge=1, strict=True)
    text: str = Field(min_length=1)


class RecipeDocument(_Document):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    servings: int = Field(ge=1)
    ingredients: List[IngredientDocument] = Field(min_length=1)
    steps: List[StepDocument] = Field(min_length=1)
    tags: List[str] = Field(default_factory=list)


def validate_recipe_document(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the cleaned document or raise :class:`RecordValidationError`."""

    try:
        document = RecipeDocument.model_validate(data)
    except ValidationError as exc:
        raise RecordValidationError(_field_messages(exc)) from exc
    return document.model_dump()


def _field_messages(exc: ValidationError) -> Dict[str, str]:
    messages: Dict[str, str] = {}
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "document"
        messages.setdefault(path, _describe(error))
    return messages


def _describe(error: Dict[str, Any]) -> str:
    names = [part for part in error["loc"] if isinstance(part, str)]
    name = names[-1] if names else ""
    label = _LABELS.get(name, name or "Recipe")
    kind = error["type"]
    ctx = error.get("ctx") or {}

    if name in _LIST_FIELDS and kind in {"missing", "too_short"}:
        return f"At least one {label} is required"
    if kind in {"missing", "string_too_short"}:
        return f"{label} is required"
    if kind == "string_too_long":
        return f"{label} cannot exceed {ctx.get('max_length')} characters"
    if kind == "greater_than_equal":
        return f"{label} must be at least {ctx.get('ge')}"
    return f"{label}: {error['msg']}"


__all__ = ["RecipeDocument", "TITLE_MAX_LENGTH", "validate_recipe_document"]
