from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence


@dataclass
class Ingredient:
    name: str
    quantity: float = 1
    unit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "quantity": self.quantity, "unit": self.unit}


@dataclass
class Step:
    order: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"order": self.order, "text": self.text}


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    id: str
    title: str
    servings: int
    ingredients: List[Ingredient]
    steps: List[Step]
    tags: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, recipe_id: str, data: Dict[str, Any]) -> "Recipe":
        """Build a recipe from a stored document (snake_case keys)."""

        return cls(
            id=recipe_id,
            title=data.get("title", ""),
            servings=data.get("servings", 1),
            ingredients=[Ingredient(**item) for item in data.get("ingredients") or []],
            steps=[Step(**item) for item in data.get("steps") or []],
            tags=list(data.get("tags") or []),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON friendly representation used in API responses."""

        return {
            "id": self.id,
            "title": self.title,
            "servings": self.servings,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
            "steps": [step.to_dict() for step in self.steps],
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class RecipeFilter:
    """Restricts a listing to recipes carrying every tag in ``tags``."""

    tags: tuple[str, ...] = ()

    def matches(self, recipe: Recipe) -> bool:
        return set(self.tags).issubset(recipe.tags)


@dataclass
class RecipeQuery:
    """Listing options accepted by :meth:`RecipeService.get_all_recipes`."""

    limit: int = 50
    skip: int = 0
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    tags: Optional[Sequence[str]] = None


__all__ = ["Ingredient", "Recipe", "RecipeFilter", "RecipeQuery", "Step"]
