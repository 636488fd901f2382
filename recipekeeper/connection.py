"""Process wide, lazily opened resources.

Warm serverless instances serve many invocations from one process, so the
storage client is opened on first use and then reused. Concurrent first
calls share one initialization.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Generic, Optional, TypeVar

from .config import Settings
from .gcp_storage import FirestoreRecipeStorage
from .memory_storage import InMemoryRecipeStorage
from .storage import RecipeRepository

log = logging.getLogger("recipekeeper.connection")

T = TypeVar("T")

UNINITIALIZED = "uninitialized"
INITIALIZING = "initializing"
READY = "ready"


class LazyResource(Generic[T]):
    """Single-flight cell holding a value built on first :meth:`get`.

    The first caller runs ``factory``; callers arriving meanwhile wait on the
    same future. If the factory fails every waiter sees the error and the
    cell goes back to uninitialized so a later call can try again.
    """

    def __init__(self, factory: Callable[[], T], *, name: str = "resource") -> None:
        self._factory = factory
        self._name = name
        self._lock = threading.Lock()
        self._future: Optional[Future[T]] = None

    @classmethod
    def ready(cls, value: T, *, name: str = "resource") -> "LazyResource[T]":
        cell = cls(lambda: value, name=name)
        future: Future[T] = Future()
        future.set_result(value)
        cell._future = future
        return cell

    @property
    def state(self) -> str:
        future = self._future
        if future is None:
            return UNINITIALIZED
        return READY if future.done() else INITIALIZING

    def get(self) -> T:
        with self._lock:
            future = self._future
            owner = future is None
            if future is None:
                future = self._future = Future()

        if not owner:
            return future.result()

        log.info("Initializing %s", self._name)
        try:
            value = self._factory()
        except BaseException as exc:
            with self._lock:
                self._future = None
            future.set_exception(exc)
            raise
        future.set_result(value)
        return value

    def reset(self) -> None:
        with self._lock:
            self._future = None


def open_storage(settings: Settings) -> RecipeRepository:
    if settings.storage_backend == "memory":
        log.warning("Using in-memory recipe storage; data is lost on restart")
        return InMemoryRecipeStorage()
    return FirestoreRecipeStorage.from_settings(settings)


__all__ = ["INITIALIZING", "LazyResource", "READY", "UNINITIALIZED", "open_storage"]
