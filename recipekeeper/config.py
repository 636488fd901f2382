from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

STORAGE_BACKENDS = ("firestore", "memory")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _lookup(environ: Mapping[str, str], environment: str, key: str) -> Optional[str]:
    """Return ``key`` from the environment, falling back to ``<ENV>_<key>``."""

    value = environ.get(key)
    if value:
        return value
    return environ.get(f"{environment.upper()}_{key}") or None


@dataclass(frozen=True)
class Settings:
    environment: str = "preprod"
    storage_backend: str = "firestore"
    gcp_project: Optional[str] = None
    firestore_database: str = "(default)"
    recipes_collection: str = "recipes"
    upload_bucket: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Values may be given per deployment environment, e.g. with
        ``ENVIRONMENT=prod`` the project is read from ``GCP_PROJECT`` or,
        when unset, from ``PROD_GCP_PROJECT``.
        """

        environ = os.environ if environ is None else environ
        environment = environ.get("ENVIRONMENT") or "preprod"

        storage_backend = (_lookup(environ, environment, "RECIPES_STORAGE") or "firestore").lower()
        if storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown RECIPES_STORAGE '{storage_backend}'. "
                f"Expected one of: {', '.join(STORAGE_BACKENDS)}."
            )

        return cls(
            environment=environment,
            storage_backend=storage_backend,
            gcp_project=_lookup(environ, environment, "GCP_PROJECT"),
            firestore_database=_lookup(environ, environment, "FIRESTORE_DATABASE") or "(default)",
            recipes_collection=_lookup(environ, environment, "RECIPES_COLLECTION") or "recipes",
            upload_bucket=_lookup(environ, environment, "GCS_BUCKET"),
            log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = ["Settings", "configure_logging"]
