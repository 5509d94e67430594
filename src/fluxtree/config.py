"""Runtime settings resolved from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from fluxtree.core.types import to_int
from fluxtree.persistence.config import DatabaseConfig


@dataclass
class FluxSettings:
    """Settings for the CLI and embedding applications.

    Attributes:
        database: Database connection configuration
        metadata_path: Directory holding ``blocks/`` and ``tables/`` YAML files
        log_level: Root log level name
        workspace: Draft workspace to operate in, 0 for live
    """

    database: DatabaseConfig
    metadata_path: Path
    log_level: str = "WARNING"
    workspace: int = 0

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> FluxSettings:
        """Create settings from environment variables.

        The database URL comes from DATABASE_URL, else FLUXTREE_DB_PATH (a
        SQLite file), else ``<base_path>/data/fluxtree.db``.
        FLUXTREE_METADATA_PATH, FLUXTREE_LOG_LEVEL and FLUXTREE_WORKSPACE
        override the remaining defaults.
        """
        base_path = base_path or Path.cwd()
        metadata_path = os.environ.get("FLUXTREE_METADATA_PATH")
        return cls(
            database=DatabaseConfig(url=database_url(base_path)),
            metadata_path=Path(metadata_path) if metadata_path else base_path / "metadata",
            log_level=os.environ.get("FLUXTREE_LOG_LEVEL", "WARNING").upper(),
            workspace=to_int(os.environ.get("FLUXTREE_WORKSPACE")),
        )


def database_url(base_path: Path) -> str:
    url = os.environ.get("DATABASE_URL")
    if url:
        return url
    db_path = os.environ.get("FLUXTREE_DB_PATH") or base_path / "data" / "fluxtree.db"
    return f"sqlite:///{db_path}"


def configure_logging(level: str) -> None:
    """Configure the root logger once for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
