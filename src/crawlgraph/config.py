"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DB_ENV_VAR = "CRAWLGRAPH_DB"


def _get_default_db_path() -> Path:
    """Get the default database path for the current environment."""
    override = os.environ.get(DB_ENV_VAR)
    if override:
        return Path(override)

    # When running from a checkout, prefer local data/ if it exists
    local_db = Path("data/crawlgraph.db")
    if local_db.exists():
        return local_db

    return Path.home() / ".crawlgraph" / "crawlgraph.db"


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    page_size: int = 50

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        """Anchor a relative database path at ``base_dir`` when one is given."""
        db_path = Path(self.db_path)
        if db_path.is_absolute() or base_dir is None:
            return db_path
        return base_dir / db_path
