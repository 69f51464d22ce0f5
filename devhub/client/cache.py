import json
import logging
from pathlib import Path
from typing import Iterable, List

from devhub.schemas.compound import CompoundRead

logger = logging.getLogger(__name__)


class LocalCache:
    """Best-effort JSON file holding the last successfully filtered list."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> List[CompoundRead]:
        if not self.path.exists():
            return []
        try:
            rows = json.loads(self.path.read_text(encoding="utf-8"))
            return [CompoundRead.model_validate(row) for row in rows]
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring unreadable compound cache {self.path}: {e}")
            return []

    def write(self, compounds: Iterable[CompoundRead]) -> None:
        rows = [compound.model_dump(mode="json") for compound in compounds]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(rows), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write compound cache {self.path}: {e}")
