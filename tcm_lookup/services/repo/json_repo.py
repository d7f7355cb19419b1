from __future__ import annotations

import io
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from tcm_lookup.config import Settings
from tcm_lookup.services.exceptions import ItemExistsError, RepoError
from .base import ItemRepo

logger = logging.getLogger(__name__)


# Cross-platform file lock (fcntl for *nix; msvcrt for Windows)
@contextmanager
def _locked(path: str) -> Iterator[io.FileIO]:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    f = open(path, "a+b")  # create if missing
    locker = None
    try:
        try:
            import fcntl  # type: ignore
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            locker = ("fcntl", None)
        except ImportError:
            try:
                import msvcrt  # type: ignore
                msvcrt.locking(f.fileno(), msvcrt.LK_LOCK, 1)
                locker = ("msvcrt", 1)
            except (ImportError, OSError) as e:
                raise RepoError(f"Could not lock file {path}: {e}") from e
        yield f
    finally:
        # Unlock even when the body raised.
        try:
            if locker is not None and locker[0] == "fcntl":
                import fcntl  # type: ignore
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            elif locker is not None:
                import msvcrt  # type: ignore
                f.seek(0)
                msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, locker[1])
        except OSError:
            logger.warning("Could not unlock %s", path, exc_info=True)
        f.close()


def _atomic_write(path: str, data: bytes) -> None:
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=d)
    try:
        with os.fdopen(fd, "wb") as w:
            w.write(data)
            w.flush()
            os.fsync(w.fileno())
        os.replace(tmp, path)
    except OSError as e:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise RepoError(f"Atomic write failed for {path}: {e}") from e


class JSONItemRepo(ItemRepo):
    """Single-file item store for local development.

    Same contract as the DynamoDB store: first record whose NameLowercase
    matches wins, and an insert whose ItemID is already present is rejected.
    Nothing stops two records sharing a NameLowercase.
    """

    def __init__(self, settings: Settings):
        self.path = settings.items_file

    def _read(self, f: io.FileIO) -> List[Dict[str, Any]]:
        f.seek(0)
        raw = f.read() or b"{}"
        return json.loads(raw.decode("utf-8")).get("items", [])

    def find_by_name(self, name_lowercase: str) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return None
        try:
            with _locked(self.path) as f:
                items = self._read(f)
        except (OSError, ValueError) as e:
            raise RepoError(f"Failed to query items in {self.path}: {e}") from e
        return next((it for it in items if it.get("NameLowercase") == name_lowercase), None)

    def insert(self, record: Dict[str, Any]) -> None:
        try:
            with _locked(self.path) as f:
                items = self._read(f)
                if any(it.get("ItemID") == record["ItemID"] for it in items):
                    raise ItemExistsError(f"Item {record['ItemID']} already exists")
                items.append(record)
                payload = json.dumps({"items": items}, ensure_ascii=False,
                                     separators=(",", ":")).encode("utf-8")
                _atomic_write(self.path, payload)
        except RepoError:
            raise
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise RepoError(f"Failed to save item to {self.path}: {e}") from e
