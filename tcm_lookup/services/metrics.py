from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional, Dict

from tcm_lookup.config import Settings
from tcm_lookup.services.repo.json_repo import _locked  # reuse existing cross-platform lock

logger = logging.getLogger(__name__)


class MetricsLogger:
    """Append-only JSONL logger for latency metrics under data/.

    Writes one JSON object per line with fields:
      - ts: ISO timestamp (UTC)
      - kind: "latency"
      - name: short name (e.g., "generate")
      - duration_ms: float
      - corr: correlation id of the request, when known
      - extra: optional dict with contextual fields (model, outcome)
    """

    def __init__(self, settings: Settings, filename: str = "latency_log.jsonl") -> None:
        self.path = os.path.join(settings.data_dir, filename)

    def log_latency(
        self,
        name: str,
        duration_ms: float,
        extra: Optional[Dict[str, Any]] = None,
        corr_id: Optional[str] = None,
    ) -> None:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "kind": "latency",
            "name": name,
            "duration_ms": float(duration_ms),
        }
        if corr_id:
            entry["corr"] = corr_id
        if extra:
            entry["extra"] = extra
        line = (json.dumps(entry, ensure_ascii=False, separators=(",", ":")) + "\n").encode("utf-8")
        try:
            with _locked(self.path) as f:
                f.seek(0, os.SEEK_END)
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except Exception:
            # Metrics never affect the lookup itself.
            logger.warning("Could not write latency metric to %s", self.path, exc_info=True)
