import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

from app.utils.time import iso_now


class AuditLogger:
    """
    Append-only trail of pickup data changes, one JSON object per line.

    Without a ``log_path`` the records go to the ``pickup.audit`` logger and
    end up wherever application logging sends them. With a path the logger
    gets its own rotating file and stops propagating, so audit records do
    not repeat in the application log.
    """

    def __init__(self, log_path: str | None = None, level: str = "INFO") -> None:
        self.log_path = Path(log_path) if log_path else None

        self.logger = logging.getLogger("pickup.audit")
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        if self.log_path is not None:
            self._attach_file_handler(self.log_path)

    def _attach_file_handler(self, path: Path) -> None:
        target = str(path.resolve())
        for handler in self.logger.handlers:
            if isinstance(handler, RotatingFileHandler) and handler.baseFilename == target:
                return

        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=str(path),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=30,
            encoding="utf-8",
        )
        # The timestamp is part of the JSON record
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def log_event(self, actor: str, action: str, resource: str, outcome: str, **metadata: Any) -> None:
        """Write one record, e.g. ``actor="staff:3", action="create_note", resource="note:9"``."""
        payload: Dict[str, Any] = {
            "ts": iso_now(timespec="seconds"),
            "actor": actor,
            "action": action,
            "resource": resource,
            "outcome": outcome,
        }
        if metadata:
            payload["meta"] = metadata

        self.logger.info(json.dumps(payload, default=str))
