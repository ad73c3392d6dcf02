"""Signed, append-only audit trail of mutating admin operations.

Each line of ``<audit dir>/authz-events.jsonl`` is one JSON event:

    timestamp, event_type, project_id, subject, operator, status, success,
    details (counts, upgrade flag, tenant ...), error and failures (only on
    Failure results) and signature (only when a signing key is configured)

The signature is HMAC-SHA256 over the event without its signature field,
serialized with sorted keys and compact separators.
"""
from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from authz_admin.core.operation_result import OperationResult

logger = logging.getLogger(__name__)

AUDIT_FILE_NAME = "authz-events.jsonl"

EVENT_TYPES = frozenset({
    "create_application", "create_tenant", "create_user", "create_federated_app",
    "create_role", "update_role", "delete_role",
    "create_schema", "delete_schema",
    "create_relations", "delete_relations",
    "migrate_user",
})


def _canonical(event: Dict[str, Any]) -> bytes:
    return json.dumps(event, sort_keys=True, separators=(",", ":")).encode("utf-8")


class AuditLog:
    """Audit trail rooted at one directory.

    Args:
        directory: Where ``authz-events.jsonl`` lives (created 0700 on first write)
        signing_key: HMAC key; events are written unsigned when empty
    """

    def __init__(self, directory: Union[str, Path], signing_key: Optional[str] = ""):
        self.directory = Path(directory)
        self._key = (signing_key or "").strip().encode("utf-8")

    @property
    def path(self) -> Path:
        return self.directory / AUDIT_FILE_NAME

    @property
    def signed(self) -> bool:
        return bool(self._key)

    def _signature(self, event: Dict[str, Any]) -> str:
        return hmac.new(self._key, _canonical(event), hashlib.sha256).hexdigest()

    def build_event(
        self,
        event_type: str,
        subject: str,
        result: OperationResult,
        *,
        project_id: str,
        operator: str,
        **details: Any,
    ) -> Dict[str, Any]:
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown audit event type: {event_type}")
        event: Dict[str, Any] = {
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "event_type": event_type,
            "project_id": project_id,
            "subject": subject,
            "operator": operator,
            "status": result.status.value,
            "success": result.is_success,
            "details": {key: value for key, value in details.items() if value is not None},
        }
        if not result.is_success:
            event["error"] = result.error_message
            if result.failures:
                event["failures"] = [
                    {"identifier": identifier, "reason": reason} for identifier, reason in result.failures
                ]
        if self._key:
            event["signature"] = self._signature(event)
        return event

    def append(self, event: Dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.directory.chmod(0o700)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(event, ensure_ascii=False) + "\n")
        self.path.chmod(0o600)

    def record(
        self,
        event_type: str,
        subject: str,
        result: OperationResult,
        *,
        project_id: str,
        operator: str,
        **details: Any,
    ) -> bool:
        """Append the outcome of one operation; never raises.

        Returns:
            False when the event could not be written (the failure is logged)
        """
        try:
            event = self.build_event(
                event_type, subject, result, project_id=project_id, operator=operator, **details
            )
            self.append(event)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("[audit] Could not record %s for %s: %s", event_type, subject, e)
            return False
        return True

    def verify(self) -> Tuple[int, int]:
        """Count events and events whose signature matches this log's key.

        Returns:
            (total events, events with a valid signature)
        """
        if not self.path.exists():
            return 0, 0
        total = valid = 0
        with self.path.open("r", encoding="utf-8") as fh:
            for line in fh:
                if not line.strip():
                    continue
                total += 1
                try:
                    event = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if not isinstance(event, dict):
                    continue
                stored = event.pop("signature", "")
                if stored and self._key and hmac.compare_digest(stored, self._signature(event)):
                    valid += 1
        return total, valid
