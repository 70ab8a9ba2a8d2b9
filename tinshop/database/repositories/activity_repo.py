from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from ...constants import KEY_ACTIVITY_LOGS
from ...utils.helpers import new_id, now_str
from .document_store import DocumentStore


@dataclass
class ActivityLog:
    id: str
    user_id: str
    user_name: str
    action: str
    details: str
    timestamp: str

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "action": self.action,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "ActivityLog":
        return cls(
            id=str(d["id"]),
            user_id=str(d.get("userId") or ""),
            user_name=d.get("userName") or "",
            action=d.get("action") or "",
            details=d.get("details") or "",
            timestamp=str(d.get("timestamp") or ""),
        )


class ActivityRepo:
    """Append-only; newest entry first."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def append(self, user: dict | None, action: str, details: str = "") -> ActivityLog | None:
        if not user:
            return None
        entry = ActivityLog(
            id=new_id(),
            user_id=str(user.get("user_id") or user.get("id") or ""),
            user_name=str(user.get("username") or user.get("name") or ""),
            action=action,
            details=details,
            timestamp=now_str(),
        )
        rows = self.store.load(KEY_ACTIVITY_LOGS, [])
        rows.insert(0, entry.to_dict())
        self.store.save(KEY_ACTIVITY_LOGS, rows)
        return entry

    def list_logs(self, limit: int | None = None) -> List[ActivityLog]:
        logs = [ActivityLog.from_dict(d) for d in self.store.load(KEY_ACTIVITY_LOGS, [])]
        return logs[:limit] if limit else logs
