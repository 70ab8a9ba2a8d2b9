import sqlite3

from PySide6.QtCore import QObject

from ..database.repositories.activity_repo import ActivityRepo
from ..database.repositories.document_store import DocumentStore


class BaseModule(QObject):
    """
    Shared plumbing for feature controllers: one DocumentStore over the
    connection, the signed-in user and the activity trail.
    """

    def __init__(self, conn: sqlite3.Connection, current_user: dict | None = None):
        super().__init__()
        self.conn = conn
        self.user = current_user
        self.store = DocumentStore(conn)
        self.activity = ActivityRepo(self.store)

    @property
    def user_name(self) -> str:
        if not self.user:
            return ""
        return str(self.user.get("username") or self.user.get("name") or "")

    def _audit(self, action: str, details: str = "") -> None:
        self.activity.append(self.user, action, details)
