"""
SQLite database module for chat records and their messages.
"""
import json
import logging
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .. import config

# Configure logging
logger = logging.getLogger(__name__)

VISIBILITIES = ("private", "public")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatStore:
    """
    SQLite store for chats and their messages.
    """
    def __init__(self, db_path: str = config.CHAT_DB_FILE):
        """Open the database and create tables if they don't exist."""
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(db_path, timeout=30.0, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys=ON")
        if db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
        self._create_tables()

    def _create_tables(self):
        """Create the necessary tables if they don't exist."""
        with self._lock, self._conn:
            self._conn.execute('''
            CREATE TABLE IF NOT EXISTS chats (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                title TEXT,
                visibility TEXT NOT NULL DEFAULT 'private',
                created_at TIMESTAMP,
                updated_at TIMESTAMP
            )
            ''')
            self._conn.execute('''
            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                chat_id TEXT NOT NULL REFERENCES chats(id) ON DELETE CASCADE,
                role TEXT NOT NULL,
                parts TEXT,
                created_at TIMESTAMP
            )
            ''')
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_messages_chat ON messages(chat_id, created_at)"
            )
            self._conn.execute("CREATE INDEX IF NOT EXISTS idx_chats_user ON chats(user_id)")

    def close(self):
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    @staticmethod
    def _chat_row(row: sqlite3.Row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "userId": row["user_id"],
            "title": row["title"],
            "visibility": row["visibility"],
            "createdAt": row["created_at"],
            "updatedAt": row["updated_at"],
        }

    @staticmethod
    def _message_row(row: sqlite3.Row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "chatId": row["chat_id"],
            "role": row["role"],
            "parts": json.loads(row["parts"]) if row["parts"] else [],
            "createdAt": row["created_at"],
        }

    def upsert_chat(
        self,
        chat_id: str,
        user_id: str,
        title: Optional[str] = None,
        visibility: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a chat, or update the title/visibility of the caller's own chat.

        Raises:
            ValueError: on an unknown visibility
            PermissionError: when the id belongs to another user
        """
        if visibility is not None and visibility not in VISIBILITIES:
            raise ValueError(f"Unknown visibility: {visibility}")

        with self._lock, self._conn:
            row = self._conn.execute("SELECT * FROM chats WHERE id = ?", (chat_id,)).fetchone()
            now = _now()
            if row is None:
                self._conn.execute(
                    "INSERT INTO chats (id, user_id, title, visibility, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (chat_id, user_id, title, visibility or "private", now, now),
                )
            elif row["user_id"] != user_id:
                raise PermissionError(f"Chat {chat_id} belongs to another user")
            else:
                self._conn.execute(
                    "UPDATE chats SET title = COALESCE(?, title), visibility = COALESCE(?, visibility), "
                    "updated_at = ? WHERE id = ?",
                    (title, visibility, now, chat_id),
                )
            row = self._conn.execute("SELECT * FROM chats WHERE id = ?", (chat_id,)).fetchone()
        logger.debug(f"Upserted chat {chat_id}")
        return self._chat_row(row)

    def find_chat(self, chat_id: str, user_id: str, include_messages: bool = True) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM chats WHERE id = ? AND user_id = ?", (chat_id, user_id)
            ).fetchone()
            if row is None:
                return None
            chat = self._chat_row(row)
            if include_messages:
                rows = self._conn.execute(
                    "SELECT * FROM messages WHERE chat_id = ? ORDER BY created_at, rowid", (chat_id,)
                ).fetchall()
                chat["messages"] = [self._message_row(message) for message in rows]
        return chat

    def list_chats(self, user_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM chats WHERE user_id = ? ORDER BY updated_at DESC", (user_id,)
            ).fetchall()
        return [self._chat_row(row) for row in rows]

    def delete_chat(self, chat_id: str, user_id: str) -> bool:
        with self._lock, self._conn:
            cursor = self._conn.execute(
                "DELETE FROM chats WHERE id = ? AND user_id = ?", (chat_id, user_id)
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Deleted chat {chat_id}")
        return deleted

    def append_messages(
        self,
        chat_id: str,
        user_id: str,
        messages: Iterable[Dict[str, Any]],
        title: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Append messages to a chat, creating the chat first when it does not
        exist. Messages without an id get a generated one.
        """
        self.upsert_chat(chat_id, user_id, title=title)
        with self._lock, self._conn:
            for message in messages:
                self._conn.execute(
                    "INSERT OR REPLACE INTO messages (id, chat_id, role, parts, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        message.get("id") or uuid.uuid4().hex,
                        chat_id,
                        message["role"],
                        json.dumps(message.get("parts") or []),
                        _now(),
                    ),
                )
        return self.find_chat(chat_id, user_id)
