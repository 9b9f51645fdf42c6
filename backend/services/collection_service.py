"""
collection_service.py — The in-memory mirror of one user's books.

Every successful mutation is followed by a full reload from the store; the list
is only ever replaced wholesale, never patched in place. Store failures are
logged and leave the previous list untouched.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable

from services.book_rules import STATUS_INPUTS, TO_READ, derive_status, normalize_book
from services.book_view import ViewState, status_counts
from services.table_service import Table, TableError

logger = logging.getLogger(__name__)


class BookCollection:
    """All books owned by one user, kept in sync by reloading after each write."""

    def __init__(self, table: Table, user_id: str):
        self.table = table
        self.user_id = user_id
        self._books: list[dict] = []
        self._listeners: list[Callable[[list[dict]], None]] = []
        self.loaded = False
        self.last_error: str | None = None

    @property
    def books(self) -> list[dict]:
        return self._books

    def get(self, book_id) -> dict | None:
        for book in self._books:
            if str(book.get("id")) == str(book_id):
                return book
        return None

    # ------------------------------------------------------------------
    def subscribe(self, callback: Callable[[list[dict]], None]) -> Callable[[], None]:
        """Call `callback(books)` after every replacement. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _replace(self, books: list[dict]) -> None:
        self._books = books
        self.loaded = True
        for callback in list(self._listeners):
            callback(books)

    def _fail(self, action: str, error) -> bool:
        logger.error(f"Error {action}: {error}")
        self.last_error = str(error)
        return False

    # ------------------------------------------------------------------
    def load(self) -> bool:
        """Fetch the user's books newest first and replace the mirror with them."""
        try:
            rows = self.table.select(
                filters={"user_id": self.user_id}, order_by="created_at", descending=True
            )
        except TableError as e:
            return self._fail("fetching books", e)

        self.last_error = None
        self._replace(list(rows))
        return True

    def save(self, data: dict, existing_id=None) -> bool:
        """
        Insert a new book, or patch `existing_id` with only the supplied fields.

        Status is re-derived from the dates before anything is sent; for an
        update the stored row, not the mirror, supplies the fields not being changed. Raises
        BookValidationError for an invalid payload; store failures return False.
        """
        if existing_id is None:
            record = normalize_book(data)
            record["status"] = derive_status(record["status"], record["start_date"], record["finish_date"])
            record["user_id"] = self.user_id
            try:
                self.table.insert(record)
            except TableError as e:
                return self._fail("adding book", e)
        else:
            changes = normalize_book(data, partial=True)
            if any(field in changes for field in STATUS_INPUTS):
                # Derive against the stored row; the mirror may predate another writer
                try:
                    current = self.table.select(filters={"id": existing_id, "user_id": self.user_id})
                except TableError as e:
                    return self._fail("updating book", e)
                if not current:
                    return self._fail("updating book", f"book {existing_id} not found")
                merged = {**current[0], **changes}
                changes["status"] = derive_status(
                    merged.get("status") or TO_READ, merged.get("start_date"), merged.get("finish_date")
                )
            changes["updated_at"] = datetime.now(timezone.utc).isoformat()
            try:
                updated = self.table.update(existing_id, changes, filters={"user_id": self.user_id})
            except TableError as e:
                return self._fail("updating book", e)
            if updated is None:
                return self._fail("updating book", f"book {existing_id} not found")

        self.load()
        return True

    def remove(self, book_id, confirm: Callable[[dict | None], bool]) -> bool:
        """
        Delete a book once `confirm` agrees.

        `confirm` receives the mirrored record (None if it is not in the mirror).
        A declined confirmation issues nothing and is not an error.
        """
        if not confirm(self.get(book_id)):
            return False
        try:
            deleted = self.table.delete(book_id, filters={"user_id": self.user_id})
        except TableError as e:
            return self._fail("deleting book", e)
        if not deleted:
            return self._fail("deleting book", f"book {book_id} not found")

        self.load()
        return True


class ReadingListSession:
    """One user's collection plus the view they are looking at it through."""

    def __init__(self, collection: BookCollection, view: ViewState | None = None):
        self.collection = collection
        self.view = view or ViewState()
        self.visible: list[dict] = []
        self.counts: dict[str, int] = status_counts([])
        self._unsubscribe = collection.subscribe(self._recompute)
        self._recompute(collection.books)

    def _recompute(self, books: list[dict] | None = None) -> None:
        if books is None:
            books = self.collection.books
        self.visible = self.view.apply(books)
        self.counts = status_counts(books)

    def ensure_loaded(self) -> None:
        if not self.collection.loaded:
            self.collection.load()

    def set_filter(self, status: str) -> None:
        self.view.set_filter(status)
        self._recompute()

    def toggle_sort(self, field: str) -> None:
        self.view.toggle_sort(field)
        self._recompute()

    def set_view_mode(self, mode: str) -> None:
        self.view.set_view_mode(mode)

    def close(self) -> None:
        self._unsubscribe()

    def snapshot(self) -> dict:
        return {
            "books": list(self.visible),
            "counts": dict(self.counts),
            **self.view.to_dict(),
            "loaded": self.collection.loaded,
            "last_error": self.collection.last_error,
        }


class SessionRegistry:
    """
    Per-user reading-list sessions.

    A session idle for longer than `ttl_seconds` is dropped on the next lookup,
    so users who never sign out do not pin their books in memory.
    """

    def __init__(self, table: Table, ttl_seconds: int = 1800):
        self.table = table
        self.ttl_seconds = ttl_seconds
        # user_id → {session, last_seen}
        self._sessions: dict[str, dict] = {}

    def get(self, user_id: str) -> ReadingListSession:
        self.clear_expired()
        entry = self._sessions.get(user_id)
        if entry is None:
            entry = {"session": ReadingListSession(BookCollection(self.table, user_id))}
            self._sessions[user_id] = entry
        entry["last_seen"] = time.time()
        return entry["session"]

    def drop(self, user_id: str) -> None:
        entry = self._sessions.pop(user_id, None)
        if entry is not None:
            entry["session"].close()

    def clear_expired(self) -> int:
        """Drop sessions idle past the TTL. Returns how many went."""
        if self.ttl_seconds <= 0:
            return 0
        now = time.time()
        expired = [
            user_id for user_id, entry in self._sessions.items()
            if now - entry["last_seen"] > self.ttl_seconds
        ]
        for user_id in expired:
            self.drop(user_id)
        if expired:
            logger.info(f"Evicted {len(expired)} idle reading-list session(s)")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
