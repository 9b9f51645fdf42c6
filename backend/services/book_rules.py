"""
book_rules.py — What a valid book looks like and how its status follows its dates.
"""

from datetime import date

TO_READ = "To-Read"
CURRENTLY_READING = "Currently Reading"
FINISHED = "Finished"
DID_NOT_FINISH = "Did Not Finish"

BOOK_STATUSES = (TO_READ, CURRENTLY_READING, FINISHED, DID_NOT_FINISH)

# Fields a client may write; id, user_id and the timestamps belong to the store
EDITABLE_FIELDS = ("title", "author", "status", "notes", "start_date", "finish_date", "rating")
DATE_FIELDS = ("start_date", "finish_date")
STATUS_INPUTS = ("status",) + DATE_FIELDS


class BookValidationError(ValueError):
    """A book payload was rejected before reaching the store."""


def derive_status(selected: str, start_date: str | None, finish_date: str | None) -> str:
    """
    Status implied by the reading dates at save time.

    A finish date always wins, then a start date, then the explicit selection.
    An explicit "Did Not Finish" is overridden when a finish date is present.
    """
    if finish_date:
        return FINISHED
    if start_date:
        return CURRENTLY_READING
    return selected


def _clean_date(field: str, value) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value)).isoformat()
    except ValueError:
        raise BookValidationError(f"{field} must be a YYYY-MM-DD date")


def normalize_book(data: dict, partial: bool = False) -> dict:
    """
    Validate a book payload and return the storable subset.

    Blank dates become None, author/notes default to "" on create.
    Raises BookValidationError on the first invalid field.
    """
    unknown = set(data) - set(EDITABLE_FIELDS)
    if unknown:
        raise BookValidationError(f"Unknown book field(s): {', '.join(sorted(unknown))}")

    clean = {}
    if "title" in data or not partial:
        title = data.get("title")
        if title is not None and not isinstance(title, str):
            raise BookValidationError("Title must be text")
        title = (title or "").strip()
        if not title:
            raise BookValidationError("Title is required")
        clean["title"] = title

    for field in ("author", "notes"):
        if field in data:
            if data[field] is not None and not isinstance(data[field], str):
                raise BookValidationError(f"{field.capitalize()} must be text")
            clean[field] = data[field] or ""
        elif not partial:
            clean[field] = ""

    # A null status on an update means "unchanged", never a reset to To-Read
    if data.get("status") is not None or not partial:
        status = data.get("status") or TO_READ
        if status not in BOOK_STATUSES:
            raise BookValidationError(f"Unknown status: {status}")
        clean["status"] = status

    for field in DATE_FIELDS:
        if field in data or not partial:
            clean[field] = _clean_date(field, data.get(field))

    if "rating" in data or not partial:
        rating = data.get("rating")
        if rating is not None:
            if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
                raise BookValidationError("Rating must be an integer from 1 to 5")
        clean["rating"] = rating

    return clean
