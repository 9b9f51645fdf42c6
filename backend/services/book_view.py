"""
book_view.py — Filtering, sorting and counting of the book collection.
Everything here is a pure function of its inputs except ViewState, which only
holds the user's current choices.
"""

from services.book_rules import BOOK_STATUSES

ALL = "All"
FILTER_OPTIONS = (ALL,) + BOOK_STATUSES
SORT_FIELDS = ("title", "author", "status", "start_date", "finish_date", "rating")
ASC = "asc"
DESC = "desc"
VIEW_MODES = ("grid", "list")


def filter_books(books: list[dict], status: str = ALL) -> list[dict]:
    """Books with the given status, or all of them for the "All" sentinel."""
    if status == ALL:
        return list(books)
    return [b for b in books if b.get("status") == status]


def _sort_key(value):
    # None and "" compare equal and lowest; the type of the field is not consulted,
    # so a missing rating sorts with missing dates and empty titles
    if value is None or value == "":
        return (0, "")
    if isinstance(value, str):
        return (1, value.lower())
    return (1, value)


def sort_books(books: list[dict], field: str = "title", direction: str = ASC) -> list[dict]:
    """Stable sort on one field; ties keep their input order in both directions."""
    if field not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {field!r}")
    if direction not in (ASC, DESC):
        raise ValueError(f"Unknown sort direction {direction!r}")
    return sorted(books, key=lambda b: _sort_key(b.get(field)), reverse=direction == DESC)


def apply_view(books: list[dict], filter_status: str = ALL, sort_field: str = "title",
               sort_direction: str = ASC) -> list[dict]:
    return sort_books(filter_books(books, filter_status), sort_field, sort_direction)


def status_counts(books: list[dict]) -> dict[str, int]:
    """Badge counts over the unfiltered collection, keyed by filter label."""
    counts = {label: 0 for label in FILTER_OPTIONS}
    counts[ALL] = len(books)
    for book in books:
        status = book.get("status")
        if status in counts and status != ALL:
            counts[status] += 1
    return counts


class ViewState:
    """The filter, sort and layout a user currently has selected."""

    def __init__(self, filter_status: str = ALL, sort_field: str = "title",
                 sort_direction: str = ASC, view_mode: str = "grid"):
        self.filter_status = filter_status
        self.sort_field = sort_field
        self.sort_direction = sort_direction
        self.view_mode = view_mode

    def set_filter(self, status: str) -> None:
        if status not in FILTER_OPTIONS:
            raise ValueError(f"Unknown status filter {status!r}")
        self.filter_status = status

    def toggle_sort(self, field: str) -> None:
        """Re-selecting the current field flips direction; a new field starts ascending."""
        if field not in SORT_FIELDS:
            raise ValueError(f"Cannot sort by {field!r}")
        if field == self.sort_field:
            self.sort_direction = DESC if self.sort_direction == ASC else ASC
        else:
            self.sort_field = field
            self.sort_direction = ASC

    def set_view_mode(self, mode: str) -> None:
        if mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode {mode!r}")
        self.view_mode = mode

    def apply(self, books: list[dict]) -> list[dict]:
        return apply_view(books, self.filter_status, self.sort_field, self.sort_direction)

    def to_dict(self) -> dict:
        return {
            "filter": self.filter_status,
            "sort_field": self.sort_field,
            "sort_direction": self.sort_direction,
            "view_mode": self.view_mode,
        }
