"""
table_service.py — Row storage behind one small interface.
SupabaseTable speaks PostgREST, SqlTable speaks SQLAlchemy. Both hand back plain
dict rows (dates as ISO strings) and raise TableError on any store failure.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

import httpx
from sqlalchemy import Date, DateTime, asc, desc
from sqlalchemy.exc import SQLAlchemyError

from supabase_rest import sb_select, sb_insert, sb_update, sb_delete


class TableError(Exception):
    """The backing store rejected or failed an operation."""


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _parse_timestamp(value: str) -> datetime:
    return _naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


class Table(ABC):
    """Minimal CRUD surface shared by the remote and local stores."""

    name: str

    @abstractmethod
    def select(self, filters: dict | None = None, order_by: str | None = None, descending: bool = False) -> list[dict]:
        ...

    @abstractmethod
    def insert(self, data: dict) -> dict:
        """Insert a row; the store assigns id and timestamps."""
        ...

    @abstractmethod
    def update(self, row_id, data: dict, filters: dict | None = None) -> dict | None:
        """Patch one row by id. Returns None when no row matched."""
        ...

    @abstractmethod
    def delete(self, row_id, filters: dict | None = None) -> bool:
        ...


class SupabaseTable(Table):
    """A PostgREST table reached through supabase_rest."""

    def __init__(self, name: str):
        self.name = name

    def select(self, filters=None, order_by=None, descending=False):
        order = None
        if order_by:
            order = f"{order_by}.{'desc' if descending else 'asc'}"
        try:
            return sb_select(self.name, filters=filters, order=order)
        except (httpx.HTTPError, ValueError) as e:
            raise TableError(f"select from {self.name} failed: {e}") from e

    def insert(self, data):
        try:
            return sb_insert(self.name, data)
        except (httpx.HTTPError, ValueError) as e:
            raise TableError(f"insert into {self.name} failed: {e}") from e

    def update(self, row_id, data, filters=None):
        try:
            result = sb_update(self.name, "id", row_id, data, filters=filters)
        except (httpx.HTTPError, ValueError) as e:
            raise TableError(f"update of {self.name} failed: {e}") from e
        return result or None

    def delete(self, row_id, filters=None):
        try:
            return sb_delete(self.name, "id", row_id, filters=filters) > 0
        except (httpx.HTTPError, ValueError) as e:
            raise TableError(f"delete from {self.name} failed: {e}") from e


class SqlTable(Table):
    """A SQLAlchemy model exposed through the same row-dict interface."""

    def __init__(self, model, session_factory):
        self.model = model
        self.name = model.__tablename__
        self._session_factory = session_factory
        self._columns = {c.name: c for c in model.__table__.columns}

    # ------------------------------------------------------------------
    def _to_dict(self, obj) -> dict:
        row = {}
        for name in self._columns:
            value = getattr(obj, name)
            if isinstance(value, datetime):
                if value.tzinfo is None:
                    value = value.replace(tzinfo=timezone.utc)
                value = value.isoformat()
            elif isinstance(value, date):
                value = value.isoformat()
            row[name] = value
        return row

    def _coerce(self, data: dict) -> dict:
        """Map wire values onto column types (ISO strings → date/datetime)."""
        values = {}
        for key, value in data.items():
            column = self._columns.get(key)
            if column is None:
                raise TableError(f"Unknown column '{key}' for table {self.name}")
            try:
                if isinstance(column.type, DateTime):
                    if isinstance(value, str):
                        value = _parse_timestamp(value)
                    elif isinstance(value, datetime):
                        value = _naive_utc(value)
                elif isinstance(column.type, Date) and isinstance(value, str):
                    value = date.fromisoformat(value)
            except ValueError as e:
                raise TableError(f"Invalid value for {self.name}.{key}: {value!r}") from e
            values[key] = value
        return values

    # ------------------------------------------------------------------
    def select(self, filters=None, order_by=None, descending=False):
        db = self._session_factory()
        try:
            query = db.query(self.model)
            if filters:
                query = query.filter_by(**filters)
            if order_by:
                column = getattr(self.model, order_by)
                query = query.order_by(desc(column) if descending else asc(column))
            return [self._to_dict(obj) for obj in query.all()]
        except SQLAlchemyError as e:
            raise TableError(f"select from {self.name} failed: {e}") from e
        finally:
            db.close()

    def insert(self, data):
        values = self._coerce(data)
        db = self._session_factory()
        try:
            obj = self.model(**values)
            db.add(obj)
            db.commit()
            db.refresh(obj)
            return self._to_dict(obj)
        except SQLAlchemyError as e:
            db.rollback()
            raise TableError(f"insert into {self.name} failed: {e}") from e
        finally:
            db.close()

    def update(self, row_id, data, filters=None):
        values = self._coerce(data)
        db = self._session_factory()
        try:
            obj = db.query(self.model).filter_by(id=row_id, **(filters or {})).first()
            if obj is None:
                return None

            # updated_at only moves forward, even for two writes in the same microsecond
            stamp = values.get("updated_at")
            previous = getattr(obj, "updated_at", None)
            if stamp is not None and previous is not None and stamp <= _naive_utc(previous):
                values["updated_at"] = _naive_utc(previous) + timedelta(microseconds=1)

            for key, value in values.items():
                setattr(obj, key, value)
            db.commit()
            db.refresh(obj)
            return self._to_dict(obj)
        except SQLAlchemyError as e:
            db.rollback()
            raise TableError(f"update of {self.name} failed: {e}") from e
        finally:
            db.close()

    def delete(self, row_id, filters=None):
        db = self._session_factory()
        try:
            obj = db.query(self.model).filter_by(id=row_id, **(filters or {})).first()
            if obj is None:
                return False
            db.delete(obj)
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            raise TableError(f"delete from {self.name} failed: {e}") from e
        finally:
            db.close()
