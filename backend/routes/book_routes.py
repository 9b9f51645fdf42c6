from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date

from auth import get_current_user
from dependencies import get_sessions
from services.book_rules import BookValidationError

router = APIRouter(prefix="/api/v1/books", tags=["Books"])

class BookCreate(BaseModel):
    title: str = Field(min_length=1)
    author: Optional[str] = ""
    status: Optional[str] = "To-Read"
    notes: Optional[str] = ""
    start_date: Optional[date] = None
    finish_date: Optional[date] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)

class BookUpdate(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    start_date: Optional[date] = None
    finish_date: Optional[date] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)

class FilterChange(BaseModel):
    status: str

class SortChange(BaseModel):
    field: str

class ViewModeChange(BaseModel):
    mode: str


def _session(user: dict, sessions):
    session = sessions.get(user["id"])
    session.ensure_loaded()
    return session

def _result(ok: bool, session) -> dict:
    if ok:
        return {"status": "success", "data": session.snapshot()}
    return {"status": "error", "message": session.collection.last_error, "data": session.snapshot()}


@router.get("")
async def list_books(user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    """Fresh list from the store; a failed fetch still returns the last good list."""
    session = sessions.get(user["id"])
    return _result(session.collection.load(), session)

@router.post("/refresh")
async def refresh_books(user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    session = sessions.get(user["id"])
    return _result(session.collection.load(), session)

@router.get("/counts")
async def book_counts(user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    return {"status": "success", "data": _session(user, sessions).counts}

@router.post("")
async def create_book(book_data: BookCreate, user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    session = _session(user, sessions)
    try:
        ok = session.collection.save(book_data.dict())
    except BookValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _result(ok, session)

@router.put("/{book_id}")
async def update_book(book_id: str, book_data: BookUpdate, user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    session = _session(user, sessions)
    try:
        ok = session.collection.save(book_data.dict(exclude_unset=True), existing_id=book_id)
    except BookValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _result(ok, session)

@router.delete("/{book_id}")
async def delete_book(book_id: str, confirm: bool = False, user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    """Delete a book. Nothing happens unless the client confirmed (?confirm=true)."""
    session = _session(user, sessions)
    if not confirm:
        return {"status": "cancelled", "data": session.snapshot()}
    ok = session.collection.remove(book_id, confirm=lambda _book: confirm)
    return _result(ok, session)

@router.put("/view/filter")
async def set_filter(body: FilterChange, user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    session = _session(user, sessions)
    try:
        session.set_filter(body.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "data": session.snapshot()}

@router.post("/view/sort")
async def toggle_sort(body: SortChange, user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    session = _session(user, sessions)
    try:
        session.toggle_sort(body.field)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "data": session.snapshot()}

@router.put("/view/mode")
async def set_view_mode(body: ViewModeChange, user: dict = Depends(get_current_user), sessions=Depends(get_sessions)):
    session = _session(user, sessions)
    try:
        session.set_view_mode(body.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "data": session.snapshot()}
