from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from auth import get_current_user
from dependencies import get_preferences

router = APIRouter(prefix="/api/v1/preferences", tags=["Preferences"])

class ThemeChange(BaseModel):
    theme: str

@router.get("")
async def get_preferences_for_user(user: dict = Depends(get_current_user), preferences=Depends(get_preferences)):
    return {"status": "success", "data": {"theme": preferences.get_theme(user["id"])}}

@router.put("/theme")
async def set_theme(body: ThemeChange, user: dict = Depends(get_current_user), preferences=Depends(get_preferences)):
    try:
        theme = preferences.set_theme(user["id"], body.theme)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "data": {"theme": theme}}

@router.post("/theme/toggle")
async def toggle_theme(user: dict = Depends(get_current_user), preferences=Depends(get_preferences)):
    return {"status": "success", "data": {"theme": preferences.toggle_theme(user["id"])}}
