import os
import sys
import logging
from contextlib import asynccontextmanager

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from config import APP_NAME, BOOKS_BACKEND, LOG_LEVEL
from database import init_db
from dependencies import get_identity
from routes.auth_routes import router as auth_router
from routes.book_routes import router as book_router
from routes.preference_routes import router as preference_router

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Local tables only; with Supabase the schema lives in the hosted project
    if BOOKS_BACKEND != "supabase":
        init_db()
    logger.info(f"{APP_NAME} started with '{BOOKS_BACKEND}' backend")
    yield


app = FastAPI(title=APP_NAME, lifespan=lifespan)

@app.get("/api/v1/health-check")
async def health(identity=Depends(get_identity)):
    return {
        "status": "ok",
        "backend": BOOKS_BACKEND,
        "identity": {"provider": identity.name, "ready": identity.ready},
    }

# Configure CORS for the browser client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(book_router)
app.include_router(preference_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
