from __future__ import annotations

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .app_logging import configure_logging
from .api.v1.routers import active_sessions, batch_status, batches, documents, process_page

load_dotenv()
configure_logging()

app = FastAPI(title="Document Review Backend", version="0.1.0")

app.add_middleware(
  CORSMiddleware,
  allow_origins=["*"],
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

api_router = APIRouter(prefix="/api")
api_router.include_router(batches.router)
api_router.include_router(batch_status.router)
api_router.include_router(active_sessions.router)
api_router.include_router(process_page.router)
api_router.include_router(documents.router)

app.include_router(api_router)
