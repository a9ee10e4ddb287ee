# server/main.py
from __future__ import annotations

import logging
import os
import threading
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from assistant import analyze_symptoms, predict_disease
from assistant.llm import AssistantError
from db.repository import SqlSlot, get_chat_history, save_chat_message
from tracking.aggregation import frequency_ranking, intensity_series
from tracking.errors import NotFoundError, PersistenceError, ValidationError
from tracking.store import SymptomStore

logger = logging.getLogger(__name__)

app = FastAPI(title="HealthWise API", version="0.1.0")

# --- CORS (configurable) ---
def _parse_cors_origins(env_val: str | None):
    """
    Parse comma-separated origins. If env is None or '*', return ['*'] (dev).
    Otherwise, return a cleaned list like ['https://app.example.com', 'https://example.com'].
    """
    if not env_val or env_val.strip() == "*":
        return ["*"]
    parts = [p.strip() for p in env_val.split(",")]
    return [p for p in parts if p] or ["*"]

_CORS_ORIGINS = _parse_cors_origins(os.getenv("CORS_ORIGINS"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=_CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Persistence-Warning"],
)

if _CORS_ORIGINS == ["*"]:
    logger.warning("CORS is permissive ('*'). Restrict it in production via CORS_ORIGINS.")
else:
    logger.info("CORS allowed origins: %s", _CORS_ORIGINS)

# --- Simple Bearer token auth ---
security = HTTPBearer(auto_error=False)

def auth_guard(creds: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """
    Enforce the optional API_TOKEN bearer token.

    When API_TOKEN is unset every request is allowed; otherwise the request must
    carry a matching Bearer token or a 401 is raised.
    """
    api_token = os.getenv("API_TOKEN")
    if not api_token:
        return True
    if creds is None or creds.scheme.lower() != "bearer" or creds.credentials != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return True

# --- Store ---
_store: SymptomStore | None = None
_store_lock = threading.Lock()

def get_store() -> SymptomStore:
    """Return the process-wide store, loading it from the database on first use.

    Sync dependencies run in a thread pool, so creation is guarded: only one
    store is ever built and it is published only after it has loaded.
    """
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                store = SymptomStore(SqlSlot())
                store.load()
                _store = store
    return _store

def _warn_if_unsaved(store: SymptomStore, response: Response) -> None:
    if store.last_write_error is not None:
        response.headers["X-Persistence-Warning"] = (
            "Your change is visible but could not be saved and may be lost on reload."
        )

# --- Error mapping ---
@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})

@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(AssistantError)
async def _assistant_error(request: Request, exc: AssistantError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})

@app.exception_handler(PersistenceError)
async def _persistence_error(request: Request, exc: PersistenceError):
    logger.error("Storage unavailable: %s", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})

# --- Routes ---
@app.get("/health")
def health():
    return {"ok": True}

router = APIRouter(dependencies=[Depends(auth_guard)])


@router.get("/symptoms")
def api_list_symptoms(store: SymptomStore = Depends(get_store)):
    """All logged symptoms, most recent date first."""
    return [r.to_storage() for r in store.recent_first()]


@router.post("/symptoms", status_code=status.HTTP_201_CREATED)
def api_create_symptom(
    response: Response,
    payload: Dict[str, Any] = Body(...),
    store: SymptomStore = Depends(get_store),
):
    record = store.create(payload)
    _warn_if_unsaved(store, response)
    return record.to_storage()


@router.get("/symptoms/names")
def api_symptom_names(store: SymptomStore = Depends(get_store)):
    return store.symptom_names()


@router.get("/symptoms/series")
def api_intensity_series(
    symptom_name: Optional[str] = Query(default=None, description="Exact symptom name; defaults to the first logged"),
    store: SymptomStore = Depends(get_store),
):
    """
    Intensity over time for one symptom name.

    Without ``symptom_name`` the first-logged name is used, mirroring the chart's
    default selection. An empty log yields ``symptom_name: null`` and no points.
    """
    records = store.list_records()
    if symptom_name is None:
        names = store.symptom_names()
        symptom_name = names[0] if names else None
    points = intensity_series(records, symptom_name) if symptom_name is not None else []
    return {
        "symptomName": symptom_name,
        "points": [p.model_dump(mode="json") for p in points],
    }


@router.get("/symptoms/frequency")
def api_frequency(
    limit: int = Query(default=10, ge=1, le=50),
    store: SymptomStore = Depends(get_store),
):
    ranking = frequency_ranking(store.list_records(), limit=limit)
    return [f.model_dump(mode="json", by_alias=True) for f in ranking]


@router.get("/symptoms/{record_id}")
def api_get_symptom(record_id: str, store: SymptomStore = Depends(get_store)):
    return store.get(record_id).to_storage()


@router.put("/symptoms/{record_id}")
def api_update_symptom(
    record_id: str,
    response: Response,
    payload: Dict[str, Any] = Body(...),
    store: SymptomStore = Depends(get_store),
):
    record = store.update(record_id, payload)
    _warn_if_unsaved(store, response)
    return record.to_storage()


@router.delete("/symptoms/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_symptom(record_id: str, store: SymptomStore = Depends(get_store)):
    store.delete(record_id)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _warn_if_unsaved(store, response)
    return response


class ChatRequest(BaseModel):
    user_id: str
    message: str


class PredictRequest(BaseModel):
    symptoms: str


@router.post("/chat")
def api_chat(payload: ChatRequest):
    """
    Send one message to the assistant.

    The user's turn is stored before the model is called and the reply after it,
    so a failed analysis still leaves the question in the history.
    """
    if not payload.message.strip():
        raise ValidationError("message", "Please describe your symptoms.")
    user_msg = save_chat_message(payload.user_id, "user", payload.message)
    reply = analyze_symptoms(payload.message)
    bot_msg = save_chat_message(payload.user_id, "bot", reply)
    return {
        "reply": reply,
        "messages": [user_msg.model_dump(mode="json"), bot_msg.model_dump(mode="json")],
    }


@router.get("/chat/history")
def api_chat_history(user_id: str = Query(..., description="User identifier")):
    return [m.model_dump(mode="json") for m in get_chat_history(user_id)]


@router.post("/predict")
def api_predict(payload: PredictRequest):
    return predict_disease(payload.symptoms).model_dump()


app.include_router(router)
