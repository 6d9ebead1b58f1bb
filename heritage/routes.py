"""
HTTP routes for the heritage backend API.
"""

from __future__ import annotations

import logging
import os
import time

import requests
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse, JSONResponse

from heritage.config import get_settings
from heritage.content import (
    ARTS_DOCUMENT,
    CALENDAR_DOCUMENT,
    FOLKTALES_DOCUMENT,
    ContentStore,
    ContentUnavailableError,
    InvalidContentError,
)
from heritage.db import (
    DEFAULT_QUIZ,
    DbClient,
    UnknownUserError,
    UsernameTakenError,
)
from heritage.dependencies import (
    get_content_store,
    get_db_client,
    get_image_client,
    get_lookup_client,
)
from heritage.festivals import flatten_calendar
from heritage.schemas import (
    AuthResponse,
    FestivalsResponse,
    FolktalesResponse,
    HealthResponse,
    LeaderboardResponse,
    LoginRequest,
    MediaItem,
    PlaceInfoResponse,
    PlaceSearchResponse,
    SignupRequest,
    SubmitScoreRequest,
    SubmitScoreResponse,
)
from heritage.upstream import DuckDuckGoClient, UnsplashClient, UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()
pages_router = APIRouter()

MAX_LEADERBOARD_LIMIT = 100


def _upstream_failure(e: Exception) -> HTTPException:
    status = getattr(e, "status", None) or 500
    details = getattr(e, "body", None) or None
    return HTTPException(status_code=status, detail={"error": str(e), "details": details})


@router.post("/auth/signup", response_model=AuthResponse)
def signup(payload: SignupRequest, db: DbClient = Depends(get_db_client)):
    if not payload.username or not payload.password:
        raise HTTPException(status_code=400, detail="username & password required")
    try:
        user = db.create_user(payload.username, payload.password, payload.display_name)
    except UsernameTakenError:
        raise HTTPException(status_code=409, detail="username_taken")
    except Exception:
        logger.exception("signup error")
        raise HTTPException(status_code=500, detail="signup_failed")
    return AuthResponse(ok=True, user=user.as_dict())


@router.post("/auth/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: DbClient = Depends(get_db_client)):
    if not payload.username or not payload.password:
        raise HTTPException(status_code=400, detail="username & password required")
    try:
        user = db.verify_credentials(payload.username, payload.password)
    except Exception:
        logger.exception("login error")
        raise HTTPException(status_code=500, detail="login_failed")
    if user is None:
        raise HTTPException(status_code=401, detail="invalid_credentials")
    return AuthResponse(ok=True, user=user.as_dict())


@router.post(
    "/quiz/submit",
    response_model=SubmitScoreResponse,
    response_model_exclude_none=True,
)
def submit_score(payload: SubmitScoreRequest, db: DbClient = Depends(get_db_client)):
    """
    Record a quiz score, keeping only the best score per user and quiz.
    """
    score = payload.score
    if (
        not payload.user_id
        or isinstance(score, bool)
        or not isinstance(score, (int, float))
    ):
        raise HTTPException(
            status_code=400, detail="user_id and numeric score required"
        )
    quiz = payload.quiz_name or DEFAULT_QUIZ
    try:
        result = db.submit_score(payload.user_id, score, quiz)
    except UnknownUserError:
        raise HTTPException(status_code=404, detail="user_not_found")
    except Exception:
        logger.exception("submit score error")
        raise HTTPException(status_code=500, detail="submit_failed")

    if result.inserted:
        return SubmitScoreResponse(ok=True, inserted=True, id=result.record.id)
    if result.updated:
        return SubmitScoreResponse(ok=True, updated=True, new_score=score)
    return SubmitScoreResponse(ok=True, updated=False, message="Lower score ignored")


@router.get("/quiz/leaderboard", response_model=LeaderboardResponse)
def leaderboard(
    quiz_name: str = Query(DEFAULT_QUIZ),
    limit: int = Query(10, ge=1),
    db: DbClient = Depends(get_db_client),
):
    try:
        entries = db.leaderboard(
            quiz_name or DEFAULT_QUIZ, min(limit, MAX_LEADERBOARD_LIMIT)
        )
    except Exception:
        logger.exception("leaderboard error")
        raise HTTPException(status_code=500, detail="leaderboard_failed")
    return LeaderboardResponse(
        ok=True, leaderboard=[entry.as_dict() for entry in entries]
    )


@router.get("/folktales", response_model=FolktalesResponse)
def folktales(store: ContentStore = Depends(get_content_store)):
    try:
        stories = store.load_json(FOLKTALES_DOCUMENT)
    except InvalidContentError:
        raise HTTPException(status_code=500, detail="Invalid JSON format")
    except ContentUnavailableError as e:
        logger.error("Error reading %s: %s", FOLKTALES_DOCUMENT, e)
        raise HTTPException(status_code=500, detail="Could not load FolkTales.json")
    return FolktalesResponse(folktales=stories)


@router.get("/arts")
def arts(store: ContentStore = Depends(get_content_store)):
    try:
        return store.load_json(ARTS_DOCUMENT)
    except InvalidContentError:
        logger.exception("Invalid JSON in %s", ARTS_DOCUMENT)
        raise HTTPException(status_code=500, detail="Invalid JSON structure")
    except ContentUnavailableError as e:
        logger.error("Error reading %s: %s", ARTS_DOCUMENT, e)
        raise HTTPException(status_code=500, detail="Could not load arts data")


@router.get("/festivals", response_model=FestivalsResponse)
def festivals(store: ContentStore = Depends(get_content_store)):
    try:
        document = store.load_json(CALENDAR_DOCUMENT)
    except ContentUnavailableError:
        logger.exception("Error loading %s", CALENDAR_DOCUMENT)
        raise HTTPException(
            status_code=500, detail="Could not load india_common.json"
        )
    return FestivalsResponse(festivals=flatten_calendar(document))


@router.get("/places/search", response_model=PlaceSearchResponse)
def search_places(
    q: str = Query(""),
    lookup: DuckDuckGoClient = Depends(get_lookup_client),
):
    q = q.strip()
    if not q:
        raise HTTPException(status_code=400, detail="missing q")
    try:
        return lookup.search(q)
    except (UpstreamError, requests.RequestException) as e:
        logger.error("search error: %s", e)
        raise _upstream_failure(e)


@router.get("/places/info", response_model=PlaceInfoResponse)
def place_info(
    title: str = Query(""),
    lookup: DuckDuckGoClient = Depends(get_lookup_client),
):
    title = title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="missing title")
    try:
        return lookup.info(title)
    except (UpstreamError, requests.RequestException) as e:
        logger.error("info error: %s", e)
        raise _upstream_failure(e)


@router.get("/places/media", response_model=list[MediaItem])
def place_media(
    title: str = Query(""),
    images: UnsplashClient = Depends(get_image_client),
):
    title = title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="missing title")
    try:
        return images.media(title)
    except Exception:
        logger.exception("media error")
        return JSONResponse(status_code=500, content=[])


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(ok=True, ts=int(time.time() * 1000))


def _page(filename: str) -> FileResponse:
    path = os.path.join(get_settings().public_dir, filename)
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="Page not found")
    return FileResponse(path)


@pages_router.get("/", include_in_schema=False)
def index_page():
    return _page("FinalProject.html")


@pages_router.get("/quiz", include_in_schema=False)
def quiz_page():
    return _page("quiz.html")
