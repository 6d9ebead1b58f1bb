"""
Pydantic schemas for the heritage backend.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    username: Optional[str] = Field(default=None, max_length=50)
    password: Optional[str] = None
    display_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserPayload(BaseModel):
    id: int
    username: str
    display_name: Optional[str] = None


class AuthResponse(BaseModel):
    ok: bool
    user: UserPayload


class SubmitScoreRequest(BaseModel):
    user_id: Optional[int] = None
    # Validated in the route so non-numeric scores get a 400.
    score: Any = None
    quiz_name: Optional[str] = Field(default=None, max_length=100)


class SubmitScoreResponse(BaseModel):
    ok: bool
    inserted: Optional[bool] = None
    updated: Optional[bool] = None
    id: Optional[int] = None
    new_score: Optional[float] = None
    message: Optional[str] = None


class LeaderboardRow(BaseModel):
    id: int
    user_id: int
    score: float
    created_at: float
    username: str
    display_name: Optional[str] = None


class LeaderboardResponse(BaseModel):
    ok: bool
    leaderboard: list[LeaderboardRow]


class FolktalesResponse(BaseModel):
    folktales: Any


class FestivalEvent(BaseModel):
    name: str
    date: str
    type: str
    overview: str = ""
    color: str
    source: str


class FestivalsResponse(BaseModel):
    festivals: list[FestivalEvent]


class RelatedTopic(BaseModel):
    text: str
    url: str


class PlaceSearchResponse(BaseModel):
    query: str
    title: str
    abstract: str
    abstractSource: str
    url: str
    related: list[RelatedTopic]


class PlaceSection(BaseModel):
    line: str
    text: str


class PlaceInfoResponse(BaseModel):
    lead: dict
    sections: list[PlaceSection]


class MediaItem(BaseModel):
    src: Optional[str] = None
    alt: str


class HealthResponse(BaseModel):
    ok: bool
    ts: int
