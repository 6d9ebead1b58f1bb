"""
Database abstraction for users and quiz scores, with an in-memory test
implementation and a SQLAlchemy-backed one.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import bcrypt
from sqlalchemy import (
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

SALT_ROUNDS = 10
DEFAULT_QUIZ = "default"


class UsernameTakenError(Exception):
    """Raised when signing up with a username that already exists."""


class UnknownUserError(Exception):
    """Raised when a score is submitted for a user that does not exist."""


def hash_password(password: str) -> str:
    # bcrypt only uses the first 72 bytes.
    secret = password.encode("utf-8")[:72]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=SALT_ROUNDS)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    secret = password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
    except ValueError:
        return False


class DbClient(Protocol):
    """Interface for database access."""

    def create_user(
        self, username: str, password: str, display_name: Optional[str] = None
    ) -> "UserRecord":
        ...

    def verify_credentials(
        self, username: str, password: str
    ) -> Optional["UserRecord"]:
        ...

    def get_user(self, user_id: int) -> Optional["UserRecord"]:
        ...

    def submit_score(
        self, user_id: int, score: float, quiz_name: str = DEFAULT_QUIZ
    ) -> "ScoreSubmission":
        ...

    def leaderboard(
        self, quiz_name: str = DEFAULT_QUIZ, limit: int = 10
    ) -> list["LeaderboardEntry"]:
        ...


@dataclass
class UserRecord:
    id: int
    username: str
    password_hash: str
    display_name: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        # Never expose the password hash.
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
        }


@dataclass
class ScoreRecord:
    id: int
    user_id: int
    quiz_name: str
    score: float
    created_at: float = field(default_factory=lambda: time.time())


@dataclass
class ScoreSubmission:
    """Outcome of an upsert-if-higher score submission."""

    record: ScoreRecord
    inserted: bool = False
    updated: bool = False


@dataclass
class LeaderboardEntry:
    id: int
    user_id: int
    score: float
    created_at: float
    username: str
    display_name: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "score": self.score,
            "created_at": self.created_at,
            "username": self.username,
            "display_name": self.display_name,
        }


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.users: Dict[int, UserRecord] = {}
        self.scores: Dict[tuple[int, str], ScoreRecord] = {}
        self._user_ids = itertools.count(1)
        self._score_ids = itertools.count(1)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.users.clear()
        self.scores.clear()
        self._user_ids = itertools.count(1)
        self._score_ids = itertools.count(1)

    def _find_user(self, username: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.username == username:
                return user
        return None

    def create_user(
        self, username: str, password: str, display_name: Optional[str] = None
    ) -> UserRecord:
        if self._find_user(username):
            raise UsernameTakenError(username)
        record = UserRecord(
            id=next(self._user_ids),
            username=username,
            password_hash=hash_password(password),
            display_name=display_name,
        )
        self.users[record.id] = record
        return record

    def verify_credentials(self, username: str, password: str) -> Optional[UserRecord]:
        user = self._find_user(username)
        if not user or not check_password(password, user.password_hash):
            return None
        return user

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def submit_score(
        self, user_id: int, score: float, quiz_name: str = DEFAULT_QUIZ
    ) -> ScoreSubmission:
        if user_id not in self.users:
            raise UnknownUserError(user_id)
        existing = self.scores.get((user_id, quiz_name))
        if existing is None:
            record = ScoreRecord(
                id=next(self._score_ids),
                user_id=user_id,
                quiz_name=quiz_name,
                score=score,
            )
            self.scores[(user_id, quiz_name)] = record
            return ScoreSubmission(record=record, inserted=True)
        if score > existing.score:
            existing.score = score
            existing.created_at = time.time()
            return ScoreSubmission(record=existing, updated=True)
        return ScoreSubmission(record=existing)

    def leaderboard(
        self, quiz_name: str = DEFAULT_QUIZ, limit: int = 10
    ) -> list[LeaderboardEntry]:
        rows = [
            record
            for (_, quiz), record in self.scores.items()
            if quiz == quiz_name and record.user_id in self.users
        ]
        rows.sort(key=lambda r: (-r.score, r.created_at, r.id))
        entries: list[LeaderboardEntry] = []
        for record in rows[:limit]:
            user = self.users[record.user_id]
            entries.append(
                LeaderboardEntry(
                    id=record.id,
                    user_id=record.user_id,
                    score=record.score,
                    created_at=record.created_at,
                    username=user.username,
                    display_name=user.display_name,
                )
            )
        return entries


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., MySQL,
    Postgres, or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            id=row.id,
            username=row.username,
            password_hash=row.password_hash,
            display_name=row.display_name,
            created_at=row.created_at,
        )

    def _to_score_record(self, row: "QuizScoreRow") -> ScoreRecord:
        return ScoreRecord(
            id=row.id,
            user_id=row.user_id,
            quiz_name=row.quiz_name,
            score=row.score,
            created_at=row.created_at,
        )

    def create_user(
        self, username: str, password: str, display_name: Optional[str] = None
    ) -> UserRecord:
        with self.Session() as session:
            stmt = select(UserRow.id).where(UserRow.username == username)
            if session.execute(stmt).first():
                raise UsernameTakenError(username)
            row = UserRow(
                username=username,
                password_hash=hash_password(password),
                display_name=display_name,
                created_at=time.time(),
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise UsernameTakenError(username) from e
            session.refresh(row)
            return self._to_user_record(row)

    def verify_credentials(self, username: str, password: str) -> Optional[UserRecord]:
        with self.Session() as session:
            stmt = select(UserRow).where(UserRow.username == username)
            row = session.execute(stmt).scalar_one_or_none()
            if not row or not check_password(password, row.password_hash):
                return None
            return self._to_user_record(row)

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            return self._to_user_record(row) if row else None

    def _find_score(
        self, session: Session, user_id: int, quiz_name: str
    ) -> Optional["QuizScoreRow"]:
        stmt = select(QuizScoreRow).where(
            QuizScoreRow.user_id == user_id,
            QuizScoreRow.quiz_name == quiz_name,
        )
        return session.execute(stmt).scalar_one_or_none()

    def _submit_score(
        self, user_id: int, score: float, quiz_name: str
    ) -> ScoreSubmission:
        with self.Session() as session:
            if session.get(UserRow, user_id) is None:
                raise UnknownUserError(user_id)
            row = self._find_score(session, user_id, quiz_name)
            if row is None:
                row = QuizScoreRow(
                    user_id=user_id,
                    quiz_name=quiz_name,
                    score=score,
                    created_at=time.time(),
                )
                session.add(row)
                try:
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    raise
                session.refresh(row)
                return ScoreSubmission(record=self._to_score_record(row), inserted=True)
            if score > row.score:
                row.score = score
                row.created_at = time.time()
                session.commit()
                session.refresh(row)
                return ScoreSubmission(record=self._to_score_record(row), updated=True)
            return ScoreSubmission(record=self._to_score_record(row))

    def submit_score(
        self, user_id: int, score: float, quiz_name: str = DEFAULT_QUIZ
    ) -> ScoreSubmission:
        try:
            return self._submit_score(user_id, score, quiz_name)
        except IntegrityError:
            # A concurrent first submission inserted the row; compare against it.
            return self._submit_score(user_id, score, quiz_name)

    def leaderboard(
        self, quiz_name: str = DEFAULT_QUIZ, limit: int = 10
    ) -> list[LeaderboardEntry]:
        with self.Session() as session:
            stmt = (
                select(QuizScoreRow, UserRow)
                .join(UserRow, UserRow.id == QuizScoreRow.user_id)
                .where(QuizScoreRow.quiz_name == quiz_name)
                .order_by(
                    QuizScoreRow.score.desc(),
                    QuizScoreRow.created_at.asc(),
                    QuizScoreRow.id.asc(),
                )
                .limit(limit)
            )
            return [
                LeaderboardEntry(
                    id=score_row.id,
                    user_id=score_row.user_id,
                    score=score_row.score,
                    created_at=score_row.created_at,
                    username=user_row.username,
                    display_name=user_row.display_name,
                )
                for score_row, user_row in session.execute(stmt).all()
            ]


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(100), nullable=False)
    display_name = Column(String(100), nullable=True)
    created_at = Column(Float, nullable=False)


class QuizScoreRow(Base):
    __tablename__ = "quiz_scores"
    __table_args__ = (UniqueConstraint("user_id", "quiz_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    quiz_name = Column(String(100), nullable=False, default=DEFAULT_QUIZ)
    score = Column(Float, nullable=False)
    created_at = Column(Float, nullable=False, index=True)
