"""
Document store abstraction with an in-memory test implementation and a
SQLAlchemy-backed implementation.
"""

from __future__ import annotations

import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy import JSON, Column, Float, Integer, String, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class StoreUnavailable(Exception):
    """Raised when the backing store cannot serve a read or write."""


def isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class FeedbackRecord:
    name: str
    feedback: str
    email: Optional[str] = None
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "feedback": self.feedback,
            "createdAt": isoformat(self.created_at),
        }


@dataclass
class QueryRecord:
    name: str
    query: str
    email: Optional[str] = None
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "query": self.query,
            "createdAt": isoformat(self.created_at),
        }


@dataclass
class ReviewRecord:
    username: str
    comment: str
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "comment": self.comment,
            "createdAt": isoformat(self.created_at),
        }


@dataclass
class RatingRecord:
    user_id: str
    rating: int
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "rating": self.rating,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


class DbClient(Protocol):
    """Interface for document store access."""

    def ensure_schema(self) -> None:
        ...

    def save_feedback(self, feedback: FeedbackRecord) -> FeedbackRecord:
        ...

    def list_feedback(self) -> list[FeedbackRecord]:
        ...

    def save_query(self, query: QueryRecord) -> QueryRecord:
        ...

    def list_queries(self) -> list[QueryRecord]:
        ...

    def create_review(self, review: ReviewRecord) -> ReviewRecord:
        ...

    def list_reviews(self) -> list[ReviewRecord]:
        ...

    def recent_reviews(self, limit: int = 3) -> list[ReviewRecord]:
        ...

    def upsert_rating(self, user_id: str, rating: int) -> tuple[RatingRecord, bool]:
        """Insert or update the rating for ``user_id``; the flag is True on insert."""
        ...

    def list_ratings(self) -> list[RatingRecord]:
        ...


def _newest_first(records):
    return sorted(records, key=lambda r: r.created_at, reverse=True)


class InMemoryDbClient:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.feedback: Dict[str, FeedbackRecord] = {}
        self.queries: Dict[str, QueryRecord] = {}
        self.reviews: Dict[str, ReviewRecord] = {}
        self.ratings: Dict[str, RatingRecord] = {}

    def ensure_schema(self) -> None:
        return None

    def save_feedback(self, feedback: FeedbackRecord) -> FeedbackRecord:
        self.feedback[feedback.id] = feedback
        return feedback

    def list_feedback(self) -> list[FeedbackRecord]:
        return list(self.feedback.values())

    def save_query(self, query: QueryRecord) -> QueryRecord:
        self.queries[query.id] = query
        return query

    def list_queries(self) -> list[QueryRecord]:
        return list(self.queries.values())

    def create_review(self, review: ReviewRecord) -> ReviewRecord:
        self.reviews[review.id] = review
        return review

    def list_reviews(self) -> list[ReviewRecord]:
        return _newest_first(self.reviews.values())

    def recent_reviews(self, limit: int = 3) -> list[ReviewRecord]:
        return self.list_reviews()[:limit]

    def upsert_rating(self, user_id: str, rating: int) -> tuple[RatingRecord, bool]:
        existing = self.ratings.get(user_id)
        if existing:
            existing.rating = rating
            existing.updated_at = time.time()
            return existing, False
        record = RatingRecord(user_id=user_id, rating=rating)
        self.ratings[user_id] = record
        return record, True

    def list_ratings(self) -> list[RatingRecord]:
        return list(self.ratings.values())

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.feedback.clear()
        self.queries.clear()
        self.reviews.clear()
        self.ratings.clear()


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    Each record is kept as a JSON document alongside the columns used for lookups and ordering.
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

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc

    def ensure_schema(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(str(exc)) from exc

    def save_feedback(self, feedback: FeedbackRecord) -> FeedbackRecord:
        with self._session() as session:
            session.add(
                FeedbackRow(
                    id=feedback.id,
                    created_at=feedback.created_at,
                    document={
                        "name": feedback.name,
                        "email": feedback.email,
                        "feedback": feedback.feedback,
                    },
                )
            )
            session.commit()
        return feedback

    def list_feedback(self) -> list[FeedbackRecord]:
        with self._session() as session:
            rows = session.execute(
                select(FeedbackRow).order_by(FeedbackRow.created_at.asc())
            ).scalars()
            return [
                FeedbackRecord(
                    id=row.id,
                    created_at=row.created_at,
                    name=row.document["name"],
                    email=row.document.get("email"),
                    feedback=row.document["feedback"],
                )
                for row in rows
            ]

    def save_query(self, query: QueryRecord) -> QueryRecord:
        with self._session() as session:
            session.add(
                QueryRow(
                    id=query.id,
                    created_at=query.created_at,
                    document={
                        "name": query.name,
                        "email": query.email,
                        "query": query.query,
                    },
                )
            )
            session.commit()
        return query

    def list_queries(self) -> list[QueryRecord]:
        with self._session() as session:
            rows = session.execute(
                select(QueryRow).order_by(QueryRow.created_at.asc())
            ).scalars()
            return [
                QueryRecord(
                    id=row.id,
                    created_at=row.created_at,
                    name=row.document["name"],
                    email=row.document.get("email"),
                    query=row.document["query"],
                )
                for row in rows
            ]

    def _to_review_record(self, row: "ReviewRow") -> ReviewRecord:
        return ReviewRecord(
            id=row.id,
            created_at=row.created_at,
            username=row.document["username"],
            comment=row.document["comment"],
        )

    def create_review(self, review: ReviewRecord) -> ReviewRecord:
        with self._session() as session:
            session.add(
                ReviewRow(
                    id=review.id,
                    created_at=review.created_at,
                    document={"username": review.username, "comment": review.comment},
                )
            )
            session.commit()
        return review

    def list_reviews(self) -> list[ReviewRecord]:
        with self._session() as session:
            rows = session.execute(
                select(ReviewRow).order_by(ReviewRow.created_at.desc())
            ).scalars()
            return [self._to_review_record(row) for row in rows]

    def recent_reviews(self, limit: int = 3) -> list[ReviewRecord]:
        with self._session() as session:
            rows = session.execute(
                select(ReviewRow).order_by(ReviewRow.created_at.desc()).limit(limit)
            ).scalars()
            return [self._to_review_record(row) for row in rows]

    def _to_rating_record(self, row: "RatingRow") -> RatingRecord:
        return RatingRecord(
            id=row.id,
            user_id=row.user_id,
            rating=row.rating,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def upsert_rating(self, user_id: str, rating: int) -> tuple[RatingRecord, bool]:
        now = time.time()
        with self._session() as session:
            row = session.execute(
                select(RatingRow).where(RatingRow.user_id == user_id)
            ).scalar_one_or_none()
            created = row is None
            if created:
                row = RatingRow(
                    id=_new_id(),
                    user_id=user_id,
                    rating=rating,
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
            else:
                row.rating = rating
                row.updated_at = now
            session.commit()
            session.refresh(row)
            return self._to_rating_record(row), created

    def list_ratings(self) -> list[RatingRecord]:
        with self._session() as session:
            rows = session.execute(
                select(RatingRow).order_by(RatingRow.created_at.asc())
            ).scalars()
            return [self._to_rating_record(row) for row in rows]


Base = declarative_base()


class FeedbackRow(Base):
    __tablename__ = "lic_feedback"

    id = Column(String, primary_key=True)
    created_at = Column(Float, nullable=False, index=True)
    document = Column(JSON, nullable=False)


class QueryRow(Base):
    __tablename__ = "lic_queries"

    id = Column(String, primary_key=True)
    created_at = Column(Float, nullable=False, index=True)
    document = Column(JSON, nullable=False)


class ReviewRow(Base):
    __tablename__ = "lic_reviews"

    id = Column(String, primary_key=True)
    created_at = Column(Float, nullable=False, index=True)
    document = Column(JSON, nullable=False)


class RatingRow(Base):
    __tablename__ = "lic_ratings"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, unique=True, index=True)
    rating = Column(Integer, nullable=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)
