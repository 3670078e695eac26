"""
Pydantic schemas for the site API.

Request fields are optional so that missing values produce the API's own
400 messages rather than a generic validation failure.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class FeedbackRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    feedback: Optional[str] = None


class QueryRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    query: Optional[str] = None


class ReviewRequest(BaseModel):
    username: Optional[str] = None
    comment: Optional[str] = None


class RatingRequest(BaseModel):
    userId: Optional[str] = None
    rating: Optional[int] = None


class MessageResponse(BaseModel):
    message: str


class FeedbackResponse(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    feedback: str
    createdAt: str


class QueryResponse(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    query: str
    createdAt: str


class ReviewResponse(BaseModel):
    id: str
    username: str
    comment: str
    createdAt: str


class RatingResponse(BaseModel):
    id: str
    userId: str
    rating: int
    createdAt: str
    updatedAt: str


class HealthResponse(BaseModel):
    status: str
