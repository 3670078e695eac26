"""
HTTP routes for the site's JSON API (feedback, queries, reviews, ratings).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from licsite.db import DbClient, FeedbackRecord, QueryRecord, ReviewRecord
from licsite.dependencies import get_db_client, get_home_page_handler, request_body
from licsite.errors import BadRequestError
from licsite.home import HomePageHandler
from licsite.schemas import (
    FeedbackRequest,
    FeedbackResponse,
    MessageResponse,
    QueryRequest,
    QueryResponse,
    RatingRequest,
    RatingResponse,
    ReviewRequest,
    ReviewResponse,
)

router = APIRouter()


@router.post("/submit-feedback", response_model=MessageResponse, status_code=201)
def submit_feedback(
    payload: FeedbackRequest = Depends(request_body(FeedbackRequest)),
    db: DbClient = Depends(get_db_client),
):
    if not payload.name or not payload.feedback:
        raise BadRequestError("Name and feedback required")
    db.save_feedback(
        FeedbackRecord(name=payload.name, email=payload.email, feedback=payload.feedback)
    )
    return MessageResponse(message="Feedback submitted")


@router.get("/feedbacks", response_model=list[FeedbackResponse])
def list_feedbacks(db: DbClient = Depends(get_db_client)):
    return [record.as_dict() for record in db.list_feedback()]


@router.post("/submit-query", response_model=MessageResponse, status_code=201)
def submit_query(
    payload: QueryRequest = Depends(request_body(QueryRequest)),
    db: DbClient = Depends(get_db_client),
):
    if not payload.name or not payload.query:
        raise BadRequestError("Name and query required")
    db.save_query(QueryRecord(name=payload.name, email=payload.email, query=payload.query))
    return MessageResponse(message="Query submitted")


@router.get("/queries", response_model=list[QueryResponse])
def list_queries(db: DbClient = Depends(get_db_client)):
    return [record.as_dict() for record in db.list_queries()]


@router.post("/reviews", response_model=ReviewResponse, status_code=201)
def create_review(
    payload: ReviewRequest = Depends(request_body(ReviewRequest)),
    db: DbClient = Depends(get_db_client),
    home_page: HomePageHandler = Depends(get_home_page_handler),
):
    if not payload.username or not payload.comment:
        raise BadRequestError("Username and comment required")
    review = db.create_review(
        ReviewRecord(username=payload.username, comment=payload.comment)
    )
    home_page.invalidate()
    return review.as_dict()


@router.get("/reviews", response_model=list[ReviewResponse])
def list_reviews(db: DbClient = Depends(get_db_client)):
    return [record.as_dict() for record in db.list_reviews()]


@router.post("/ratings", response_model=RatingResponse, status_code=201)
def upsert_rating(
    response: Response,
    payload: RatingRequest = Depends(request_body(RatingRequest)),
    db: DbClient = Depends(get_db_client),
    home_page: HomePageHandler = Depends(get_home_page_handler),
):
    if not payload.userId or not payload.rating:
        raise BadRequestError("User ID and rating required")
    record, created = db.upsert_rating(payload.userId, payload.rating)
    if not created:
        response.status_code = 200
    home_page.invalidate()
    return record.as_dict()


@router.get("/ratings", response_model=list[RatingResponse])
def list_ratings(db: DbClient = Depends(get_db_client)):
    return [record.as_dict() for record in db.list_ratings()]
