"""
api/routes/v1/posts.py -- Post endpoints.

Routes:
  GET    /posts         -- all posts, newest writeDate first (?title= filters by fragment)
  POST   /posts         -- create a post
  GET    /posts/{id}    -- one post
  PUT    /posts/{id}    -- update title/author/content (password required)
  DELETE /posts/{id}    -- delete (password required in the JSON body)

All routes are public: a post is protected by its own password, not by an
account. Wrong password -> 400, unknown id -> 404 (api/errors.py).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from api.errors import failure_response
from api.models import PostDeleteRequest, PostRequest, PostResponse
from core.results import Failure
from posts.service import PostService

router = APIRouter()


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service


@router.get("/posts", response_model=list[PostResponse])
def list_posts(
    title: Optional[str] = Query(None, description="Only posts whose title contains this text"),
    post_service: PostService = Depends(get_post_service),
) -> list[PostResponse]:
    return [PostResponse.from_post(p) for p in post_service.list(title_contains=title)]


@router.post("/posts", response_model=PostResponse)
def create_post(
    request: Request,
    body: PostRequest,
    post_service: PostService = Depends(get_post_service),
):
    result = post_service.create(body.title, body.author, body.password, body.content)
    if isinstance(result, Failure):
        return failure_response(request, result)
    return PostResponse.from_post(result.value)


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(
    request: Request,
    post_id: int,
    post_service: PostService = Depends(get_post_service),
):
    result = post_service.get_by_id(post_id)
    if isinstance(result, Failure):
        return failure_response(request, result)
    return PostResponse.from_post(result.value)


@router.put("/posts/{post_id}", response_model=PostResponse)
def update_post(
    request: Request,
    post_id: int,
    body: PostRequest,
    post_service: PostService = Depends(get_post_service),
):
    """Overwrite title, author and content. writeDate and the password stay as they were."""
    result = post_service.update(post_id, body.title, body.author, body.password, body.content)
    if isinstance(result, Failure):
        return failure_response(request, result)
    return PostResponse.from_post(result.value)


@router.delete("/posts/{post_id}", response_class=PlainTextResponse)
def delete_post(
    request: Request,
    post_id: int,
    body: PostDeleteRequest,
    post_service: PostService = Depends(get_post_service),
):
    result = post_service.delete(post_id, body.password)
    if isinstance(result, Failure):
        return failure_response(request, result)
    return PlainTextResponse(f"Post deleted successfully.\nDeleted post id: {result.value}")
