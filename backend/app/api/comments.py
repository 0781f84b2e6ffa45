"""
Comments API Endpoints
Notes attached to orders

Any signed-in user can comment on an order they can see. Internal comments
are staff only, and only the author or staff may edit or delete a comment.

Author: TM3
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from typing import Optional

from app.api.common import collection_response, item_response
from app.core.auth import TokenUser, get_current_user, require_admin
from app.domain.comment import Comment, CommentCreate, CommentUpdate, CommentType
from app.repositories.comment_repository import CommentRepository
from app.services.order_service import OrderService

router = APIRouter()


def _check_order_access(order_id: int, user: TokenUser):
    if user.is_staff:
        return
    if OrderService().get_order(order_id, user) is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")


def _visible(comment: Comment, user: TokenUser) -> bool:
    return user.is_staff or not comment.is_internal


def _check_author(comment: Comment, user: TokenUser):
    if not user.is_staff and comment.user_id != user.id:
        raise HTTPException(status_code=403, detail="Only the author can change this comment")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    user: TokenUser = Depends(get_current_user)
):
    try:
        _check_order_access(comment_data.order_id, user)

        if (comment_data.is_internal or comment_data.type == CommentType.INTERNAL) and not user.is_staff:
            raise HTTPException(status_code=403, detail="Only staff can post internal comments")

        payload = comment_data.model_dump()
        payload['user_id'] = user.id
        if payload['type'] == CommentType.INTERNAL:
            payload['is_internal'] = True

        comment = CommentRepository().create(payload, user_id=user.id)
        return item_response(comment)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating comment: {str(e)}")


@router.get("/")
async def get_comments(
    order_id: Optional[int] = Query(None, gt=0, description="Filter by order"),
    user_id: Optional[int] = Query(None, gt=0, description="Filter by author"),
    comment_type: Optional[CommentType] = Query(None, alias="type", description="Filter by type"),
    is_internal: Optional[bool] = Query(None, description="Filter internal/public"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(get_current_user)
):
    """
    Get comments, newest first

    Non-staff users only get public comments, and without an order filter
    only their own.
    """
    try:
        if not user.is_staff:
            is_internal = False
            if order_id is not None:
                _check_order_access(order_id, user)
            else:
                user_id = user.id

        comments, total = CommentRepository().find_all(
            order_id=order_id,
            user_id=user_id,
            comment_type=comment_type.value if comment_type else None,
            is_internal=is_internal,
            limit=limit,
            offset=offset
        )
        return collection_response(comments, total, limit, offset)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching comments: {str(e)}")


@router.get("/order/{order_id}")
async def get_order_comments(order_id: int = Path(..., gt=0), user: TokenUser = Depends(get_current_user)):
    """Conversation on an order, oldest first"""
    try:
        _check_order_access(order_id, user)
        comments = CommentRepository().find_by_order(order_id, is_internal=None if user.is_staff else False)
        return collection_response(comments)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching comments: {str(e)}")


@router.get("/order/{order_id}/public")
async def get_order_public_comments(order_id: int = Path(..., gt=0), user: TokenUser = Depends(get_current_user)):
    try:
        _check_order_access(order_id, user)
        return collection_response(CommentRepository().find_by_order(order_id, is_internal=False))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching comments: {str(e)}")


@router.get("/order/{order_id}/internal")
async def get_order_internal_comments(order_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    try:
        return collection_response(CommentRepository().find_by_order(order_id, is_internal=True))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching comments: {str(e)}")


@router.get("/order/{order_id}/stats")
async def get_order_comment_stats(order_id: int = Path(..., gt=0), user: TokenUser = Depends(get_current_user)):
    try:
        _check_order_access(order_id, user)
        return {
            "status": "success",
            "data": CommentRepository().get_order_stats(order_id)
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching comment stats: {str(e)}")


@router.get("/user/{user_id}")
async def get_user_comments(user_id: int = Path(..., gt=0), user: TokenUser = Depends(get_current_user)):
    if not user.is_staff and user_id != user.id:
        raise HTTPException(status_code=403, detail="You can only list your own comments")

    try:
        comments = [c for c in CommentRepository().find_by_user(user_id) if _visible(c, user)]
        return collection_response(comments)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching comments: {str(e)}")


@router.get("/{comment_id}")
async def get_comment(comment_id: int = Path(..., gt=0), user: TokenUser = Depends(get_current_user)):
    try:
        comment = CommentRepository().find_by_id(comment_id)

        if not comment or not _visible(comment, user):
            raise HTTPException(status_code=404, detail=f"Comment {comment_id} not found")

        _check_order_access(comment.order_id, user)
        return item_response(comment)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching comment: {str(e)}")


@router.patch("/{comment_id}")
async def update_comment(
    comment_data: CommentUpdate,
    comment_id: int = Path(..., gt=0),
    user: TokenUser = Depends(get_current_user)
):
    try:
        repo = CommentRepository()
        comment = repo.find_by_id(comment_id)

        if not comment or not _visible(comment, user):
            raise HTTPException(status_code=404, detail=f"Comment {comment_id} not found")

        _check_author(comment, user)

        changes = comment_data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No fields to update")

        if not user.is_staff and (changes.get('is_internal') or changes.get('type') == CommentType.INTERNAL):
            raise HTTPException(status_code=403, detail="Only staff can post internal comments")

        updated = repo.update(comment_id, changes, user_id=user.id)

        if not updated:
            raise HTTPException(status_code=404, detail=f"Comment {comment_id} not found")

        return item_response(updated)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating comment: {str(e)}")


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(comment_id: int = Path(..., gt=0), user: TokenUser = Depends(get_current_user)):
    try:
        repo = CommentRepository()
        comment = repo.find_by_id(comment_id)

        if not comment or not _visible(comment, user):
            raise HTTPException(status_code=404, detail=f"Comment {comment_id} not found")

        _check_author(comment, user)

        repo.soft_delete(comment_id, user_id=user.id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting comment: {str(e)}")
