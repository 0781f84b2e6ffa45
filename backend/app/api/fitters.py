"""
Fitters API Endpoints
Fitter management (admin only)

Author: TM3
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from typing import Optional

from app.api.common import collection_response, item_response
from app.core.auth import TokenUser, require_admin
from app.domain.business_partner import FitterCreate, FitterUpdate
from app.domain.exceptions import ConflictError
from app.repositories.partner_repository import FitterRepository

router = APIRouter()


@router.get("/")
async def get_fitters(
    city: Optional[str] = Query(None, description="Filter by city"),
    country: Optional[str] = Query(None, description="Filter by country"),
    search: Optional[str] = Query(None, description="Search by name or email"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_admin)
):
    """Get fitters, ordered by city"""
    try:
        fitters, total = FitterRepository().find_all(
            city=city, country=country, search=search, limit=limit, offset=offset
        )
        return collection_response(fitters, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching fitters: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_fitter(
    fitter_data: FitterCreate,
    user: TokenUser = Depends(require_admin)
):
    try:
        repo = FitterRepository()

        if repo.find_by_user_id(fitter_data.user_id):
            raise ConflictError(f"User {fitter_data.user_id} is already linked to a fitter")

        fitter = repo.create(fitter_data.model_dump(), user_id=user.id)
        return item_response(fitter)

    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating fitter: {str(e)}")


@router.get("/active")
async def get_active_fitters(user: TokenUser = Depends(require_admin)):
    try:
        return collection_response(FitterRepository().find_active())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching fitters: {str(e)}")


@router.get("/country/{country}")
async def get_fitters_by_country(country: str, user: TokenUser = Depends(require_admin)):
    try:
        return collection_response(FitterRepository().find_by_country(country))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching fitters: {str(e)}")


@router.get("/city/{city}")
async def get_fitters_by_city(city: str, user: TokenUser = Depends(require_admin)):
    try:
        return collection_response(FitterRepository().find_by_city(city))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching fitters: {str(e)}")


@router.get("/stats/country/{country}/count")
async def count_fitters_by_country(country: str, user: TokenUser = Depends(require_admin)):
    try:
        count = FitterRepository().count_by_country(country)
        return {"status": "success", "data": {"country": country, "count": count}}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error counting fitters: {str(e)}")


@router.get("/stats/active/count")
async def count_active_fitters(user: TokenUser = Depends(require_admin)):
    try:
        return {"status": "success", "data": {"count": FitterRepository().count_active()}}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error counting fitters: {str(e)}")


@router.get("/user/{user_id}")
async def get_fitter_by_user(user_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    """Fitter row linked to a login account"""
    try:
        fitter = FitterRepository().find_by_user_id(user_id)

        if not fitter:
            raise HTTPException(status_code=404, detail=f"No fitter linked to user {user_id}")

        return item_response(fitter)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching fitter: {str(e)}")


@router.get("/{fitter_id}")
async def get_fitter(fitter_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    try:
        fitter = FitterRepository().find_by_id(fitter_id)

        if not fitter:
            raise HTTPException(status_code=404, detail=f"Fitter {fitter_id} not found")

        return item_response(fitter)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching fitter: {str(e)}")


@router.patch("/{fitter_id}")
async def update_fitter(
    fitter_data: FitterUpdate,
    fitter_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        changes = fitter_data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No fields to update")

        fitter = FitterRepository().update(fitter_id, changes, user_id=user.id)

        if not fitter:
            raise HTTPException(status_code=404, detail=f"Fitter {fitter_id} not found")

        return item_response(fitter)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating fitter: {str(e)}")


@router.delete("/{fitter_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fitter(fitter_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    """Soft-delete a fitter; their customers keep the reference"""
    try:
        if not FitterRepository().soft_delete(fitter_id, user_id=user.id):
            raise HTTPException(status_code=404, detail=f"Fitter {fitter_id} not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting fitter: {str(e)}")
