"""
Leather Types API Endpoints

Author: TM3
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from typing import Optional

from app.api.common import collection_response, item_response
from app.core.auth import TokenUser, require_admin, require_catalog_viewer
from app.domain.catalog import LeathertypeCreate, LeathertypeUpdate
from app.domain.exceptions import ConflictError
from app.repositories.catalog_repository import LeathertypeRepository

router = APIRouter()


@router.get("/")
async def get_leathertypes(
    search: Optional[str] = Query(None, description="Search by name"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_catalog_viewer)
):
    try:
        leathertypes, total = LeathertypeRepository().find_all(search=search, limit=limit, offset=offset)
        return collection_response(leathertypes, total, limit, offset)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching leather types: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_leathertype(
    leathertype_data: LeathertypeCreate,
    user: TokenUser = Depends(require_admin)
):
    try:
        repo = LeathertypeRepository()

        if repo.name_exists(leathertype_data.name):
            raise ConflictError(f"Leather type '{leathertype_data.name}' already exists")

        leathertype = repo.create(leathertype_data.model_dump(), user_id=user.id)
        return item_response(leathertype)

    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating leather type: {str(e)}")


@router.get("/active")
async def get_active_leathertypes(user: TokenUser = Depends(require_catalog_viewer)):
    try:
        return collection_response(LeathertypeRepository().find_active())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching leather types: {str(e)}")


@router.get("/{leathertype_id}")
async def get_leathertype(leathertype_id: int = Path(..., gt=0), user: TokenUser = Depends(require_catalog_viewer)):
    try:
        leathertype = LeathertypeRepository().find_by_id(leathertype_id)

        if not leathertype:
            raise HTTPException(status_code=404, detail=f"Leather type {leathertype_id} not found")

        return item_response(leathertype)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching leather type: {str(e)}")


@router.patch("/{leathertype_id}")
async def update_leathertype(
    leathertype_data: LeathertypeUpdate,
    leathertype_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        repo = LeathertypeRepository()

        changes = leathertype_data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No fields to update")

        if changes.get('name') and repo.name_exists(changes['name'], exclude_id=leathertype_id):
            raise ConflictError(f"Leather type '{changes['name']}' already exists")

        leathertype = repo.update(leathertype_id, changes, user_id=user.id)

        if not leathertype:
            raise HTTPException(status_code=404, detail=f"Leather type {leathertype_id} not found")

        return item_response(leathertype)

    except HTTPException:
        raise
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating leather type: {str(e)}")


@router.delete("/{leathertype_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_leathertype(leathertype_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    try:
        if not LeathertypeRepository().soft_delete(leathertype_id, user_id=user.id):
            raise HTTPException(status_code=404, detail=f"Leather type {leathertype_id} not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting leather type: {str(e)}")
