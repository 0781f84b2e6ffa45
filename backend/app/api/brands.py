"""
Brands API Endpoints

Author: TM3
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from typing import Optional

from app.api.common import collection_response, item_response
from app.core.auth import TokenUser, require_admin, require_catalog_viewer
from app.domain.catalog import BrandCreate, BrandUpdate
from app.domain.exceptions import ConflictError
from app.repositories.catalog_repository import BrandRepository

router = APIRouter()


@router.get("/")
async def get_brands(
    search: Optional[str] = Query(None, description="Search by name"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_catalog_viewer)
):
    try:
        brands, total = BrandRepository().find_all(search=search, limit=limit, offset=offset)
        return collection_response(brands, total, limit, offset)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching brands: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_brand(
    brand_data: BrandCreate,
    user: TokenUser = Depends(require_admin)
):
    try:
        repo = BrandRepository()

        if repo.name_exists(brand_data.name):
            raise ConflictError(f"Brand '{brand_data.name}' already exists")

        brand = repo.create(brand_data.model_dump(), user_id=user.id)
        return item_response(brand)

    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating brand: {str(e)}")


@router.get("/active")
async def get_active_brands(user: TokenUser = Depends(require_catalog_viewer)):
    """Brands are never soft-deleted, so this is every brand"""
    try:
        return collection_response(BrandRepository().find_active())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching brands: {str(e)}")


@router.get("/{brand_id}")
async def get_brand(brand_id: int = Path(..., gt=0), user: TokenUser = Depends(require_catalog_viewer)):
    try:
        brand = BrandRepository().find_by_id(brand_id)

        if not brand:
            raise HTTPException(status_code=404, detail=f"Brand {brand_id} not found")

        return item_response(brand)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching brand: {str(e)}")


@router.patch("/{brand_id}")
async def update_brand(
    brand_data: BrandUpdate,
    brand_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        repo = BrandRepository()

        changes = brand_data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No fields to update")

        if changes.get('name') and repo.name_exists(changes['name'], exclude_id=brand_id):
            raise ConflictError(f"Brand '{changes['name']}' already exists")

        brand = repo.update(brand_id, changes, user_id=user.id)

        if not brand:
            raise HTTPException(status_code=404, detail=f"Brand {brand_id} not found")

        return item_response(brand)

    except HTTPException:
        raise
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating brand: {str(e)}")


@router.delete("/{brand_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_brand(brand_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    """Remove a brand for good"""
    try:
        if not BrandRepository().hard_delete(brand_id):
            raise HTTPException(status_code=404, detail=f"Brand {brand_id} not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting brand: {str(e)}")
