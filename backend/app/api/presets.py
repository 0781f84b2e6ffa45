"""
Presets API Endpoints
Saved saddle configurations offered in the order form

Author: TM3
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from typing import Optional

from app.api.common import collection_response, item_response
from app.core.auth import TokenUser, require_admin, require_catalog_viewer
from app.domain.catalog import PresetCreate, PresetUpdate
from app.domain.exceptions import ConflictError
from app.repositories.catalog_repository import PresetRepository

router = APIRouter()


@router.get("/")
async def get_presets(
    search: Optional[str] = Query(None, description="Search by name"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_catalog_viewer)
):
    """Get presets in display order"""
    try:
        presets, total = PresetRepository().find_all(search=search, limit=limit, offset=offset)
        return collection_response(presets, total, limit, offset)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching presets: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_preset(
    preset_data: PresetCreate,
    user: TokenUser = Depends(require_admin)
):
    try:
        repo = PresetRepository()

        if repo.name_exists(preset_data.name):
            raise ConflictError(f"Preset '{preset_data.name}' already exists")

        preset = repo.create(preset_data.model_dump(), user_id=user.id)
        return item_response(preset)

    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating preset: {str(e)}")


@router.get("/active")
async def get_active_presets(user: TokenUser = Depends(require_catalog_viewer)):
    try:
        return collection_response(PresetRepository().find_active())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching presets: {str(e)}")


@router.get("/{preset_id}")
async def get_preset(preset_id: int = Path(..., gt=0), user: TokenUser = Depends(require_catalog_viewer)):
    try:
        preset = PresetRepository().find_by_id(preset_id)

        if not preset:
            raise HTTPException(status_code=404, detail=f"Preset {preset_id} not found")

        return item_response(preset)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching preset: {str(e)}")


@router.patch("/{preset_id}")
async def update_preset(
    preset_data: PresetUpdate,
    preset_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        repo = PresetRepository()

        changes = preset_data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No fields to update")

        if changes.get('name') and repo.name_exists(changes['name'], exclude_id=preset_id):
            raise ConflictError(f"Preset '{changes['name']}' already exists")

        preset = repo.update(preset_id, changes, user_id=user.id)

        if not preset:
            raise HTTPException(status_code=404, detail=f"Preset {preset_id} not found")

        return item_response(preset)

    except HTTPException:
        raise
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating preset: {str(e)}")


@router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_preset(preset_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    try:
        if not PresetRepository().soft_delete(preset_id, user_id=user.id):
            raise HTTPException(status_code=404, detail=f"Preset {preset_id} not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting preset: {str(e)}")
