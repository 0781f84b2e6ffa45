"""
Factories API Endpoints

Staff manage factories; a factory account can read its own record only.

Author: TM3
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from typing import Optional

from app.api.common import collection_response, item_response
from app.core.auth import TokenUser, ROLE_FACTORY, require_admin, require_factory_viewer
from app.domain.business_partner import FactoryCreate, FactoryUpdate
from app.domain.exceptions import ConflictError
from app.repositories.partner_repository import FactoryRepository

router = APIRouter()


def _own_factory_only(user: TokenUser, items: list) -> list:
    if user.role == ROLE_FACTORY:
        return [f for f in items if f.id == user.factory_id]
    return items


@router.get("/")
async def get_factories(
    city: Optional[str] = Query(None, description="Filter by city"),
    country: Optional[str] = Query(None, description="Filter by country"),
    search: Optional[str] = Query(None, description="Search by name or email"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_factory_viewer)
):
    try:
        repo = FactoryRepository()

        if user.role == ROLE_FACTORY:
            own = repo.find_by_id(user.factory_id) if user.factory_id else None
            return collection_response([own] if own else [], limit=limit, offset=offset)

        factories, total = repo.find_all(city=city, country=country, search=search, limit=limit, offset=offset)
        return collection_response(factories, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching factories: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_factory(
    factory_data: FactoryCreate,
    user: TokenUser = Depends(require_admin)
):
    try:
        repo = FactoryRepository()

        if repo.find_by_user_id(factory_data.user_id):
            raise ConflictError(f"User {factory_data.user_id} is already linked to a factory")

        factory = repo.create(factory_data.model_dump(), user_id=user.id)
        return item_response(factory)

    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating factory: {str(e)}")


@router.get("/active")
async def get_active_factories(user: TokenUser = Depends(require_factory_viewer)):
    try:
        return collection_response(_own_factory_only(user, FactoryRepository().find_active()))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching factories: {str(e)}")


@router.get("/country/{country}")
async def get_factories_by_country(country: str, user: TokenUser = Depends(require_factory_viewer)):
    try:
        factories = FactoryRepository().find_by_country(country)
        return collection_response(_own_factory_only(user, factories))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching factories: {str(e)}")


@router.get("/city/{city}")
async def get_factories_by_city(city: str, user: TokenUser = Depends(require_factory_viewer)):
    try:
        factories = FactoryRepository().find_by_city(city)
        return collection_response(_own_factory_only(user, factories))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching factories: {str(e)}")


@router.get("/stats/country/{country}/count")
async def count_factories_by_country(country: str, user: TokenUser = Depends(require_admin)):
    try:
        count = FactoryRepository().count_by_country(country)
        return {"status": "success", "data": {"country": country, "count": count}}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error counting factories: {str(e)}")


@router.get("/stats/active/count")
async def count_active_factories(user: TokenUser = Depends(require_admin)):
    try:
        return {"status": "success", "data": {"count": FactoryRepository().count_active()}}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error counting factories: {str(e)}")


@router.get("/user/{user_id}")
async def get_factory_by_user(user_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    try:
        factory = FactoryRepository().find_by_user_id(user_id)

        if not factory:
            raise HTTPException(status_code=404, detail=f"No factory linked to user {user_id}")

        return item_response(factory)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching factory: {str(e)}")


@router.get("/{factory_id}")
async def get_factory(factory_id: int = Path(..., gt=0), user: TokenUser = Depends(require_factory_viewer)):
    if user.role == ROLE_FACTORY and user.factory_id != factory_id:
        raise HTTPException(status_code=404, detail=f"Factory {factory_id} not found")

    try:
        factory = FactoryRepository().find_by_id(factory_id)

        if not factory:
            raise HTTPException(status_code=404, detail=f"Factory {factory_id} not found")

        return item_response(factory)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching factory: {str(e)}")


@router.patch("/{factory_id}")
async def update_factory(
    factory_data: FactoryUpdate,
    factory_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        changes = factory_data.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No fields to update")

        factory = FactoryRepository().update(factory_id, changes, user_id=user.id)

        if not factory:
            raise HTTPException(status_code=404, detail=f"Factory {factory_id} not found")

        return item_response(factory)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating factory: {str(e)}")


@router.delete("/{factory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_factory(factory_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    try:
        if not FactoryRepository().soft_delete(factory_id, user_id=user.id):
            raise HTTPException(status_code=404, detail=f"Factory {factory_id} not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting factory: {str(e)}")
