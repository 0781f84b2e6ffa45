"""
Customers API Endpoints
Customer management for fitters and staff

Author: TM3
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from typing import Optional, List
from pydantic import BaseModel, Field

from app.api.common import collection_response, item_response
from app.core.auth import TokenUser, ROLE_FITTER, require_admin, require_customer_editor
from app.domain.customer import CustomerCreate, CustomerUpdate
from app.domain.exceptions import ConflictError
from app.domain.value_objects import CustomerStatus
from app.repositories.customer_repository import CustomerRepository
from app.services.customer_service import CustomerService

router = APIRouter()


class CustomerStatusChange(BaseModel):
    status: CustomerStatus


class CustomerBulkCreate(BaseModel):
    customers: List[CustomerCreate] = Field(..., min_length=1, max_length=500)


def _fitter_scope(user: TokenUser) -> Optional[int]:
    if user.role == ROLE_FITTER:
        return user.fitter_id or 0
    return None


@router.get("/")
async def get_customers(
    search: Optional[str] = Query(None, description="Search by name, email, horse name or company"),
    fitter_id: Optional[int] = Query(None, gt=0, description="Filter by fitter"),
    status_filter: Optional[CustomerStatus] = Query(None, alias="status", description="Filter by status"),
    country: Optional[str] = Query(None, description="Filter by country"),
    city: Optional[str] = Query(None, description="Filter by city"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(require_customer_editor)
):
    """
    Get customers with optional filters

    Fitters only see their own customers.
    """
    try:
        repo = CustomerRepository()

        scope = _fitter_scope(user)
        if scope is not None:
            fitter_id = scope

        customers, total = repo.find_all(
            search=search,
            fitter_id=fitter_id,
            status=status_filter.value if status_filter else None,
            country=country,
            city=city,
            limit=limit,
            offset=offset
        )

        return collection_response(customers, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching customers: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer_data: CustomerCreate,
    user: TokenUser = Depends(require_customer_editor)
):
    """Create a customer. Customers created by a fitter are assigned to that fitter."""
    try:
        customer = CustomerService().create_customer(customer_data, user)
        return item_response(customer)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating customer: {str(e)}")


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
async def bulk_create_customers(
    payload: CustomerBulkCreate,
    user: TokenUser = Depends(require_admin)
):
    """Import several customers at once (all or nothing)"""
    try:
        customers = CustomerService().bulk_create(payload.customers, user)
        return collection_response(customers)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error importing customers: {str(e)}")


@router.get("/stats")
async def get_customer_stats(user: TokenUser = Depends(require_admin)):
    """
    Get customer statistics

    Returns:
    - Total customers
    - Active customers
    - Customers without a fitter
    - Number of countries
    """
    try:
        return {
            "status": "success",
            "data": CustomerRepository().get_stats()
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/without-fitter")
async def get_customers_without_fitter(user: TokenUser = Depends(require_admin)):
    """Customers nobody looks after yet"""
    try:
        return collection_response(CustomerRepository().find_without_fitter())
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching customers: {str(e)}")


@router.get("/active")
async def get_active_customers(user: TokenUser = Depends(require_customer_editor)):
    try:
        repo = CustomerRepository()
        scope = _fitter_scope(user)
        if scope is not None:
            customers = [c for c in repo.find_by_fitter(scope) if c.is_active]
        else:
            customers = repo.find_active()
        return collection_response(customers)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching customers: {str(e)}")


@router.get("/active/count")
async def count_active_customers(user: TokenUser = Depends(require_admin)):
    try:
        return {"status": "success", "data": {"count": CustomerRepository().count_active()}}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error counting customers: {str(e)}")


@router.get("/fitter/{fitter_id}")
async def get_customers_by_fitter(
    fitter_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_customer_editor)
):
    scope = _fitter_scope(user)
    if scope is not None and scope != fitter_id:
        raise HTTPException(status_code=403, detail="Fitters can only list their own customers")

    try:
        repo = CustomerRepository()
        customers = repo.find_by_fitter(fitter_id)
        response = collection_response(customers)
        response["fitter_id"] = fitter_id
        return response

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching customers: {str(e)}")


@router.get("/fitter/{fitter_id}/count")
async def count_customers_by_fitter(fitter_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    try:
        count = CustomerRepository().count_by_fitter(fitter_id)
        return {"status": "success", "data": {"fitter_id": fitter_id, "count": count}}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error counting customers: {str(e)}")


@router.get("/country/{country}")
async def get_customers_by_country(country: str, user: TokenUser = Depends(require_admin)):
    try:
        return collection_response(CustomerRepository().find_by_country(country))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching customers: {str(e)}")


@router.get("/city/{city}")
async def get_customers_by_city(city: str, user: TokenUser = Depends(require_admin)):
    try:
        return collection_response(CustomerRepository().find_by_city(city))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching customers: {str(e)}")


@router.get("/{customer_id}")
async def get_customer(
    customer_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_customer_editor)
):
    """Get a single customer"""
    try:
        customer = CustomerService().get_customer(customer_id, user)

        if not customer:
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")

        return item_response(customer)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching customer: {str(e)}")


@router.patch("/{customer_id}")
async def update_customer(
    customer_data: CustomerUpdate,
    customer_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_customer_editor)
):
    """Update the fields that were sent. Send `version` to guard against concurrent edits."""
    try:
        customer = CustomerService().update_customer(customer_id, customer_data, user)

        if not customer:
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")

        return item_response(customer)

    except HTTPException:
        raise
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating customer: {str(e)}")


@router.patch("/{customer_id}/status")
async def change_customer_status(
    payload: CustomerStatusChange,
    customer_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_customer_editor)
):
    try:
        customer = CustomerService().change_status(customer_id, payload.status, user)

        if not customer:
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")

        return item_response(customer)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error changing customer status: {str(e)}")


@router.post("/{customer_id}/deactivate")
async def deactivate_customer(customer_id: int = Path(..., gt=0), user: TokenUser = Depends(require_customer_editor)):
    return await change_customer_status(payload=CustomerStatusChange(status=CustomerStatus.INACTIVE), customer_id=customer_id, user=user)


@router.post("/{customer_id}/reactivate")
async def reactivate_customer(customer_id: int = Path(..., gt=0), user: TokenUser = Depends(require_customer_editor)):
    return await change_customer_status(payload=CustomerStatusChange(status=CustomerStatus.ACTIVE), customer_id=customer_id, user=user)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    """Soft-delete a customer (admin only)"""
    try:
        if not CustomerRepository().soft_delete(customer_id, user_id=user.id):
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting customer: {str(e)}")


@router.post("/{customer_id}/restore")
async def restore_customer(customer_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    """Undo a soft delete (admin only)"""
    try:
        customer = CustomerRepository().restore(customer_id, user_id=user.id)

        if not customer:
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")

        return item_response(customer)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error restoring customer: {str(e)}")


@router.post("/{customer_id}/assign-fitter/{fitter_id}")
async def assign_fitter(
    customer_id: int = Path(..., gt=0),
    fitter_id: int = Path(..., gt=0),
    user: TokenUser = Depends(require_admin)
):
    try:
        customer = CustomerService().assign_fitter(customer_id, fitter_id, user)

        if not customer:
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")

        return item_response(customer)

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error assigning fitter: {str(e)}")


@router.delete("/{customer_id}/fitter")
async def remove_fitter(customer_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    try:
        customer = CustomerService().remove_fitter(customer_id, user)

        if not customer:
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")

        return item_response(customer)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing fitter: {str(e)}")


@router.get("/{customer_id}/integrity")
async def validate_customer_integrity(customer_id: int = Path(..., gt=0), user: TokenUser = Depends(require_admin)):
    """Report data problems on a customer record"""
    try:
        service = CustomerService()
        customer = service.customers.find_by_id(customer_id)

        if not customer:
            raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")

        return {
            "status": "success",
            "data": service.validate_data_integrity(customer)
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error validating customer: {str(e)}")
