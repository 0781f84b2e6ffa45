"""
Shared response helpers for the API routers

Collections carry both the plain envelope and the Hydra keys the
dashboard reads (hydra:member / hydra:totalItems).
"""
from typing import Any, Iterable, Optional


def collection_response(items: Iterable[Any], total: Optional[int] = None,
                        limit: Optional[int] = None, offset: int = 0) -> dict:
    data = [item.to_dict() if hasattr(item, "to_dict") else item for item in items]
    if total is None:
        total = len(data)
    return {
        "status": "success",
        "total": total,
        "limit": limit if limit is not None else len(data),
        "offset": offset,
        "count": len(data),
        "data": data,
        "hydra:member": data,
        "hydra:totalItems": total,
    }


def item_response(item: Any) -> dict:
    return {
        "status": "success",
        "data": item.to_dict() if hasattr(item, "to_dict") else item,
    }
