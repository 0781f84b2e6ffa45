"""
Behavior context passed to every behavior hook
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class Operation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"


@dataclass
class BehaviorContext:
    """
    What is being written, by whom, and the row as it was before.

    original holds the stored row for update/delete/restore and is None
    on create. expected_version is the version the caller last saw.
    """
    operation: Operation
    entity_type: str
    user_id: Optional[int] = None
    original: Optional[Dict[str, Any]] = None
    expected_version: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
