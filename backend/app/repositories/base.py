"""
Base Repository - shared data access plumbing

Every repository reads through a base SELECT (with its JOINs) and writes
through the behavior layer, so timestamps, authorship, soft deletion and
version counters are filled in the same way for every table.

Author: TM3
Date: 2025-10-17
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from psycopg2.extras import Json

from app.behaviors import BehaviorContext, Operation, behavior_manager
from app.core.database import get_db_connection_dict

logger = logging.getLogger(__name__)


def adapt_value(value: Any) -> Any:
    """Convert Python values psycopg2 can't send as-is"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (dict, list)):
        return Json(value)
    return value


class BaseRepository:
    """
    Subclasses set:
        table: table name
        alias: alias used in base_select
        model: SQLAlchemy model carrying the behavior tags
        entity_type: label used in logs and errors
        base_select: SELECT ... FROM ... (JOINs allowed, no WHERE)
        soft_delete: whether rows are soft-deleted
    and implement _map_row.
    """

    table: str = ""
    alias: str = ""
    model = None
    entity_type: str = ""
    base_select: str = ""
    soft_delete: bool = True

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @staticmethod
    def _connect():
        return get_db_connection_dict()

    @staticmethod
    def _map_row(row: dict):
        raise NotImplementedError

    def _col(self, column: str) -> str:
        return f"{self.alias}.{column}" if self.alias else column

    def _base_conditions(self) -> List[str]:
        if self.soft_delete:
            return [f"{self._col('deleted_at')} IS NULL"]
        return []

    def _context(self, operation: Operation, user_id: Optional[int] = None,
                 original: Optional[dict] = None, expected_version: Optional[int] = None) -> BehaviorContext:
        return BehaviorContext(
            operation=operation,
            entity_type=self.entity_type,
            user_id=user_id,
            original=dict(original) if original else None,
            expected_version=expected_version,
        )

    def _query_all(self, sql: str, params: Sequence = ()) -> List[dict]:
        conn = self._connect()
        cursor = conn.cursor()
        try:
            cursor.execute(sql, list(params))
            return cursor.fetchall()
        finally:
            cursor.close()
            conn.close()

    def _query_one(self, sql: str, params: Sequence = ()) -> Optional[dict]:
        conn = self._connect()
        cursor = conn.cursor()
        try:
            cursor.execute(sql, list(params))
            return cursor.fetchone()
        finally:
            cursor.close()
            conn.close()

    def _find_where(self, conditions: List[str], params: List[Any], order_by: str,
                    limit: Optional[int] = None) -> list:
        """Rows matching conditions (soft-deleted rows excluded), mapped to domain models"""
        where_clause = " AND ".join(self._base_conditions() + conditions) or "1=1"
        sql = f"{self.base_select} WHERE {where_clause} ORDER BY {order_by}"
        query_params = list(params)
        if limit is not None:
            sql += " LIMIT %s"
            query_params.append(limit)
        return [self._map_row(row) for row in self._query_all(sql, query_params)]

    def _paginate(self, conditions: List[str], params: List[Any], order_by: str,
                  limit: int, offset: int) -> Tuple[list, int]:
        """Page of domain models plus the total count for the same filters"""
        conn = self._connect()
        cursor = conn.cursor()

        try:
            where_clause = " AND ".join(self._base_conditions() + conditions) or "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM {self.table} {self.alias}
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                {self.base_select}
                WHERE {where_clause}
                ORDER BY {order_by}
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            rows = cursor.fetchall()
            return [self._map_row(row) for row in rows], total

        finally:
            cursor.close()
            conn.close()

    def _count(self, conditions: List[str], params: List[Any]) -> int:
        where_clause = " AND ".join(self._base_conditions() + conditions) or "1=1"
        row = self._query_one(f"""
            SELECT COUNT(*) as total
            FROM {self.table} {self.alias}
            WHERE {where_clause}
        """, params)
        return row['total'] if row else 0

    def _lock_row(self, cursor, record_id: int, include_deleted: bool = False) -> Optional[dict]:
        sql = f"SELECT * FROM {self.table} WHERE id = %s"
        if self.soft_delete and not include_deleted:
            sql += " AND deleted_at IS NULL"
        cursor.execute(sql + " FOR UPDATE", (record_id,))
        return cursor.fetchone()

    def _write_update(self, cursor, record_id: int, payload: Dict[str, Any]):
        assignments = ", ".join(f"{column} = %s" for column in payload)
        params = [adapt_value(v) for v in payload.values()] + [record_id]
        cursor.execute(f"UPDATE {self.table} SET {assignments} WHERE id = %s", params)

    # ------------------------------------------------------------------
    # Generic CRUD
    # ------------------------------------------------------------------

    def find_by_id(self, record_id: int, include_deleted: bool = False):
        """
        Find a row by ID

        Returns:
            Domain model or None if not found (or soft-deleted)
        """
        conditions = [f"{self._col('id')} = %s"]
        if self.soft_delete and not include_deleted:
            conditions += self._base_conditions()
        row = self._query_one(f"{self.base_select} WHERE {' AND '.join(conditions)}", [record_id])
        return self._map_row(row) if row else None

    def create(self, data: Dict[str, Any], user_id: Optional[int] = None):
        """
        Insert a row after applying the create behaviors

        Returns:
            The stored domain model
        """
        payload = behavior_manager.apply_before_save(self.model, data, self._context(Operation.CREATE, user_id))

        conn = self._connect()
        cursor = conn.cursor()

        try:
            columns = ", ".join(payload.keys())
            placeholders = ", ".join(["%s"] * len(payload))
            cursor.execute(
                f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders}) RETURNING id",
                [adapt_value(v) for v in payload.values()]
            )
            new_id = cursor.fetchone()['id']

            cursor.execute(f"{self.base_select} WHERE {self._col('id')} = %s", (new_id,))
            row = cursor.fetchone()
            conn.commit()

            logger.info(f"Created {self.entity_type} {new_id}")
            return self._map_row(row)

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def update(self, record_id: int, data: Dict[str, Any], user_id: Optional[int] = None,
               expected_version: Optional[int] = None):
        """
        Update only the given fields

        Returns:
            The updated domain model, or None if the row doesn't exist

        Raises:
            ConflictError: expected_version doesn't match the stored version
        """
        conn = self._connect()
        cursor = conn.cursor()

        try:
            original = self._lock_row(cursor, record_id)
            if not original:
                conn.rollback()
                return None

            context = self._context(Operation.UPDATE, user_id, original, expected_version)
            payload = behavior_manager.apply_before_save(self.model, data, context)

            self._write_update(cursor, record_id, payload)
            cursor.execute(f"{self.base_select} WHERE {self._col('id')} = %s", (record_id,))
            row = cursor.fetchone()
            conn.commit()

            return self._map_row(row)

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def soft_delete(self, record_id: int, user_id: Optional[int] = None) -> bool:
        """
        Mark a row deleted

        Returns:
            True if a row was deleted, False if it didn't exist
        """
        conn = self._connect()
        cursor = conn.cursor()

        try:
            original = self._lock_row(cursor, record_id)
            if not original:
                conn.rollback()
                return False

            payload = behavior_manager.apply_before_delete(
                self.model, {}, self._context(Operation.DELETE, user_id, original)
            )
            self._write_update(cursor, record_id, payload)
            conn.commit()

            logger.info(f"Soft-deleted {self.entity_type} {record_id}")
            return True

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def restore(self, record_id: int, user_id: Optional[int] = None):
        """
        Bring back a soft-deleted row

        Returns:
            The restored domain model, or None if the row doesn't exist
        """
        conn = self._connect()
        cursor = conn.cursor()

        try:
            original = self._lock_row(cursor, record_id, include_deleted=True)
            if not original:
                conn.rollback()
                return None

            payload = behavior_manager.apply_before_restore(
                self.model, {}, self._context(Operation.RESTORE, user_id, original)
            )
            self._write_update(cursor, record_id, payload)
            cursor.execute(f"{self.base_select} WHERE {self._col('id')} = %s", (record_id,))
            row = cursor.fetchone()
            conn.commit()

            logger.info(f"Restored {self.entity_type} {record_id}")
            return self._map_row(row)

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def hard_delete(self, record_id: int) -> bool:
        conn = self._connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"DELETE FROM {self.table} WHERE id = %s", (record_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted {self.entity_type} {record_id}")
            return deleted

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def name_exists(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """Case-insensitive name check among rows that are not deleted"""
        conditions = [f"LOWER({self._col('name')}) = LOWER(%s)"]
        params: List[Any] = [name]
        if exclude_id is not None:
            conditions.append(f"{self._col('id')} <> %s")
            params.append(exclude_id)
        return self._count(conditions, params) > 0
