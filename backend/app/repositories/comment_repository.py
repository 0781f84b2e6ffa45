"""
Comment Repository - Data Access Layer for order comments

Author: TM3
Date: 2025-10-17
"""
from typing import List, Optional, Tuple, Dict, Any

from app.domain.comment import Comment
from app.models import Comment as CommentTable
from app.repositories.base import BaseRepository


class CommentRepository(BaseRepository):
    table = "comment"
    alias = "cm"
    model = CommentTable
    entity_type = "Comment"
    base_select = """
        SELECT
            cm.*,
            u.full_name AS user_name
        FROM comment cm
        LEFT JOIN credentials u ON u.id = cm.user_id
    """

    @staticmethod
    def _map_row(row: dict) -> Comment:
        return Comment.model_validate(dict(row))

    def find_all(
        self,
        order_id: Optional[int] = None,
        user_id: Optional[int] = None,
        comment_type: Optional[str] = None,
        is_internal: Optional[bool] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Comment], int]:
        """
        Find comments with filters, newest first

        Returns:
            Tuple of (list of comments, total count)
        """
        conditions = []
        params: List[Any] = []

        if order_id is not None:
            conditions.append("cm.order_id = %s")
            params.append(order_id)

        if user_id is not None:
            conditions.append("cm.user_id = %s")
            params.append(user_id)

        if comment_type:
            conditions.append("cm.type = %s")
            params.append(comment_type)

        if is_internal is not None:
            conditions.append("cm.is_internal = %s")
            params.append(is_internal)

        return self._paginate(conditions, params, "cm.created_at DESC, cm.id DESC", limit, offset)

    def find_by_order(self, order_id: int, is_internal: Optional[bool] = None) -> List[Comment]:
        """Comments on an order in conversation order; is_internal narrows to one kind"""
        conditions = ["cm.order_id = %s"]
        params: List[Any] = [order_id]
        if is_internal is not None:
            conditions.append("cm.is_internal = %s")
            params.append(is_internal)
        return self._find_where(conditions, params, "cm.created_at ASC, cm.id ASC")

    def find_by_user(self, user_id: int) -> List[Comment]:
        return self._find_where(["cm.user_id = %s"], [user_id], "cm.created_at DESC")

    def get_order_stats(self, order_id: int) -> Dict[str, Any]:
        """
        Comment counts for an order

        Returns:
            {"total", "internal", "public", "by_type": {type: count}, "last_comment_at"}
        """
        rows = self._query_all("""
            SELECT
                type,
                COUNT(*) as count,
                COUNT(*) FILTER (WHERE is_internal) as internal,
                MAX(created_at) as last_comment_at
            FROM comment
            WHERE order_id = %s AND deleted_at IS NULL
            GROUP BY type
        """, [order_id])

        total = sum(row['count'] for row in rows)
        internal = sum(row['internal'] for row in rows)
        timestamps = [row['last_comment_at'] for row in rows if row['last_comment_at']]

        return {
            "order_id": order_id,
            "total": total,
            "internal": internal,
            "public": total - internal,
            "by_type": {row['type']: row['count'] for row in rows},
            "last_comment_at": max(timestamps).isoformat() if timestamps else None,
        }
