"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and returns Order domain models.

Author: TM3
Date: 2025-10-17
"""
from typing import List, Optional, Tuple, Dict, Any

from app.domain.order import Order
from app.domain.value_objects import OrderStatus
from app.models import Order as OrderTable
from app.repositories.base import BaseRepository

FINAL_STATUSES = [s.value for s in OrderStatus if s.is_final]
IN_PRODUCTION_STATUSES = [s.value for s in OrderStatus if s.is_in_production]
SCHEDULE_STATUSES = [OrderStatus.CONFIRMED.value] + IN_PRODUCTION_STATUSES

# Columns an Order domain object may write back
PERSISTED_FIELDS = [
    'customer_id', 'customer_name', 'fitter_id', 'factory_id', 'saddle_id', 'leather_id',
    'status', 'priority', 'is_urgent',
    'saddle_specifications', 'measurements', 'seat_sizes', 'special_instructions',
    'estimated_delivery_date', 'actual_delivery_date',
    'total_amount', 'deposit_paid', 'balance_owing',
    'fitter_stock', 'custom_order', 'repair', 'demo', 'sponsored', 'rushed',
]


class OrderRepository(BaseRepository):
    """
    Repository for Order data access

    Every finder takes optional fitter_id / factory_id so callers can
    restrict results to the orders a fitter or factory may see.
    """

    table = "orders"
    alias = "o"
    model = OrderTable
    entity_type = "Order"
    base_select = """
        SELECT
            o.*,
            fc.full_name AS fitter_name,
            kc.full_name AS factory_name
        FROM orders o
        LEFT JOIN fitters f ON f.id = o.fitter_id
        LEFT JOIN credentials fc ON fc.id = f.user_id
        LEFT JOIN factories k ON k.id = o.factory_id
        LEFT JOIN credentials kc ON kc.id = k.user_id
    """

    @staticmethod
    def _map_row(row: dict) -> Order:
        return Order.model_validate(dict(row))

    @staticmethod
    def _scope(conditions: List[str], params: List[Any],
               fitter_id: Optional[int], factory_id: Optional[int]):
        if fitter_id is not None:
            conditions.append("o.fitter_id = %s")
            params.append(fitter_id)
        if factory_id is not None:
            conditions.append("o.factory_id = %s")
            params.append(factory_id)

    def find_by_number(self, order_number: str) -> Optional[Order]:
        orders = self._find_where(["o.order_number = %s"], [order_number], "o.id", limit=1)
        return orders[0] if orders else None

    def find_all(
        self,
        fitter_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        factory_id: Optional[int] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        is_urgent: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Find orders with filters, newest first

        Args:
            fitter_id: Filter by fitter
            customer_id: Filter by customer
            factory_id: Filter by factory
            status: Filter by order status
            priority: Filter by priority
            is_urgent: Filter by urgent flag
            search: Search in order number, customer name or instructions
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of orders, total count)
        """
        conditions = []
        params: List[Any] = []

        self._scope(conditions, params, fitter_id, factory_id)

        if customer_id is not None:
            conditions.append("o.customer_id = %s")
            params.append(customer_id)

        if status:
            conditions.append("o.status = %s")
            params.append(status)

        if priority:
            conditions.append("o.priority = %s")
            params.append(priority)

        if is_urgent is not None:
            conditions.append("o.is_urgent = %s")
            params.append(is_urgent)

        if search:
            conditions.append("(o.order_number ILIKE %s OR o.customer_name ILIKE %s OR o.special_instructions ILIKE %s)")
            search_term = f"%{search}%"
            params.extend([search_term] * 3)

        return self._paginate(conditions, params, "o.created_at DESC, o.id DESC", limit, offset)

    def search(self, term: str, limit: int = 50,
               fitter_id: Optional[int] = None, factory_id: Optional[int] = None) -> List[Order]:
        conditions = ["(o.order_number ILIKE %s OR o.customer_name ILIKE %s OR o.special_instructions ILIKE %s)"]
        search_term = f"%{term}%"
        params: List[Any] = [search_term] * 3
        self._scope(conditions, params, fitter_id, factory_id)
        return self._find_where(conditions, params, "o.created_at DESC", limit=limit)

    def find_urgent(self, fitter_id: Optional[int] = None, factory_id: Optional[int] = None) -> List[Order]:
        conditions = ["o.is_urgent = TRUE", "o.status <> ALL(%s)"]
        params: List[Any] = [FINAL_STATUSES]
        self._scope(conditions, params, fitter_id, factory_id)
        return self._find_where(conditions, params, "o.created_at DESC")

    def find_overdue(self, fitter_id: Optional[int] = None, factory_id: Optional[int] = None) -> List[Order]:
        conditions = ["o.estimated_delivery_date < NOW()", "o.status <> ALL(%s)"]
        params: List[Any] = [FINAL_STATUSES]
        self._scope(conditions, params, fitter_id, factory_id)
        return self._find_where(conditions, params, "o.estimated_delivery_date ASC")

    def find_in_production(self, fitter_id: Optional[int] = None, factory_id: Optional[int] = None) -> List[Order]:
        conditions = ["o.status = ANY(%s)"]
        params: List[Any] = [IN_PRODUCTION_STATUSES]
        self._scope(conditions, params, fitter_id, factory_id)
        return self._find_where(conditions, params, "o.created_at ASC")

    def get_production_schedule(self, limit: Optional[int] = None,
                                factory_id: Optional[int] = None) -> List[Order]:
        """Confirmed and in-production orders, urgent first, then oldest first"""
        conditions = ["o.status = ANY(%s)"]
        params: List[Any] = [SCHEDULE_STATUSES]
        self._scope(conditions, params, None, factory_id)
        return self._find_where(conditions, params, "o.is_urgent DESC, o.created_at ASC", limit=limit)

    def find_requiring_deposit(self, fitter_id: Optional[int] = None,
                               factory_id: Optional[int] = None) -> List[Order]:
        conditions = ["o.balance_owing > 0", "o.status <> ALL(%s)"]
        params: List[Any] = [FINAL_STATUSES]
        self._scope(conditions, params, fitter_id, factory_id)
        return self._find_where(conditions, params, "o.balance_owing DESC")

    def get_customer_summary(self, customer_id: int, fitter_id: Optional[int] = None,
                             factory_id: Optional[int] = None) -> Dict[str, Any]:
        conditions = ["o.customer_id = %s", "o.deleted_at IS NULL"]
        params: List[Any] = [customer_id]
        self._scope(conditions, params, fitter_id, factory_id)
        where_clause = " AND ".join(conditions)

        row = self._query_one(f"""
            SELECT
                COUNT(*) as order_count,
                COALESCE(SUM(o.total_amount), 0) as total_value
            FROM orders o
            WHERE {where_clause}
        """, params)

        return {
            'customer_id': customer_id,
            'order_count': row['order_count'] if row else 0,
            'total_value': float(row['total_value']) if row else 0.0,
        }

    def get_stats(self, fitter_id: Optional[int] = None, factory_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Get order statistics

        Returns:
            Dict with total_orders, urgent_orders, overdue_orders,
            average_value and status_counts
        """
        conditions = ["o.deleted_at IS NULL"]
        params: List[Any] = []
        self._scope(conditions, params, fitter_id, factory_id)
        where_clause = " AND ".join(conditions)

        conn = self._connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT
                    COUNT(*) as total_orders,
                    COUNT(*) FILTER (WHERE o.is_urgent) as urgent_orders,
                    COUNT(*) FILTER (
                        WHERE o.estimated_delivery_date < NOW() AND o.status <> ALL(%s)
                    ) as overdue_orders,
                    COALESCE(AVG(o.total_amount), 0) as average_value,
                    COALESCE(SUM(o.total_amount), 0) as total_value,
                    COALESCE(SUM(o.balance_owing), 0) as outstanding_balance
                FROM orders o
                WHERE {where_clause}
            """, [FINAL_STATUSES] + params)
            totals = cursor.fetchone()

            cursor.execute(f"""
                SELECT
                    o.status,
                    COUNT(*) as count
                FROM orders o
                WHERE {where_clause}
                GROUP BY o.status
                ORDER BY count DESC
            """, params)
            by_status = cursor.fetchall()

            return {
                'total_orders': totals['total_orders'],
                'urgent_orders': totals['urgent_orders'],
                'overdue_orders': totals['overdue_orders'],
                'average_value': round(float(totals['average_value']), 2),
                'total_value': float(totals['total_value']),
                'outstanding_balance': float(totals['outstanding_balance']),
                'status_counts': {row['status']: row['count'] for row in by_status},
            }

        finally:
            cursor.close()
            conn.close()

    def find_missing_seat_sizes(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Raw rows whose seat sizes were never extracted (used by the backfill script)"""
        sql = """
            SELECT id, order_number, special_notes, special_instructions, option_items
            FROM orders
            WHERE (seat_sizes IS NULL OR seat_sizes = '[]'::jsonb)
              AND deleted_at IS NULL
            ORDER BY id
        """
        params: List[Any] = []
        if limit is not None:
            sql += " LIMIT %s"
            params.append(limit)
        return self._query_all(sql, params)

    def set_seat_sizes(self, sizes_by_order: Dict[int, List[str]]) -> int:
        """Write extracted seat sizes; returns the number of orders updated"""
        if not sizes_by_order:
            return 0

        conn = self._connect()
        cursor = conn.cursor()

        try:
            updated = 0
            for order_id, sizes in sizes_by_order.items():
                self._write_update(cursor, order_id, {'seat_sizes': sizes})
                updated += cursor.rowcount
            conn.commit()
            return updated

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def save(self, order: Order, user_id: Optional[int] = None,
             expected_version: Optional[int] = None) -> Optional[Order]:
        """Persist the state of an Order the domain layer has changed"""
        data = {field: getattr(order, field) for field in PERSISTED_FIELDS}
        return self.update(order.id, data, user_id=user_id, expected_version=expected_version)
