"""
Customer Repository - Data Access Layer for Customers

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import List, Optional, Tuple, Dict, Any

from app.behaviors import Operation, behavior_manager
from app.domain.customer import Customer
from app.domain.value_objects import CustomerStatus
from app.models import Customer as CustomerTable
from app.repositories.base import BaseRepository, adapt_value

logger = logging.getLogger(__name__)


class CustomerRepository(BaseRepository):
    """
    Repository for Customer data access

    Soft-deleted customers are never returned by the finders.
    """

    table = "customers"
    alias = "c"
    model = CustomerTable
    entity_type = "Customer"
    base_select = """
        SELECT
            c.*,
            fc.full_name AS fitter_name
        FROM customers c
        LEFT JOIN fitters f ON f.id = c.fitter_id
        LEFT JOIN credentials fc ON fc.id = f.user_id
    """

    @staticmethod
    def _map_row(row: dict) -> Customer:
        return Customer.model_validate(dict(row))

    def find_all(
        self,
        search: Optional[str] = None,
        fitter_id: Optional[int] = None,
        status: Optional[str] = None,
        country: Optional[str] = None,
        city: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Customer], int]:
        """
        Find customers with filters

        Args:
            search: Search in name, email, horse name or company
            fitter_id: Only customers of this fitter
            status: active / inactive / suspended
            country: Country (case-insensitive, partial)
            city: City (case-insensitive, partial)
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of customers, total count)
        """
        conditions = []
        params: List[Any] = []

        if search:
            conditions.append("(c.name ILIKE %s OR c.email ILIKE %s OR c.horse_name ILIKE %s OR c.company ILIKE %s)")
            search_term = f"%{search}%"
            params.extend([search_term] * 4)

        if fitter_id is not None:
            conditions.append("c.fitter_id = %s")
            params.append(fitter_id)

        if status:
            conditions.append("c.status = %s")
            params.append(status)

        if country:
            conditions.append("c.country ILIKE %s")
            params.append(f"%{country}%")

        if city:
            conditions.append("c.city ILIKE %s")
            params.append(f"%{city}%")

        return self._paginate(conditions, params, "c.name ASC, c.id ASC", limit, offset)

    def find_by_email(self, email: str) -> Optional[Customer]:
        customers = self._find_where(["LOWER(c.email) = LOWER(%s)"], [email], "c.id", limit=1)
        return customers[0] if customers else None

    def find_by_fitter(self, fitter_id: int) -> List[Customer]:
        return self._find_where(["c.fitter_id = %s"], [fitter_id], "c.name")

    def find_without_fitter(self) -> List[Customer]:
        return self._find_where(["c.fitter_id IS NULL"], [], "c.name")

    def find_active(self) -> List[Customer]:
        return self._find_where(["c.status = %s"], [CustomerStatus.ACTIVE.value], "c.name")

    def find_by_country(self, country: str) -> List[Customer]:
        return self._find_where(["c.country ILIKE %s"], [country], "c.name")

    def find_by_city(self, city: str) -> List[Customer]:
        return self._find_where(["c.city ILIKE %s"], [city], "c.name")

    def count_by_fitter(self, fitter_id: int) -> int:
        return self._count(["c.fitter_id = %s"], [fitter_id])

    def count_active(self) -> int:
        return self._count(["c.status = %s"], [CustomerStatus.ACTIVE.value])

    def assign_fitter(self, customer_id: int, fitter_id: Optional[int],
                      user_id: Optional[int] = None) -> Optional[Customer]:
        """Set (or clear, with None) the customer's fitter"""
        return self.update(customer_id, {"fitter_id": fitter_id}, user_id=user_id)

    def bulk_create(self, rows: List[Dict[str, Any]], user_id: Optional[int] = None) -> List[Customer]:
        """
        Insert several customers in one transaction; nothing is stored if any insert fails
        """
        conn = self._connect()
        cursor = conn.cursor()

        try:
            new_ids = []
            for data in rows:
                payload = behavior_manager.apply_before_save(
                    self.model, data, self._context(Operation.CREATE, user_id)
                )
                columns = ", ".join(payload.keys())
                placeholders = ", ".join(["%s"] * len(payload))
                cursor.execute(
                    f"INSERT INTO customers ({columns}) VALUES ({placeholders}) RETURNING id",
                    [adapt_value(v) for v in payload.values()]
                )
                new_ids.append(cursor.fetchone()['id'])

            customers = []
            if new_ids:
                cursor.execute(f"{self.base_select} WHERE c.id = ANY(%s) ORDER BY c.id", (new_ids,))
                customers = [self._map_row(row) for row in cursor.fetchall()]

            conn.commit()
            logger.info(f"Bulk created {len(new_ids)} customers")
            return customers

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def get_stats(self) -> Dict[str, Any]:
        row = self._query_one("""
            SELECT
                COUNT(*) as total_customers,
                COUNT(*) FILTER (WHERE status = 'active') as active_customers,
                COUNT(*) FILTER (WHERE fitter_id IS NULL) as without_fitter,
                COUNT(DISTINCT country) as countries
            FROM customers
            WHERE deleted_at IS NULL
        """)
        return dict(row) if row else {}
