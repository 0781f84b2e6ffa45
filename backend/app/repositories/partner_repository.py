"""
Fitter and Factory Repositories

Fitters and factories share a table layout, so they share the queries.

Author: TM3
Date: 2025-10-17
"""
from typing import List, Optional, Tuple, Any

from app.domain.business_partner import Fitter, Factory
from app.models import Fitter as FitterTable, Factory as FactoryTable
from app.repositories.base import BaseRepository


class PartnerRepository(BaseRepository):
    alias = "p"
    domain_model = None

    @property
    def base_select(self) -> str:
        return f"""
            SELECT
                p.*,
                u.full_name AS name
            FROM {self.table} p
            LEFT JOIN credentials u ON u.id = p.user_id
        """

    def _map_row(self, row: dict):
        return self.domain_model.model_validate(dict(row))

    def find_all(
        self,
        city: Optional[str] = None,
        country: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[list, int]:
        """
        Find rows with filters, ordered by city

        Args:
            city: City (case-insensitive, partial)
            country: Country (case-insensitive, partial)
            search: Search in the linked user's name or the email address
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of rows, total count)
        """
        conditions = []
        params: List[Any] = []

        if city:
            conditions.append("p.city ILIKE %s")
            params.append(f"%{city}%")

        if country:
            conditions.append("p.country ILIKE %s")
            params.append(f"%{country}%")

        if search:
            conditions.append(
                "(p.emailaddress ILIKE %s OR p.user_id IN "
                "(SELECT id FROM credentials WHERE full_name ILIKE %s))"
            )
            search_term = f"%{search}%"
            params.extend([search_term, search_term])

        return self._paginate(conditions, params, "p.city ASC NULLS LAST, p.id ASC", limit, offset)

    def find_active(self) -> list:
        return self._find_where([], [], "p.city ASC NULLS LAST, p.id ASC")

    def find_by_country(self, country: str) -> list:
        return self._find_where(["p.country ILIKE %s"], [country], "p.city ASC NULLS LAST")

    def find_by_city(self, city: str) -> list:
        return self._find_where(["p.city ILIKE %s"], [city], "p.id")

    def find_by_user_id(self, user_id: int):
        rows = self._find_where(["p.user_id = %s"], [user_id], "p.id", limit=1)
        return rows[0] if rows else None

    def count_by_country(self, country: str) -> int:
        return self._count(["p.country ILIKE %s"], [country])

    def count_active(self) -> int:
        return self._count([], [])


class FitterRepository(PartnerRepository):
    table = "fitters"
    model = FitterTable
    entity_type = "Fitter"
    domain_model = Fitter


class FactoryRepository(PartnerRepository):
    table = "factories"
    model = FactoryTable
    entity_type = "Factory"
    domain_model = Factory
