"""
Catalog Repositories - presets, brands and leather types

Author: TM3
Date: 2025-10-17
"""
from typing import List, Optional, Tuple, Any

from app.domain.catalog import Preset, Brand, Leathertype
from app.models import (
    Preset as PresetTable,
    Brand as BrandTable,
    Leathertype as LeathertypeTable,
)
from app.repositories.base import BaseRepository


class PresetRepository(BaseRepository):
    table = "presets"
    alias = "p"
    model = PresetTable
    entity_type = "Preset"
    base_select = "SELECT p.* FROM presets p"

    @staticmethod
    def _map_row(row: dict) -> Preset:
        return Preset.model_validate(dict(row))

    def find_all(
        self,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Preset], int]:
        conditions = []
        params: List[Any] = []

        if search:
            conditions.append("p.name ILIKE %s")
            params.append(f"%{search}%")

        return self._paginate(conditions, params, "p.sequence ASC, p.name ASC", limit, offset)

    def find_active(self) -> List[Preset]:
        return self._find_where([], [], "p.sequence ASC, p.name ASC")


class BrandRepository(BaseRepository):
    """Brands have no soft delete: DELETE removes the row"""

    table = "brands"
    alias = "b"
    model = BrandTable
    entity_type = "Brand"
    base_select = "SELECT b.* FROM brands b"
    soft_delete = False

    @staticmethod
    def _map_row(row: dict) -> Brand:
        return Brand.model_validate(dict(row))

    def find_all(
        self,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Brand], int]:
        conditions = []
        params: List[Any] = []

        if search:
            conditions.append("b.name ILIKE %s")
            params.append(f"%{search}%")

        return self._paginate(conditions, params, "b.name ASC", limit, offset)

    def find_active(self) -> List[Brand]:
        return self._find_where([], [], "b.name ASC")


class LeathertypeRepository(BaseRepository):
    table = "leather_types"
    alias = "l"
    model = LeathertypeTable
    entity_type = "Leathertype"
    base_select = "SELECT l.* FROM leather_types l"

    @staticmethod
    def _map_row(row: dict) -> Leathertype:
        return Leathertype.model_validate(dict(row))

    def find_all(
        self,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Leathertype], int]:
        conditions = []
        params: List[Any] = []

        if search:
            conditions.append("l.name ILIKE %s")
            params.append(f"%{search}%")

        return self._paginate(conditions, params, "l.sequence ASC, l.name ASC", limit, offset)

    def find_active(self) -> List[Leathertype]:
        return self._find_where([], [], "l.sequence ASC, l.name ASC")
