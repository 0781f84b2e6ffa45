"""
User Repository - login accounts and their fitter / factory links

Author: TM3
Date: 2025-10-17
"""
from datetime import datetime
from typing import Optional

from app.domain.user import User
from app.models import User as UserTable
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    table = "credentials"
    alias = "u"
    model = UserTable
    entity_type = "User"
    soft_delete = False
    base_select = """
        SELECT
            u.*,
            f.id AS fitter_id,
            k.id AS factory_id
        FROM credentials u
        LEFT JOIN fitters f ON f.user_id = u.id AND f.deleted_at IS NULL
        LEFT JOIN factories k ON k.user_id = u.id AND k.deleted_at IS NULL
    """

    @staticmethod
    def _map_row(row: dict) -> User:
        return User.model_validate(dict(row))

    def find_by_login(self, identifier: str) -> Optional[User]:
        """Find an active account by email or username (case-insensitive)"""
        row = self._query_one(f"""
            {self.base_select}
            WHERE (LOWER(u.email) = LOWER(%s) OR LOWER(u.username) = LOWER(%s))
              AND u.is_active = TRUE
            LIMIT 1
        """, [identifier, identifier])
        return self._map_row(row) if row else None

    def record_failed_login(self, user_id: int, attempts: int, locked_until: Optional[datetime]):
        conn = self._connect()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE credentials
                SET failed_login_attempts = %s, locked_until = %s, updated_at = NOW()
                WHERE id = %s
            """, (attempts, locked_until, user_id))
            conn.commit()

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def record_successful_login(self, user_id: int):
        conn = self._connect()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE credentials
                SET failed_login_attempts = 0, locked_until = NULL, last_login_at = NOW()
                WHERE id = %s
            """, (user_id,))
            conn.commit()

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
