from dataclasses import replace
from datetime import datetime, timezone

import structlog

from ..dto import UserDTO
from ..interfaces import IUserRepository
from ..validation import to_wire

logger = structlog.get_logger()


class SetUserActive:
    """Логическое удаление и восстановление. Записи из БД не удаляются."""

    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def deactivate(self, user_id: int) -> UserDTO | None:
        return self._set(user_id, False)

    def reactivate(self, user_id: int) -> UserDTO | None:
        return self._set(user_id, True)

    def _set(self, user_id: int, active: bool) -> UserDTO | None:
        user = self.repo.get(user_id)
        if user is None:
            logger.info("user_not_found", user_id=user_id)
            return None
        saved = self.repo.put(replace(user, active=active, updated_at=datetime.now(timezone.utc)))
        logger.info("user_reactivated" if active else "user_deactivated", user_id=user_id)
        return to_wire(saved)
