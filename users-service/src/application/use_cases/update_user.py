import structlog

from ...domain.errors import UserServiceError
from ..dto import UserDTO
from ..interfaces import IUserRepository
from ..validation import to_wire, validate_and_prepare_update

logger = structlog.get_logger()


class UpdateUser:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, user_id: int, dto: UserDTO) -> UserDTO | None:
        """None, если пользователя с ``user_id`` нет."""
        existing = self.repo.get(user_id)
        if existing is None:
            logger.info("user_update_not_found", user_id=user_id)
            return None

        logger.info("user_update_requested", user_id=user_id)
        try:
            user = validate_and_prepare_update(dto, existing, self.repo)
            saved = self.repo.put(user)
        except UserServiceError as e:
            logger.warning("user_update_rejected", user_id=user_id, code=e.code, reason=str(e))
            raise
        logger.info("user_updated", user_id=user_id)
        return to_wire(saved)
