import structlog

from ...domain.errors import UserServiceError
from ..dto import UserDTO
from ..interfaces import IUserRepository
from ..validation import to_wire, validate_and_prepare_create

logger = structlog.get_logger()


class RegisterUser:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, dto: UserDTO) -> UserDTO:
        logger.info("user_create_requested", role=dto.role)
        try:
            user = validate_and_prepare_create(dto, self.repo)
            saved = self.repo.put(user)
        except UserServiceError as e:
            logger.warning("user_create_rejected", role=dto.role, code=e.code, reason=str(e))
            raise
        logger.info("user_created", user_id=saved.id, role=saved.role.value)
        return to_wire(saved)
