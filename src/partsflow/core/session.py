from partsflow.core.exceptions import SessionRequiredError
from partsflow.db.core import SESSION_FLAG
from partsflow.db.repository import Repository
from partsflow.utils.logger import get_logger

class SessionGate:
    """Boolean session flag guarding every protected command.

    Only the literal stored value ``"true"`` counts as signed in; a missing
    flag or any other value does not.
    """

    def __init__(self, repository: Repository):
        self.repository = repository
        self.logger = get_logger(self.__class__.__name__)

    def is_authenticated(self) -> bool:
        return self.repository.get_flag(SESSION_FLAG) == "true"

    def login(self) -> None:
        self.repository.set_flag(SESSION_FLAG, "true")
        self.logger.info("🔓 Session started")

    def logout(self) -> None:
        self.repository.remove(SESSION_FLAG)
        self.logger.info("🔒 Session ended")

    def require(self) -> None:
        if not self.is_authenticated():
            raise SessionRequiredError("Not logged in. Run 'partsflow login' first.")
