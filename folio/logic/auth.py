import hashlib
import logging
import secrets
from typing import Optional

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class AdminAuth:
    """
    Session-scoped admin flag. Credential checking lives here so the view
    controller only ever reads `is_authenticated`.
    """

    def __init__(self, password_hash: Optional[str] = None):
        self._password_hash = password_hash
        self.is_authenticated = False

    @property
    def configured(self) -> bool:
        return bool(self._password_hash)

    def login(self, password: str) -> bool:
        if not self._password_hash:
            logger.warning("Admin login attempted but no admin password is configured")
            return False
        ok = secrets.compare_digest(hash_password(password), self._password_hash)
        if ok:
            self.is_authenticated = True
            logger.info("Admin logged in")
        else:
            logger.warning("Admin login failed")
        return ok

    def logout(self) -> None:
        if self.is_authenticated:
            logger.info("Admin logged out")
        self.is_authenticated = False
