"""
Authentication service for API users.

Users are stored in the UserRepository, keyed by email. Besides user CRUD
this service validates HTTP Basic credentials
("Authorization: Basic base64(email:password)").

Missing users are reported with None / False rather than exceptions, which
is what the REST layer turns into 404 responses.
"""

import base64
import binascii
import logging
from typing import Optional

from domain.models import User
from storage.repositories import UserRepository

logger = logging.getLogger("authentication")


class AuthenticationService:
    """
    User management and Basic authentication.

    Example:
        auth = AuthenticationService(UserRepository(DataManager()))
        auth.register_user("ann@store.com", "secret", "Ann")
        auth.authenticate_basic("Basic " + base64("ann@store.com:secret"))
    """

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def register_user(self, email: str, password: str, name: str) -> Optional[User]:
        """Create a user. Returns None if the email is already registered."""
        if self.user_repository.find_by_email(email) is not None:
            logger.warning(f"User already registered: {email}")
            return None
        user = self.user_repository.save(User(email=email, password=password, name=name))
        logger.info(f"Registered user {email}")
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.user_repository.find_by_email(email)

    def get_all_users(self) -> list[User]:
        return list(self.user_repository.find_all().values())

    def user_exists(self, email: str) -> bool:
        return self.user_repository.exists_by_email(email)

    def update_user(
        self,
        email: str,
        password: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Optional[User]:
        """Update password and/or name. Returns None if the user is unknown."""
        user = self.user_repository.find_by_email(email)
        if user is None:
            return None
        if password is not None:
            user.password = password
        if name is not None:
            user.name = name
        self.user_repository.save(user)
        logger.info(f"Updated user {email}")
        return user

    def delete_user(self, email: str) -> bool:
        """Delete a user. Returns False if there was nothing to delete."""
        if self.user_repository.find_by_email(email) is None:
            return False
        self.user_repository.delete(email)
        logger.info(f"Deleted user {email}")
        return True

    def authenticate_basic(self, authorization: Optional[str]) -> Optional[User]:
        """
        Validate an HTTP Basic Authorization header.

        Returns the matching user, or None for a missing/malformed header or
        wrong credentials.
        """
        if not authorization or not authorization.startswith("Basic "):
            return None
        try:
            decoded = base64.b64decode(authorization[len("Basic "):], validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.warning("Malformed Basic authorization header")
            return None

        email, separator, password = decoded.partition(":")
        if not separator:
            return None
        user = self.user_repository.find_by_email(email)
        if user is None or user.password != password:
            logger.warning(f"Authentication failed for {email}")
            return None
        return user
