"""
Repositories over the DataManager.

Each repository owns one top-level map in the data manager:
- StoreRepository: "stores", keyed by store id
- UserRepository: "users", keyed by email

Lookups return Optional values; raising for missing records is the service
layer's job.
"""

import logging
from typing import Optional

from domain.models import User
from domain.store import Store
from storage.data_manager import DataManager

logger = logging.getLogger("repositories")

STORES_KEY = "stores"
USERS_KEY = "users"

# Seeded when the users map is missing, so the API is usable out of the box
DEFAULT_USERS = (
    ("admin@store.com", "admin123", "Admin User"),
    ("user@store.com", "user123", "Regular User"),
)


class StoreRepository:
    """Data access for Store aggregates."""

    def __init__(self, data_manager: DataManager):
        self.data_manager = data_manager
        self.data_manager.setdefault(STORES_KEY, dict)

    def _stores(self) -> dict[str, Store]:
        return self.data_manager.setdefault(STORES_KEY, dict)

    def save(self, store: Store) -> Store:
        stores = self._stores()
        stores[store.id] = store
        self.data_manager.put(STORES_KEY, stores)
        return store

    def find_by_id(self, store_id: str) -> Optional[Store]:
        return self._stores().get(store_id)

    def exists_by_id(self, store_id: str) -> bool:
        return store_id in self._stores()

    def delete(self, store_id: str) -> None:
        stores = self._stores()
        stores.pop(store_id, None)
        self.data_manager.put(STORES_KEY, stores)

    def find_all(self) -> dict[str, Store]:
        """Return a copy of the store map; mutating it does not touch the repository."""
        return dict(self._stores())


class UserRepository:
    """Data access for API users."""

    def __init__(self, data_manager: DataManager):
        self.data_manager = data_manager
        if not self.data_manager.contains_key(USERS_KEY):
            users = {email: User(email=email, password=password, name=name)
                     for email, password, name in DEFAULT_USERS}
            self.data_manager.put(USERS_KEY, users)
            logger.debug(f"Seeded {len(users)} default users")

    def _users(self) -> dict[str, User]:
        return self.data_manager.setdefault(USERS_KEY, dict)

    def find_by_email(self, email: Optional[str]) -> Optional[User]:
        if email is None:
            return None
        return self._users().get(email)

    def save(self, user: User) -> User:
        users = self._users()
        users[user.email] = user
        self.data_manager.put(USERS_KEY, users)
        return user

    def exists_by_email(self, email: str) -> bool:
        return email in self._users()

    def delete(self, email: str) -> None:
        users = self._users()
        users.pop(email, None)
        self.data_manager.put(USERS_KEY, users)

    def find_all(self) -> dict[str, User]:
        return dict(self._users())
