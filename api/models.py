"""
Response models for the smart store REST API.

The API returns summaries rather than whole aggregates: a store lists the
ids of what it owns, a user never exposes its password.
"""

from pydantic import BaseModel, Field

from domain.models import User
from domain.store import Store


class StoreResponse(BaseModel):
    id: str
    description: str
    address: str
    aisles: list[str] = Field(default_factory=list)
    inventory: list[str] = Field(default_factory=list)
    customers: list[str] = Field(default_factory=list)
    baskets: list[str] = Field(default_factory=list)
    devices: list[str] = Field(default_factory=list)

    @classmethod
    def from_store(cls, store: Store) -> "StoreResponse":
        return cls(
            id=store.id,
            description=store.description,
            address=store.address,
            aisles=sorted(store.aisles),
            inventory=sorted(store.inventory),
            customers=sorted(store.customers),
            baskets=sorted(store.baskets),
            devices=sorted(store.devices),
        )


class UserResponse(BaseModel):
    email: str
    name: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(email=user.email, name=user.name)


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str = Field(..., description="Error kind, e.g. NotFound")
    message: str
