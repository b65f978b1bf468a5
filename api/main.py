"""
FastAPI application for the smart store.

A thin request/response layer over StoreService and AuthenticationService:
- /api/v1/stores: store CRUD
- /api/v1/users: API user CRUD

Store calls carry the configured shared-secret token. Service failures are
StoreException subclasses; one exception handler maps their kind to an HTTP
status code.

Run with:
    uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from api.models import ErrorResponse, StoreResponse, UserResponse
from config import Settings, configure_logging
from domain.exceptions import DuplicateEntityError, StoreException
from services.authentication import AuthenticationService
from services.store_service import StoreService
from storage.data_manager import DataManager
from storage.registry import StoreRegistry
from storage.repositories import UserRepository

configure_logging(Settings.from_env().log_level)

logger = logging.getLogger("store_api")

STATUS_BY_KIND = {
    "NotFound": 404,
    "DuplicateEntity": 409,
    "InvalidArgument": 400,
    "PreconditionFailed": 412,
    "UnsupportedOperation": 405,
    "ParseError": 400,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Starting Smart Store API")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Smart Store API",
    description="REST access to stores and API users of the smart store",
    version="1.0.0",
    lifespan=lifespan,
)


# =============================================================================
# Dependencies
# =============================================================================

# Module-level instances, replaced wholesale by reset_api_state()
_settings: Optional[Settings] = None
_store_service: Optional[StoreService] = None
_auth_service: Optional[AuthenticationService] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def _build_services() -> None:
    global _store_service, _auth_service
    data_manager = DataManager()
    _store_service = StoreService(StoreRegistry(data_manager))
    _auth_service = AuthenticationService(UserRepository(data_manager))


def get_store_service() -> StoreService:
    if _store_service is None:
        _build_services()
    return _store_service


def get_auth_service() -> AuthenticationService:
    if _auth_service is None:
        _build_services()
    return _auth_service


def reset_api_state(
    store_service: Optional[StoreService] = None,
    auth_service: Optional[AuthenticationService] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Reset API state (for testing)."""
    global _store_service, _auth_service, _settings
    _store_service = store_service
    _auth_service = auth_service
    _settings = settings


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(StoreException)
async def store_exception_handler(request: Request, exc: StoreException) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return error_response(status_code, exc.kind, str(exc))


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "smart-store"}


# =============================================================================
# Stores
# =============================================================================

@app.get("/api/v1/stores", response_model=list[StoreResponse], tags=["Stores"])
def list_stores(service: StoreService = Depends(get_store_service)):
    return [StoreResponse.from_store(store) for store in service.get_all_stores()]


@app.get("/api/v1/stores/{store_id}", response_model=StoreResponse, tags=["Stores"])
def get_store(
    store_id: str,
    service: StoreService = Depends(get_store_service),
    settings: Settings = Depends(get_settings),
):
    if not service.registry.stores.exists_by_id(store_id):
        return error_response(404, "NotFound", "Store Does Not Exist")
    return StoreResponse.from_store(service.show_store(store_id, settings.token))


@app.post("/api/v1/stores", status_code=201, response_model=StoreResponse, tags=["Stores"])
def create_store(
    storeId: Optional[str] = None,
    name: Optional[str] = None,
    address: Optional[str] = None,
    service: StoreService = Depends(get_store_service),
    settings: Settings = Depends(get_settings),
):
    """Create a store: POST /api/v1/stores?storeId=...&name=...&address=..."""
    if storeId is None or name is None or address is None:
        return error_response(400, "InvalidArgument", "storeId, name, and address required")
    try:
        store = service.provision_store(storeId, name, address, settings.token)
    except DuplicateEntityError:
        return error_response(400, "DuplicateEntity", "Store Already Exists")
    return StoreResponse.from_store(store)


@app.put("/api/v1/stores", include_in_schema=False)
@app.delete("/api/v1/stores", include_in_schema=False)
def store_id_required():
    return error_response(400, "InvalidArgument", "storeId path parameter required")


@app.put("/api/v1/stores/{store_id}", response_model=StoreResponse, tags=["Stores"])
def update_store(
    store_id: str,
    description: Optional[str] = None,
    address: Optional[str] = None,
    service: StoreService = Depends(get_store_service),
    settings: Settings = Depends(get_settings),
):
    """Update a store: PUT /api/v1/stores/{id}?description=...&address=..."""
    if description is None and address is None:
        return error_response(400, "InvalidArgument", "Need description or address")
    if not service.registry.stores.exists_by_id(store_id):
        return error_response(404, "NotFound", "Store Does Not Exist")
    store = service.update_store(store_id, description, address, settings.token)
    return StoreResponse.from_store(store)


@app.delete("/api/v1/stores/{store_id}", status_code=204, tags=["Stores"])
def delete_store(
    store_id: str,
    service: StoreService = Depends(get_store_service),
    settings: Settings = Depends(get_settings),
):
    if not service.registry.stores.exists_by_id(store_id):
        return error_response(404, "NotFound", "Store Does Not Exist")
    service.delete_store(store_id, settings.token)
    return Response(status_code=204)


# =============================================================================
# Users
# =============================================================================

@app.get("/api/v1/users", response_model=list[UserResponse], tags=["Users"])
def list_users(auth: AuthenticationService = Depends(get_auth_service)):
    return [UserResponse.from_user(user) for user in auth.get_all_users()]


@app.get("/api/v1/users/{email}", response_model=UserResponse, tags=["Users"])
def get_user(email: str, auth: AuthenticationService = Depends(get_auth_service)):
    user = auth.get_user_by_email(email)
    if user is None:
        return error_response(404, "NotFound", "User not found")
    return UserResponse.from_user(user)


@app.post("/api/v1/users", status_code=201, response_model=UserResponse, tags=["Users"])
def register_user(
    email: Optional[str] = None,
    password: Optional[str] = None,
    name: Optional[str] = None,
    auth: AuthenticationService = Depends(get_auth_service),
):
    """Register a user: POST /api/v1/users?email=...&password=...&name=..."""
    if email is None or password is None or name is None:
        return error_response(400, "InvalidArgument", "email, password, and name required")
    user = auth.register_user(email, password, name)
    if user is None:
        return error_response(409, "DuplicateEntity", "User Already Exists")
    return UserResponse.from_user(user)


@app.put("/api/v1/users", include_in_schema=False)
@app.delete("/api/v1/users", include_in_schema=False)
def user_email_required():
    return error_response(400, "InvalidArgument", "email path parameter required")


@app.put("/api/v1/users/{email}", response_model=UserResponse, tags=["Users"])
def update_user(
    email: str,
    password: Optional[str] = None,
    name: Optional[str] = None,
    auth: AuthenticationService = Depends(get_auth_service),
):
    if password is None and name is None:
        return error_response(400, "InvalidArgument", "Need password or name")
    user = auth.update_user(email, password, name)
    if user is None:
        return error_response(404, "NotFound", "User not found")
    return UserResponse.from_user(user)


@app.delete("/api/v1/users/{email}", tags=["Users"])
def delete_user(email: str, auth: AuthenticationService = Depends(get_auth_service)):
    if not auth.delete_user(email):
        return error_response(404, "NotFound", "User not found")
    return {"deleted": email}
