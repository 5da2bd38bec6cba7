"""
Shared fixtures.

Services run against the in-memory document store; HTTP tests drive the real
FastAPI app through httpx's ASGITransport with the store and discount table
swapped in via ``dependency_overrides``.
"""
import os

os.environ.setdefault("DOCUMENT_STORE", "memory")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-cart-service-suite")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Callable, Dict  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.config.settings import settings  # noqa: E402
from src.crud.cartService import CartService  # noqa: E402
from src.crud.documentStore import DocumentStore  # noqa: E402
from src.crud.wishlistService import WishlistService  # noqa: E402
from src.dependencies.service_dependencies import get_discount_codes, get_document_store  # noqa: E402
from src.main import app  # noqa: E402

USER_ID = "64b7f0c2a1b2c3d4e5f60718"
OTHER_USER_ID = "64b7f0c2a1b2c3d4e5f60799"


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def other_user_id() -> str:
    return OTHER_USER_ID


@pytest.fixture
def discount_codes() -> Dict[str, float]:
    return {"SAVE10": 0.10, "SAVE20": 0.20, "WELCOME": 0.15, "FIRSTORDER": 0.25}


@pytest.fixture
def store() -> DocumentStore:
    """Fresh, isolated in-memory store per test"""
    return DocumentStore.in_memory()


@pytest.fixture
def cart_service(store: DocumentStore, discount_codes: Dict[str, float]) -> CartService:
    return CartService(store, discount_codes)


@pytest.fixture
def wishlist_service(store: DocumentStore, cart_service: CartService) -> WishlistService:
    return WishlistService(store, cart_service)


@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make_token(user_id: str = USER_ID, secret: str = None, expires_in: timedelta = timedelta(hours=1)) -> str:
        payload = {"id": user_id, "exp": datetime.now(timezone.utc) + expires_in}
        return jwt.encode(payload, secret or settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    return _make_token


@pytest.fixture
def auth_headers(make_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(USER_ID)}"}


@pytest.fixture
def other_auth_headers(make_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(OTHER_USER_ID)}"}


@pytest.fixture
async def client(store: DocumentStore, discount_codes: Dict[str, float]) -> AsyncClient:
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_discount_codes] = lambda: discount_codes

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
