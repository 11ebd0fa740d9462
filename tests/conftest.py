# Standard Library
from decimal import Decimal
from typing import AsyncGenerator

# Third-Party Libraries
import pytest
import pytest_asyncio

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

# First-Party Libraries
from eesha.auth.domain.identity import Identity
from eesha.auth.infrastructure.providers import StaticIdentityProvider
from eesha.cart.infrastructure.storage import InMemoryKeyValueStorage
from eesha.cart.models import LineItem
from eesha.cart.service import CartStore
from eesha.orders import models  # noqa: F401  (enregistre les tables)
from eesha.orders.application.services import OrderService
from eesha.orders.infrastructure.persistence import SQLAlchemyOrderRepository
from eesha.pricing.models import PricingPolicy

# URL de base pour la DB en mémoire
TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    engine: AsyncEngine = create_async_engine(TEST_DATABASE_BASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

@pytest.fixture
def order_repository(db_session: AsyncSession) -> SQLAlchemyOrderRepository:
    return SQLAlchemyOrderRepository(session=db_session)

# --- Fixtures Politique tarifaire / Identité ---

@pytest.fixture
def policy() -> PricingPolicy:
    """Politique France: TVA 20%, livraison 10 €, offerte au-delà de 100 €."""
    return PricingPolicy(
        vat_rate=Decimal("0.20"),
        shipping_flat_rate=Decimal("10.00"),
        free_shipping_threshold=Decimal("100.00"),
        currency="EUR",
    )

@pytest.fixture
def customer() -> Identity:
    return Identity(id="client-123", email="client@example.com")

@pytest.fixture
def identity_provider(customer: Identity) -> StaticIdentityProvider:
    return StaticIdentityProvider(customer)

@pytest.fixture
def anonymous_provider() -> StaticIdentityProvider:
    return StaticIdentityProvider(None)

@pytest.fixture
def order_service(order_repository, identity_provider, policy) -> OrderService:
    return OrderService(order_repository=order_repository, identity_provider=identity_provider, policy=policy)

# --- Fixtures Panier ---

@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()

@pytest.fixture
def cart(storage, policy) -> CartStore:
    return CartStore(storage=storage, policy=policy)

@pytest.fixture
def silk_saree() -> LineItem:
    """Variante V1: 50,00 €."""
    return LineItem(
        variant_id="V1",
        product_id="P1",
        name="Saree en soie",
        size="M",
        color="Rouge",
        sku="SAR-001-M-RED",
        unit_price=Decimal("50.00"),
        quantity=2,
        stock_quantity=10,
    )

@pytest.fixture
def silk_scarf() -> LineItem:
    """Variante V2: 30,00 €."""
    return LineItem(
        variant_id="V2",
        product_id="P2",
        name="Foulard en soie",
        size="Unique",
        color="Bleu",
        sku="FOU-002-U-BLU",
        unit_price=Decimal("30.00"),
        quantity=1,
    )

@pytest.fixture
def contact() -> dict:
    return {"email": "client@example.com", "phone": "06 12 34 56 78"}

@pytest.fixture
def shipping_address() -> dict:
    return {
        "full_name": "Jeanne Martin",
        "line1": "12 rue de Rivoli",
        "city": "Paris",
        "postal_code": "75001",
        "country": "FR",
    }
