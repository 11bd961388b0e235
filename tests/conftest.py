import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.core.database import Base, build_engine, get_session_factory
from app.models.customer import Customer
from app.models.item import Item, ItemPhoto  # noqa: F401
from app.models.system_settings import SystemSettings  # noqa: F401
from app.services.bulk import BulkUpdateCoordinator
from app.services.containers import ContainerService
from app.services.items import ItemService

from fixtures import (
    InMemoryCustomerStore,
    InMemoryItemStore,
    StaticRateSource,
    default_customers,
)


# In-memory engine wiring

@pytest.fixture
def item_store():
    return InMemoryItemStore()


@pytest.fixture
def rate_source():
    return StaticRateSource()


@pytest.fixture
def item_service(item_store, rate_source):
    return ItemService(item_store, InMemoryCustomerStore(default_customers()), rate_source)


@pytest.fixture
def coordinator(item_service):
    return BulkUpdateCoordinator(item_service, concurrency=4)


@pytest.fixture
def container_service(item_service, coordinator):
    return ContainerService(item_service, coordinator)


# SQLite-backed wiring

@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

    db = factory()
    db.add_all(
        [
            Customer(id=1, name="Kwame Mensah", phone="+233 20 000 0001"),
            Customer(id=2, name="Ama Owusu", email="ama@example.com"),
        ]
    )
    db.commit()
    db.close()

    yield factory
    engine.dispose()


@pytest.fixture
def client(session_factory):
    from main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    # no context manager: startup would create tables in the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()
