"""Pytest configuration and fixtures."""
import pytest
from sqlalchemy.orm import sessionmaker
from luxestays.backend.db.models import Base, PricingModel, AvailabilityStatus
from luxestays.backend.db.session import build_engine, get_db
from luxestays.backend.main import app
from luxestays.backend.services.payment_flow import payment_sessions
from luxestays.backend.services.record_store import SQLAlchemyRecordStore
from fastapi.testclient import TestClient
import tempfile
import os


@pytest.fixture(scope="function")
def db_session():
    """Create a test database session."""
    # Create temporary SQLite database
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    
    engine = build_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(bind=engine)
    
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        os.unlink(db_path)


@pytest.fixture
def store(db_session):
    """Record store over the test database."""
    return SQLAlchemyRecordStore(db_session)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
    payment_sessions.clear()


@pytest.fixture
def operator_headers():
    """Headers for the CEO operator identity."""
    return {"X-User-Id": "ceo"}


@pytest.fixture
def guest_headers():
    """Headers for a signed-in guest."""
    return {"X-User-Id": "guest-001"}


@pytest.fixture
def sample_resort_data():
    """Sample resort data for testing."""
    return {
        "name": "Misty Ridge Retreat",
        "location": "Munnar, Kerala",
        "description": "Tea estate views and guided treks",
        "price_per_night": 5000,
        "rating": 4.6,
        "amenities": ["Guided Treks", "Campfire", "Wi-Fi"],
        "capacity": None,
        "image_url": None
    }


@pytest.fixture
def sample_stay_option_data():
    """Sample stay option data for testing."""
    return {
        "name": "Deluxe",
        "description": "Valley-facing cottage",
        "price": 5000,
        "pricing_model": "per_option",
        "capacity": 4,
        "availability_status": "available",
        "amenities": ["Balcony"]
    }


@pytest.fixture
def deluxe_stay(store):
    """Resort A with its Deluxe stay option (5000, per option, 4 guests, available)."""
    resort = store.create("resorts", {
        "name": "Resort A",
        "location": "Alleppey, Kerala",
        "price_per_night": 5000,
        "rating": 4.5,
        "amenities": ["Backwater Cruise"]
    })
    stay_option = store.create("stay_options", {
        "resort_id": resort.id,
        "name": "Deluxe",
        "price": 5000,
        "pricing_model": PricingModel.PER_OPTION,
        "capacity": 4,
        "availability_status": AvailabilityStatus.AVAILABLE
    })
    return stay_option
