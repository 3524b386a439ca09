import os

# Configure the app for tests before anything imports salon_api.config
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SMS_DEV_MODE"] = "true"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("REDIS_URL", None)
os.environ.pop("WHATSAPP_ACCESS_TOKEN", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salon_api.database import Base, get_db
from salon_api.main import app
from salon_api.models import (
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_STAFF,
    Customer,
    Product,
    Service,
    User,
)
from salon_api.security_utils import create_access_token, hash_password_bcrypt

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Test client sharing the test session through the get_db override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def no_outbound_messages(monkeypatch):
    """Record outbound WhatsApp and SMS calls instead of sending them"""
    sent = {"whatsapp": [], "sms": []}

    async def fake_whatsapp(to_phone, text):
        sent["whatsapp"].append((to_phone, text))
        return True

    async def fake_sms(to_phone, message_body):
        sent["sms"].append((to_phone, message_body))
        return True, None

    monkeypatch.setattr("salon_api.services.whatsapp_service.send_whatsapp_message", fake_whatsapp)
    monkeypatch.setattr("salon_api.services.notification_service.send_sms", fake_sms)
    monkeypatch.setattr("salon_api.services.sms_service.send_sms", fake_sms)
    return sent


def make_user(db, name, phone, role, email=None, password=DEFAULT_PASSWORD, is_active=True):
    user = User(
        name=name,
        phone=phone,
        email=email,
        role=role,
        password_hash=hash_password_bcrypt(password),
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "Salon Admin", "0788000001", ROLE_ADMIN, email="admin@example.com")


@pytest.fixture
def manager_user(db_session):
    return make_user(db_session, "Salon Manager", "0788000002", ROLE_MANAGER)


@pytest.fixture
def staff_user(db_session):
    return make_user(db_session, "Aline Stylist", "0788000003", ROLE_STAFF)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def manager_headers(manager_user):
    return auth_headers(manager_user)


@pytest.fixture
def staff_headers(staff_user):
    return auth_headers(staff_user)


@pytest.fixture
def customer(db_session):
    c = Customer(
        full_name="Marie Claire Uwimana",
        gender="FEMALE",
        location="Nyamirambo",
        district="Nyarugenge",
        province="Kigali City",
        phone="+250788444444",
        email="marie@example.com",
        birth_day=15,
        birth_month=3,
        birth_year=1990,
    )
    db_session.add(c)
    db_session.commit()
    db_session.refresh(c)
    return c


@pytest.fixture
def services(db_session):
    """Shampoo, a treatment with shampoo pricing and a braiding service"""
    rows = [
        Service(
            name="Shampoo",
            category="HAIR_TREATMENTS",
            description="Wash and blow-dry",
            single_price=7000,
            child_price=9000,
            duration=45,
        ),
        Service(
            name="Protein Treatment",
            category="HAIR_TREATMENTS",
            description="Protein treatment",
            single_price=10000,
            combined_price=15000,
            child_price=12000,
            child_combined_price=17000,
            duration=60,
            is_combo_eligible=True,
        ),
        Service(
            name="Two Lines Cornrows",
            category="CORNROWS_BRAIDS",
            description="Two lines",
            single_price=7000,
            combined_price=12000,
            duration=90,
        ),
    ]
    db_session.add_all(rows)
    db_session.commit()
    for row in rows:
        db_session.refresh(row)
    return {s.name: s for s in rows}


@pytest.fixture
def product(db_session):
    p = Product(name="Shea Butter", description="200ml", price=5000, quantity=10)
    db_session.add(p)
    db_session.commit()
    db_session.refresh(p)
    return p
