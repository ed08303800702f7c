import os

# Settings must be in place before the app modules read them
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["OPERATOR_API_KEY"] = "test-operator-key"
os.environ["GOOGLE_MAPS_API_KEY"] = ""

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Account, Occasion, Order, OrderStatus, Recipient  # noqa: E402

CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}
OPERATOR_HEADERS = {"Authorization": "Bearer test-operator-key"}
ACCOUNT_UID = "uid-owner-1"
ACCOUNT_HEADERS = {"Authorization": f"Bearer {ACCOUNT_UID}"}

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def account(db):
    acct = Account(
        external_uid=ACCOUNT_UID,
        email="pat@example.com",
        full_name="Pat Owner",
        plan="pro",
        subscription_status="active",
        card_credits=0,
        return_street="1 Main St",
        return_city="Springfield",
        return_state="IL",
        return_zip="62701",
    )
    db.add(acct)
    db.commit()
    db.refresh(acct)
    return acct


@pytest.fixture
def make_recipient(db, account):
    """Create a recipient with occasions given as (type, date or None) pairs"""

    def _make(first_name="Mom", relationship="Family", occasions=(), owner=None):
        recipient = Recipient(
            account_id=(owner or account).id,
            first_name=first_name,
            last_name="Smith",
            relationship=relationship,
            street="10 Elm St",
            city="Portland",
            state="OR",
            zip="97201",
        )
        recipient.occasions = [
            Occasion(
                occasion_type=occasion_type,
                occasion_date=occasion_date,
                is_just_because=occasion_type == "Just Because",
            )
            for occasion_type, occasion_date in occasions
        ]
        db.add(recipient)
        db.commit()
        db.refresh(recipient)
        return recipient

    return _make


@pytest.fixture
def make_order(db):
    """Create an order snapshot for an occasion directly, bypassing the batch"""

    def _make(occasion, status=OrderStatus.PENDING.value, occasion_date=date(2025, 6, 1)):
        recipient = occasion.recipient
        order = Order(
            account_id=recipient.account_id,
            recipient_id=recipient.id,
            occasion_id=occasion.id,
            target_year=occasion_date.year,
            card_type="subscription",
            status=status,
            occasion_type=occasion.occasion_type,
            occasion_date=occasion_date,
            recipient_name=recipient.display_name,
            recipient_street=recipient.street,
            recipient_city=recipient.city,
            recipient_state=recipient.state,
            recipient_zip=recipient.zip,
            return_name="Pat Owner",
            return_street="1 Main St",
            return_city="Springfield",
            return_state="IL",
            return_zip="62701",
        )
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _make
