import os
import tempfile
from datetime import date, datetime, time, timezone

_TEST_DIR = tempfile.mkdtemp(prefix="roombook-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'roombook.db')}"
os.environ["LOG_DIR"] = os.path.join(_TEST_DIR, "logs")
os.environ["JWT_SECRET"] = "test-secret"
# Empty credentials keep the mailer in simulation mode and Redis off
for _key in (
    "EMAILJS_PUBLIC_KEY",
    "EMAILJS_PRIVATE_KEY",
    "EMAILJS_SERVICE_ID",
    "EMAILJS_VERIFICATION_TEMPLATE_ID",
    "EMAILJS_CONFIRMATION_TEMPLATE_ID",
    "REDIS_URL",
):
    os.environ[_key] = ""

import pytest
from fastapi.testclient import TestClient

from roombook.core.config import get_settings
from roombook.core.dependencies import get_mailer
from roombook.db.base import Base
from roombook.db.session import SessionLocal, engine
from roombook.main import app
from roombook.models.booking import Booking
from roombook.models.building import Building
from roombook.models.room import Room


class RecordingMailer:
    """Stands in for EmailDispatcher and remembers what it was asked to send."""

    def __init__(self, result=True):
        self.result = result
        self.verification_emails = []
        self.confirmation_emails = []

    def send_verification_email(self, **params):
        self.verification_emails.append(params)
        return self.result

    def send_confirmation_email(self, **params):
        self.confirmation_emails.append(params)
        return self.result


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def building(db):
    building = Building(
        name="Mugar Memorial Library",
        short_name="MUG",
        address="771 Commonwealth Ave",
        contacts='{"phone": "617-353-3732", "email": "askalibrarian@bu.edu"}',
        available=True,
    )
    db.add(building)
    db.commit()
    db.refresh(building)
    return building


@pytest.fixture
def rooms(db, building):
    created = []
    for n in range(1, 6):
        room = Room(
            id=n,
            building_id=building.id,
            name=f"Study Room {n}",
            eid=f"eid-{n}",
            capacity=4 + n,
            available=True,
            under_maintenance=False,
        )
        db.add(room)
        created.append(room)
    db.commit()
    return created


@pytest.fixture
def make_booking(db, building):
    counter = iter(range(1, 1000))

    def _make(room_id, booking_date, start, end, status="confirmed",
              verification_status="verified", reference=None, created_at=None):
        n = next(counter)
        stamp = created_at or datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)
        start_t, end_t = time.fromisoformat(start), time.fromisoformat(end)
        booking = Booking(
            booking_reference=reference or f"REF{n:05d}",
            verification_code="123456",
            room_id=room_id,
            building_id=building.id,
            room_name=f"Study Room {room_id}",
            building_name=building.name,
            building_short_name=building.short_name,
            user_name="Existing User",
            user_email=f"existing{n}@bu.edu",
            booking_date=date.fromisoformat(booking_date),
            start_time=start_t,
            end_time=end_t,
            duration_minutes=(end_t.hour * 60 + end_t.minute) - (start_t.hour * 60 + start_t.minute),
            status=status,
            verification_status=verification_status,
            created_at=stamp,
            updated_at=stamp,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


@pytest.fixture
def client(mailer):
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    client.post("/auth/admin/register", json={
        "name": "Library Admin",
        "email": "admin@bu.edu",
        "password": "s3cure-passw0rd",
    })
    response = client.post("/auth/admin/login", json={
        "email": "admin@bu.edu",
        "password": "s3cure-passw0rd",
    })
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
