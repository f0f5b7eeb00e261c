import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from labkeys.database import Base, get_db, make_engine
from labkeys.main import app
from labkeys.models import User, LabKey
from labkeys.services.auth import create_access_token, get_password_hash

ADMIN_PASSWORD = "admin123"
TEACHER_PASSWORD = "teach123"


@pytest.fixture
def engine(tmp_path):
    """SQLite file database per test, with the same locking as production"""
    engine = make_engine(f"sqlite:///{tmp_path / 'labkeys-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def seeded(session_factory):
    """One admin, two teachers (T002 has no password) and two keys.

    The seeding session is closed before the test starts: every SQLite
    transaction holds the write lock, so a lingering one would block requests.
    """
    with session_factory() as session:
        session.add_all([
            User(user_id="ADMIN", name="Administrator",
                 password_hash=get_password_hash(ADMIN_PASSWORD), role="admin"),
            User(user_id="T001", name="Ana Cruz", email="ana@school.test", department="Science",
                 password_hash=get_password_hash(TEACHER_PASSWORD), role="teacher"),
            User(user_id="T002", name="Ben Reyes", department="Mathematics", role="teacher"),
            LabKey(key_id="K01", lab="Chemistry Lab"),
            LabKey(key_id="K02", lab="Physics Lab"),
        ])
        session.commit()


@pytest.fixture
def db(seeded, session_factory):
    """Session for service-level tests (not shared with the test client)"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(seeded, session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id):
    token = create_access_token(data={"sub": user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return auth_headers("ADMIN")


@pytest.fixture
def teacher_headers():
    return auth_headers("T001")


@pytest.fixture
def other_teacher_headers():
    return auth_headers("T002")


@pytest.fixture
def published(monkeypatch):
    """Capture event feed publishes instead of talking to a broker"""
    from labkeys.services.events import event_publisher

    calls = []

    def fake_publish(event, key_id, teacher_id, transaction_id):
        calls.append((event, key_id, teacher_id, transaction_id))
        return True

    monkeypatch.setattr(event_publisher, "publish", fake_publish)
    return calls
