# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from stockpile.auth.permissions import Actor, QUANTITY_EDIT, TARGET_EDIT, ADMINISTER
from stockpile.database import Base, build_engine, build_sessionmaker, get_db
from stockpile.main import app
from stockpile.models import Resource, ResourceHistory
from stockpile.routes.resources import get_points_sink


class RecordingSink:
    def __init__(self):
        self.published = []

    def publish(self, calc):
        self.published.append(calc)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'stockpile.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def SessionLocal(engine):
    return build_sessionmaker(engine)


@pytest.fixture
def db(SessionLocal):
    with SessionLocal() as session:
        yield session


@pytest.fixture
def make_resource(SessionLocal):
    def _make(**kw):
        data = dict(name="Iron Ore", category="Raw Resources", quantity=0,
                    target_quantity=100, multiplier=1.0)
        data.update(kw)
        with SessionLocal() as s:
            r = Resource(**data)
            s.add(r)
            s.commit()
            return r.id
    return _make


@pytest.fixture
def load(SessionLocal):
    """Read committed state through a fresh session."""
    def _load(resource_id):
        with SessionLocal() as s:
            resource = s.get(Resource, resource_id)
            history = s.query(ResourceHistory).filter_by(resource_id=resource_id).all()
            return resource, history
    return _load


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def member():
    return Actor("alice", frozenset({QUANTITY_EDIT}))


@pytest.fixture
def admin():
    return Actor("root", frozenset({QUANTITY_EDIT, TARGET_EDIT, ADMINISTER}))


@pytest.fixture
def client(SessionLocal, sink):
    def _get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_points_sink] = lambda: sink
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
