import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker

from vaultshare.database import Base, get_db
from vaultshare.main import app
from vaultshare.models import Vault, VaultFile
from vaultshare.models.vault import new_share_token
from vaultshare.services.identity import issue_token
from vaultshare.services.object_store import ObjectStoreError, get_object_store
from vaultshare.services.request_gate import RequestGate, get_request_gate

DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER_ID = "0b7c1f8e-2f4a-4d0a-9a53-6a2f7d0c1e01"
STRANGER_ID = "5d2e9c4b-8a1f-4b6e-b0c7-3e4f5a6b7c02"


class FakeObjectStore:
    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail_remove = False
        self.fail_put = False

    def put(self, storage_path, data, content_type):
        self.calls.append(("put", storage_path))
        if self.fail_put:
            raise ObjectStoreError("put unavailable")
        self.objects[storage_path] = data

    def remove(self, storage_path):
        self.calls.append(("remove", storage_path))
        if self.fail_remove:
            raise ObjectStoreError("remove unavailable")
        self.objects.pop(storage_path, None)

    def presign(self, storage_path, expires_in):
        self.calls.append(("presign", storage_path))
        if storage_path not in self.objects:
            raise ObjectStoreError("object missing")
        return f"https://storage.test/vault-files/{storage_path}?expires={expires_in}"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def bearer(user_id: str) -> dict:
    return {"Authorization": f"Bearer {issue_token(user_id)}"}


@pytest.fixture(autouse=True)
def setup_and_teardown():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def request_gate(clock):
    return RequestGate(clock=clock)


@pytest.fixture
def client(object_store, request_gate):
    def override_get_db():
        database = TestingSessionLocal()
        try:
            yield database
        finally:
            database.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_request_gate] = lambda: request_gate
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_vault(db_session):
    def _make(name="holiday-photos", owner_id=OWNER_ID, is_public=False, allow_downloads=False):
        vault = Vault(
            name=name,
            owner_id=owner_id,
            is_public=is_public,
            allow_downloads=allow_downloads,
            share_token=None if is_public else new_share_token(),
        )
        db_session.add(vault)
        db_session.commit()
        db_session.refresh(vault)
        return vault

    return _make


@pytest.fixture
def make_file(db_session, object_store):
    def _make(vault, name="report.pdf", size_bytes=1024, sort_index=0, stored=True):
        record = VaultFile(
            vault_id=vault.id,
            owner_id=vault.owner_id,
            uploaded_by=vault.owner_id,
            storage_path=f"{vault.owner_id}/{vault.id}/{name}",
            original_name=name,
            content_type="application/pdf",
            size_bytes=size_bytes,
            sort_index=sort_index,
        )
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        if stored:
            object_store.objects[record.storage_path] = b"x" * min(size_bytes, 16)
        return record

    return _make


@pytest.fixture
def owner_id():
    return OWNER_ID


@pytest.fixture
def stranger_id():
    return STRANGER_ID


@pytest.fixture
def auth_headers():
    return bearer


@pytest.fixture
def session_factory():
    return TestingSessionLocal
