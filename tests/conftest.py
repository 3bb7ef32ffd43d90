"""Pytest configuration and fixtures for clonekit tests"""

import itertools
import json
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure src directory is in Python path before any imports
project_root = Path(__file__).resolve().parent.parent
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("TESTING", "1")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clonekit import models
from clonekit.cloning import SqlEngagementStore
from clonekit.database import Base, get_db


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh in-memory database engine for each test"""
    # StaticPool keeps every connection on the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for each test"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session):
    return SqlEngagementStore(db_session)


@pytest.fixture
def factory(db_session):
    """Seed clients, engagements and artifacts directly through the ORM"""
    return SeedFactory(db_session)


class SeedFactory:
    def __init__(self, db):
        self.db = db
        self._ids = itertools.count(1)
        self._clock = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def _next_id(self, prefix):
        return f"{prefix}-{next(self._ids):03d}"

    def _tick(self):
        self._clock += timedelta(minutes=1)
        return self._clock

    def client(self, name="Acme Holdings", id=None):
        client = models.Client(id=id or self._next_id("client"), name=name)
        self.db.add(client)
        self.db.commit()
        return client

    def engagement(self, client, name="Acme Automation Audit", pathway="quick_win", id=None):
        engagement = models.Engagement(
            id=id or self._next_id("eng"),
            name=name,
            client_id=client.id,
            status="active",
            pathway=pathway,
        )
        self.db.add(engagement)
        self.db.commit()
        return engagement

    def artifact(
        self,
        engagement,
        content=None,
        name="Discovery Notes",
        template_id="TPL-01",
        status="draft",
        metadata=None,
        version=3,
        id=None,
    ):
        if isinstance(content, dict):
            content = json.dumps(content)
        artifact = models.Artifact(
            id=id or self._next_id("art"),
            engagement_id=engagement.id,
            template_id=template_id,
            name=name,
            type="document",
            status=status,
            content=content,
            artifact_metadata=metadata or {},
            version=version,
            created_at=self._tick(),
        )
        self.db.add(artifact)
        self.db.commit()
        return artifact


@pytest.fixture(scope="function")
def client(db_engine, monkeypatch):
    """Create a test client with dependency overrides"""
    from clonekit.api.app import create_app

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setenv("TESTING", "1")

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
