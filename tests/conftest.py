import itertools
import os
import sys
from datetime import timedelta

import pytest

CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.dirname(CURRENT_DIR)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mentoring_service.domain.clock import utcnow
from mentoring_service.infrastructure.db import Base, get_db
from mentoring_service.infrastructure.models import GroupORM, UserORM
from mentoring_service.infrastructure.rate_limit import limiter
from mentoring_service.infrastructure.security import create_access_token
from mentoring_service.main import app

# Одна in-memory БД на все потоки TestClient
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Настройка тестового окружения"""
    # Redis в тестах нет: кэш всегда промахивается
    def no_redis():
        raise ConnectionError("redis is disabled in tests")

    monkeypatch.setattr("mentoring_service.infrastructure.cache.get_redis", no_redis)
    # Отключаем rate limiting
    monkeypatch.setattr(limiter, "enabled", False)


@pytest.fixture
def db():
    # Чистые таблицы перед каждым тестом
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db):
    yield TestClient(app)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role="STUDENT", group=None, **kwargs):
        n = next(counter)
        user = UserORM(
            email=f"user{n}@example.com",
            first_name=f"First{n}",
            last_name=f"Last{n}",
            role=role,
            mentee_group_id=group.id if group is not None else None,
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_group(db):
    def _make(mentor=None, mentees=(), category="CS_BSC_MENG"):
        number = (db.scalar(select(func.max(GroupORM.group_number))) or 0) + 1
        group = GroupORM(
            group_number=number,
            category=category,
            mentor_id=mentor.id if mentor is not None else None,
        )
        db.add(group)
        db.commit()
        for mentee in mentees:
            mentee.mentee_group_id = group.id
        db.commit()
        db.refresh(group)
        return group
    return _make


@pytest.fixture
def auth():
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}
    return _headers


@pytest.fixture
def future():
    def _at(days=7, hours=0) -> str:
        return (utcnow() + timedelta(days=days, hours=hours)).replace(microsecond=0).isoformat()
    return _at
