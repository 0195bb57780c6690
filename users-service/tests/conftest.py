import pytest
import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.dirname(CURRENT_DIR)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

# Настройки читаются при импорте, поэтому окружение задаём до импорта src
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from src.infrastructure.db import engine, SessionLocal
from src.infrastructure.models import Base


@pytest.fixture
def db_session():
    """Сессия на свежей in-memory схеме"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """Тестовый клиент на той же in-memory БД"""
    from fastapi.testclient import TestClient
    from src.main import app
    yield TestClient(app)


def student_payload(**overrides):
    data = {
        "name": "Luis",
        "first_surname": "Garcia",
        "second_surname": "Lopez",
        "email": "luis@example.com",
        "phone": "5512345678",
        "enrollment_code": "A2024001",
        "program_id": 1,
        "division_id": 2,
    }
    data.update(overrides)
    return data


def teacher_payload(**overrides):
    data = {"name": "Ana", "first_surname": "Ruiz", "email": "ana@x.com"}
    data.update(overrides)
    return data
