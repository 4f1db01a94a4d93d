# tests/conftest.py
import json
import os
import tempfile
from pathlib import Path

# Point the settings at a throwaway sqlite file before the engine is built.
_DB_DIR = tempfile.mkdtemp(prefix="discounts-tests-")
os.environ["DATABASE_URL_OVERRIDE"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["ENV"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from discount_app.database import engine
from discount_app.main import app
from discount_app.models.discount import DiscountRuleRecord
from discount_app.routes.proxy import clear_proxy_cache


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    clear_proxy_cache()
    with Session(engine) as db:
        yield db
    SQLModel.metadata.drop_all(engine)
    clear_proxy_cache()


@pytest.fixture
def client(session):
    return TestClient(app)


@pytest.fixture
def make_rule(session):
    def _make(id=None, name="Rule", type="percentage", value=10, product_ids=(), active=True):
        record = DiscountRuleRecord(
            name=name,
            type=type,
            value=value,
            product_ids=json.dumps(list(product_ids)),
            active=active,
        )
        if id is not None:
            record.id = id
        session.add(record)
        session.commit()
        session.refresh(record)
        return record

    return _make
