"""Shared fixtures: an in-memory MongoDB (mongomock) wired into the app through ``get_db``."""

import mongomock
import pytest
from fastapi.testclient import TestClient

from survey_api.auth import jwt_handler
from survey_api.database import USERS, create_indexes, get_db
from survey_api.main import app


@pytest.fixture
def db():
    database = mongomock.MongoClient()['surveyDB']
    create_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def add_user(db):
    def _add_user(email: str, role: str | None = None, **fields) -> str:
        document = {'email': email, **fields}
        if role is not None:
            document['role'] = role
        return str(db[USERS].insert_one(document).inserted_id)

    return _add_user


@pytest.fixture
def auth_header():
    def _auth_header(email: str, **token_kwargs) -> dict:
        token = jwt_handler.create_access_token({'email': email}, **token_kwargs)
        return {'Authorization': f'Bearer {token}'}

    return _auth_header
