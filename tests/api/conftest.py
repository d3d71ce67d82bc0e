"""Fixtures wiring the FastAPI app to an in-memory store."""

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from core.container import container
from core.store import RecordStore
from main import app
from services.auth import Authenticator
from services.documents import DocumentService
from services.identifiers import IdentifierGenerator

API_KEY = "test-key-one"
SECOND_API_KEY = "test-key-two"


@pytest.fixture
def api_store(settings, fake_redis):
    return RecordStore(settings, client=fake_redis)


@pytest.fixture
def api_service(api_store, settings):
    return DocumentService(
        store=api_store,
        id_generator=IdentifierGenerator(settings.id_length),
        settings=settings,
    )


@pytest.fixture
def client(settings, api_store, api_service):
    container.settings.override(providers.Object(settings))
    container.store.override(providers.Object(api_store))
    container.document_service.override(providers.Object(api_service))
    container.authenticator.override(providers.Object(Authenticator({API_KEY, SECOND_API_KEY})))
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        container.settings.reset_override()
        container.store.reset_override()
        container.document_service.reset_override()
        container.authenticator.reset_override()


@pytest.fixture
def auth_headers():
    return {"X-API-Key": API_KEY}
