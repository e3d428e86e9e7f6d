"""Shared pytest fixtures for the speech proxy test suite."""

from __future__ import annotations

import pytest
import requests

from main_app import create_app
from services.azure_speech import AzureSpeechClient
from services.synthesis_gateway import SynthesisGateway
from tests.fakes import FakeResponse, FakeSession
from voice_catalog import VoiceCatalog


@pytest.fixture
def catalog() -> VoiceCatalog:
    return VoiceCatalog.default()


@pytest.fixture
def azure_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def speech_client(azure_session) -> AzureSpeechClient:
    return AzureSpeechClient("test-key", "japaneast", session=azure_session)


@pytest.fixture
def gateway(catalog, speech_client) -> SynthesisGateway:
    return SynthesisGateway(catalog, speech_client)


@pytest.fixture
def app(gateway):
    app = create_app({"TESTING": True}, gateway=gateway)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def upstream_failure(azure_session) -> FakeSession:
    """Make the fake Azure endpoint answer 401 with a diagnostic body."""

    azure_session.response = FakeResponse(
        content=b"Access denied due to invalid subscription key.",
        status_code=401,
        reason="Unauthorized",
    )
    return azure_session


@pytest.fixture
def transport_failure(azure_session) -> FakeSession:
    azure_session.response = requests.ConnectionError("connection refused")
    return azure_session
