import io
import itertools
import json

import boto3
import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber
from fastapi.testclient import TestClient

from todo_web.generation import TodoGenerator
from todo_web.main import create_app
from todo_web.repositories import InMemoryRepository
from todo_web.settings import Settings

REGION = "us-east-1"
TABLE = "todos"
MODEL = "amazon.titan-text-lite-v1"


def make_settings(**overrides) -> Settings:
    values = dict(aws_region=REGION, persistence_backend="memory")
    values.update(overrides)
    return Settings(**values)


def aws_client(service: str):
    return boto3.client(
        service,
        region_name=REGION,
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def titan_body(*outputs: str) -> StreamingBody:
    raw = json.dumps(
        {
            "inputTextTokenCount": 18,
            "results": [
                {"tokenCount": 7, "outputText": text, "completionReason": "FINISH"}
                for text in outputs
            ],
        }
    ).encode("utf-8")
    return StreamingBody(io.BytesIO(raw), len(raw))


def stub_invoke(stubber: Stubber, body: StreamingBody) -> None:
    stubber.add_response(
        "invoke_model",
        {"body": body, "contentType": "application/json"},
    )


class StepClock:
    """Clock returning 1_700_000_000, 1_700_000_001, ... on successive calls."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self._ticks = itertools.count(start)

    def __call__(self) -> float:
        return float(next(self._ticks))


@pytest.fixture
def bedrock():
    client = aws_client("bedrock-runtime")
    with Stubber(client) as stubber:
        yield client, stubber


@pytest.fixture
def dynamodb():
    client = aws_client("dynamodb")
    with Stubber(client) as stubber:
        yield client, stubber


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository(clock=StepClock())


@pytest.fixture
def make_client(repo, bedrock):
    bedrock_client, _ = bedrock
    clients = []

    def _make(**overrides) -> TestClient:
        settings = make_settings(**overrides)
        app = create_app(
            settings,
            repository=repo,
            generator=TodoGenerator(bedrock_client, MODEL) if settings.generation_enabled else None,
        )
        client = TestClient(app, follow_redirects=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
