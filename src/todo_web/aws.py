from __future__ import annotations

import boto3
from botocore.config import Config

from .settings import Settings


def _client_config(settings: Settings) -> Config:
    # One attempt per call: failures surface to the caller, never retried.
    return Config(
        region_name=settings.aws_region,
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )


# PUBLIC_INTERFACE
def dynamodb_client(settings: Settings):
    """Return a low-level DynamoDB client for the configured region/endpoint."""
    return boto3.client(
        "dynamodb",
        region_name=settings.aws_region,
        endpoint_url=settings.dynamodb_endpoint_url,
        config=_client_config(settings),
    )


# PUBLIC_INTERFACE
def bedrock_runtime_client(settings: Settings):
    """Return a Bedrock runtime client used for InvokeModel calls."""
    return boto3.client(
        "bedrock-runtime",
        region_name=settings.aws_region,
        config=_client_config(settings),
    )
