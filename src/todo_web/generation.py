from __future__ import annotations

from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from .errors import BackendBadResponseError, BackendError, BackendUnavailableError
from .schemas import (
    TextGenerationConfig,
    TitanTextRequest,
    TitanTextResponse,
    TodoCreate,
    validation_message,
)
from .settings import Settings

log = structlog.get_logger(__name__)

PROMPT = "Generate a short, fake to-do list item. It must be a single sentence, not a list."


def build_request() -> TitanTextRequest:
    return TitanTextRequest(
        input_text=PROMPT,
        text_generation_config=TextGenerationConfig(
            max_token_count=50,
            stop_sequences=[],
            temperature=0.9,
            top_p=1.0,
        ),
    )


def clean_generated_text(text: str) -> str:
    """
    Strip surrounding whitespace, then one leading and one trailing double quote.

    >>> clean_generated_text('  "Buy milk."  ')
    'Buy milk.'
    """
    text = text.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text


# PUBLIC_INTERFACE
class TodoGenerator:
    """
    Asks a Bedrock Titan text model for a single made-up todo.

    Each failure mode raises its own error:
    - request cannot be serialized: BackendError
    - InvokeModel fails: BackendUnavailableError
    - body is not a Titan response: BackendBadResponseError
    - no results, or text that fails todo validation: BackendBadResponseError
    """

    def __init__(self, client: Any, model_id: str) -> None:
        self._client = client
        self._model_id = model_id

    @property
    def model_id(self) -> str:
        return self._model_id

    def generate(self) -> TodoCreate:
        """Invoke the model once and return its suggestion as a validated TodoCreate."""
        try:
            payload = build_request().model_dump_json(by_alias=True)
        except (ValueError, TypeError) as exc:
            raise BackendError(f"failed to marshal request: {exc}") from exc

        try:
            output = self._client.invoke_model(
                body=payload,
                modelId=self._model_id,
                contentType="application/json",
                accept="application/json",
            )
            raw = output["body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise BackendUnavailableError(f"failed to invoke bedrock model: {exc}") from exc

        try:
            response = TitanTextResponse.model_validate_json(raw)
        except ValidationError as exc:
            raise BackendBadResponseError(f"failed to unmarshal response: {exc}") from exc

        if not response.results:
            raise BackendBadResponseError("empty response from bedrock")

        text = clean_generated_text(response.results[0].output_text)
        try:
            todo = TodoCreate(text=text)
        except ValidationError as exc:
            raise BackendBadResponseError(
                f"generated todo rejected: {validation_message(exc)}"
            ) from exc

        log.info("todo_generated", model_id=self._model_id, length=len(todo.text))
        return todo


# PUBLIC_INTERFACE
def get_generator(settings: Settings) -> TodoGenerator:
    """Return a TodoGenerator bound to a Bedrock runtime client for `settings`."""
    from .aws import bedrock_runtime_client

    return TodoGenerator(bedrock_runtime_client(settings), settings.bedrock_model_name)
