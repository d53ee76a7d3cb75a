from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

MAX_TODO_TEXT_LENGTH = 200


def validate_todo_text(value: str) -> str:
    """
    Check a candidate todo text and return it unchanged.

    - The empty string is rejected.
    - Length is counted in code points, not bytes; at most 200 are allowed.
    - Every character must be printable: letters, marks, numbers, punctuation,
      symbols and the ASCII space. Control, format and non-ASCII separator
      characters are rejected.

    No trimming or escaping happens here; the template escapes on render.

    Raises:
        ValueError: with a message suitable for showing to the user.
    """
    if value == "":
        raise ValueError("Todo text must not be empty.")
    if len(value) > MAX_TODO_TEXT_LENGTH:
        raise ValueError(f"Todo text must be {MAX_TODO_TEXT_LENGTH} characters or less.")
    # str.isprintable() is false for categories C* and Z* except the ASCII space
    if not value.isprintable():
        raise ValueError("Todo text contains non-printable characters.")
    return value


def validation_message(exc: ValidationError) -> str:
    """Return the message of the first error in a pydantic ValidationError."""
    error = exc.errors()[0]
    cause = error.get("ctx", {}).get("error")
    return str(cause) if cause is not None else error["msg"]


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item, from the add form or from a generation.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"text": "Buy groceries"}},
    )

    text: str = Field(..., description="Todo text, 1..200 printable characters")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return validate_todo_text(v)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema handed to the template for a Todo row.
    """

    id: str = Field(..., description="Unique identifier of the todo item")
    text: str = Field(..., description="Todo text")
    created_at_epoch: int = Field(..., description="Creation time in seconds since the epoch")
    created_at_formatted: str = Field(
        ..., description="Creation time as 'YYYY-MM-DD HH:MM:SS' in server local time"
    )


class TextGenerationConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    max_token_count: int = Field(..., alias="maxTokenCount")
    stop_sequences: List[str] = Field(default_factory=list, alias="stopSequences")
    temperature: float
    top_p: float = Field(..., alias="topP")


# PUBLIC_INTERFACE
class TitanTextRequest(BaseModel):
    """
    Request body for Amazon Titan text models.

    Serialized with `model_dump_json(by_alias=True)`:
        {"inputText": ..., "textGenerationConfig": {"maxTokenCount": ...,
         "stopSequences": [...], "temperature": ..., "topP": ...}}
    """

    model_config = ConfigDict(populate_by_name=True)

    input_text: str = Field(..., alias="inputText")
    text_generation_config: TextGenerationConfig = Field(..., alias="textGenerationConfig")


class TitanTextResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token_count: int = Field(0, alias="tokenCount")
    output_text: str = Field(..., alias="outputText")
    completion_reason: Optional[str] = Field(None, alias="completionReason")


# PUBLIC_INTERFACE
class TitanTextResponse(BaseModel):
    """
    Response body from Amazon Titan text models. Only `results[*].outputText`
    is required; the other fields are informational.
    """

    model_config = ConfigDict(populate_by_name=True)

    input_text_token_count: int = Field(0, alias="inputTextTokenCount")
    results: List[TitanTextResult] = Field(default_factory=list)
