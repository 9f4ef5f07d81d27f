"""Request body parsing with envelope-style validation errors."""

from typing import TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from research_assistant.api.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


async def parse_body(request: Request, model: type[ModelT]) -> ModelT:
    """Parse the JSON body of request into model.

    Raises:
        ValidationError: If the body is not JSON or does not validate.
    """
    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationError(f"Request body is not valid JSON: {e}") from None

    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return model(**body)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from None
