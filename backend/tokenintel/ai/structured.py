"""
Structured (schema-validated) generation from a language model
"""

import json
import logging
from typing import Optional, Protocol, Type, TypeVar

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from .. import config
from ..utils.errors import UpstreamError

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=BaseModel)


class StructuredGenerator(Protocol):
    async def generate(self, prompt: str, schema: Type[M]) -> M:
        ...


class OpenAIStructuredGenerator:
    """Chat completions in JSON mode, parsed into a pydantic model"""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = config.OPENAI_MODEL,
        temperature: float = 0.1,
    ):
        self.client = client or AsyncOpenAI(api_key=config.OPENAI_API_KEY or None, max_retries=3)
        self.model = model
        self.temperature = temperature

    async def generate(self, prompt: str, schema: Type[M]) -> M:
        system_prompt = (
            "Reply with a single JSON object that validates against this JSON schema:\n"
            f"{json.dumps(schema.model_json_schema())}"
        )
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise UpstreamError(f"Structured generation failed: {str(e)}") from e

        content = response.choices[0].message.content or ""
        try:
            return schema.model_validate_json(content)
        except SchemaValidationError as e:
            logger.warning(f"Model output did not match {schema.__name__}: {str(e)}")
            raise UpstreamError(f"Model output did not match {schema.__name__}") from e
