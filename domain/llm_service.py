import asyncio
import logging
from typing import TypeVar

import openai
import pydantic
from openai.types.chat import ChatCompletionUserMessageParam

from domain.aopenai import (
    DEFAULT_MODEL,
    MAX_TOKENS,
    TIMEOUT,
    json_schema_format,
    openai_client_factory,
)
from domain.errors import GenerationError
from domain.models import Schema


logger = logging.getLogger(__name__)


S = TypeVar("S", bound=Schema)


class LLMService:
    """One chat completion per `generate` call, parsed into a pydantic model.

    The openai client is built on first use so a missing key shows up as a
    `GenerationError` on the first request rather than at startup.
    """

    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = MAX_TOKENS,
        timeout: float = TIMEOUT,
    ) -> None:
        self._openai_client = openai_client
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    @property
    def openai_client(self) -> openai.AsyncClient:
        if self._openai_client is None:
            self._openai_client = openai_client_factory(
                self.api_key, timeout=self.timeout
            )
        return self._openai_client

    async def generate(self, prompt: str, result_type: type[S]) -> S:
        name = result_type.__name__
        message: ChatCompletionUserMessageParam = {"role": "user", "content": prompt}
        logger.info("Generating %s with %s", name, self.model)

        try:
            resp = await self.openai_client.chat.completions.create(
                model=self.model,
                messages=[message],
                max_tokens=self.max_tokens,
                response_format=json_schema_format(  # pyright: ignore[reportArgumentType]
                    name, result_type.model_json_schema()
                ),
            )
        except openai.OpenAIError as e:
            logger.error("Model call for %s failed: %r", name, e)
            raise GenerationError(f"Model call for {name} failed.") from e

        if not resp.choices or not resp.choices[0].message.content:
            logger.error("Model returned no content for %s", name)
            raise GenerationError(f"Model returned no content for {name}.")

        content = resp.choices[0].message.content
        try:
            return result_type.model_validate_json(content)
        except pydantic.ValidationError as e:
            logger.warning("Model output does not match %s: %s", name, e)
            raise GenerationError(f"Model output does not match {name}.") from e

    async def close(self) -> None:
        if self._openai_client is not None:
            await self._openai_client.close()


async def main() -> None:
    from rich import print

    from domain.models import RecipeResult

    llm = LLMService()
    while True:
        dish = input("Dish: ")
        if dish.lower() in ("q", "quit", "exit"):
            break
        print(await llm.generate(f"Give me a recipe for {dish}.", RecipeResult))
    await llm.close()


if __name__ == "__main__":
    asyncio.run(main())
