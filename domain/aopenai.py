import openai


MAX_TOKENS = 3000
TIMEOUT = 60 * 2
DEFAULT_MODEL = "gpt-4o-mini"


def openai_client_factory(
    api_key: str | None = None,
    *,
    timeout: float = TIMEOUT,
) -> openai.AsyncClient:
    """Raises `openai.OpenAIError` when no key is given or set in the environment."""
    return openai.AsyncClient(api_key=api_key or None, timeout=timeout)


def json_schema_format(name: str, schema: dict[str, object]) -> dict[str, object]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "schema": schema,
        },
    }
