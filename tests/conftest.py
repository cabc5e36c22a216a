import json
from typing import Any, Callable, TypeAlias
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from starlette.testclient import TestClient

from app.app import create_app
from domain.identity import IdentityProvider
from domain.models import Schema
from domain.repository import KitchenRepository


MEAL_PLAN = {
    "mealPlan": {
        "breakfast": "Spinach and egg scramble",
        "lunch": "Egg salad lettuce wraps",
        "dinner": "Baked eggs in spinach cream",
        "snacks": "Hard-boiled eggs with salt",
    },
    "reasoning": "You are tired and low-carb, so quick egg and spinach meals fit.",
}

FESTIVAL = {
    "festival": "Diwali",
    "suggestedDishes": ["Gulab Jamun", "Samosa", "Kaju Katli"],
}

RECIPE = {
    "ingredients": ["2 cups flour", "1 tsp salt", "1 cup water"],
    "instructions": [
        "Mix the flour and salt.",
        "Add the water and knead.",
        "Rest the dough for 10 minutes.",
    ],
    "servings": "4",
    "prepTime": "30 minutes",
}


class FakeLLM:
    """Stands in for `LLMService`, answering from canned payloads."""

    def __init__(
        self,
        payloads: dict[str, dict[str, Any]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.payloads = (
            {
                "MealPlanResult": MEAL_PLAN,
                "FestivalResult": FESTIVAL,
                "RecipeResult": RECIPE,
            }
            if payloads is None
            else payloads
        )
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def generate(self, prompt: str, result_type: type[Schema]) -> Schema:
        self.calls.append((prompt, result_type.__name__))
        if self.error is not None:
            raise self.error
        return result_type.model_validate(self.payloads[result_type.__name__])

    async def close(self) -> None:
        pass


def chat_response(content: str | None) -> MagicMock:
    message = MagicMock(content=content)
    return MagicMock(choices=[MagicMock(message=message)])


@pytest.fixture
def openai_client() -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=chat_response(json.dumps(MEAL_PLAN))
    )
    return client


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


Handler: TypeAlias = Callable[[httpx.Request], httpx.Response]


def firebase_ok(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(
        200,
        json={
            "localId": "uid-123",
            "email": body["email"],
            "idToken": "token-abc",
            "refreshToken": "refresh",
            "expiresIn": "3600",
        },
    )


def firebase_error(message: str) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400, json={"error": {"code": 400, "message": message, "errors": []}}
        )

    return handler


def identity_provider(handler: Handler) -> IdentityProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IdentityProvider(api_key="test-key", http_client=client)


@pytest.fixture
def identity() -> IdentityProvider:
    return identity_provider(firebase_ok)


@pytest.fixture
def client(fake_llm: FakeLLM, identity: IdentityProvider) -> TestClient:
    app = create_app(llm=fake_llm, identity=identity, kitchens=KitchenRepository())  # pyright: ignore[reportArgumentType]
    return TestClient(app)


@pytest.fixture
def signed_in(client: TestClient) -> TestClient:
    resp = client.post(
        "/signin", data={"email": "cook@example.com", "password": "secret1"}
    )
    assert resp.status_code == 200
    return client
