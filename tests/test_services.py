import httpx
import pytest

from domain.errors import GenerationError, IdentityError, ValidationError
from domain.identity import ACCOUNT_EXISTS_MSG, CREATE_FAILED_MSG
from domain.models import Mood
from domain.repository import FoodJournal, ShoppingList
from domain.services import (
    FINDER_DIETARY_GOALS,
    FINDER_MOOD,
    add_journal_entry,
    add_shopping_item,
    create_user,
    find_recipes,
    generate_meal_plan,
    get_recipe,
    sign_in,
    suggest_festival_meals,
)

from tests.conftest import RECIPE, FakeLLM, firebase_error, firebase_ok, identity_provider


def assert_full_meal_plan(result) -> None:
    for slot, dish in result.meal_plan.slots():
        assert dish, slot
    assert result.reasoning


@pytest.mark.asyncio
async def test_generate_meal_plan(fake_llm: FakeLLM) -> None:
    got = await generate_meal_plan(
        {"mood": "tired", "dietaryGoals": "low-carb", "availableIngredients": "eggs,spinach"},
        llm=fake_llm,  # pyright: ignore[reportArgumentType]
    )
    assert_full_meal_plan(got)
    assert len(fake_llm.calls) == 1
    prompt, result_name = fake_llm.calls[0]
    assert result_name == "MealPlanResult"
    assert "tired" in prompt and "low-carb" in prompt and "eggs,spinach" in prompt


@pytest.mark.asyncio
async def test_generation_errors_propagate() -> None:
    llm = FakeLLM(error=GenerationError("Model call for MealPlanResult failed."))
    with pytest.raises(GenerationError):
        await generate_meal_plan(
            {"mood": "tired", "dietaryGoals": "low-carb", "availableIngredients": "eggs"},
            llm=llm,  # pyright: ignore[reportArgumentType]
        )


@pytest.mark.asyncio
async def test_empty_location_never_calls_the_model(fake_llm: FakeLLM) -> None:
    with pytest.raises(ValidationError) as exc:
        await suggest_festival_meals({"location": ""}, llm=fake_llm)  # pyright: ignore[reportArgumentType]
    assert [v.field for v in exc.value.violations] == ["location"]
    assert fake_llm.calls == []


@pytest.mark.asyncio
async def test_suggest_festival_meals(fake_llm: FakeLLM) -> None:
    got = await suggest_festival_meals({"location": "Mumbai, India"}, llm=fake_llm)  # pyright: ignore[reportArgumentType]
    assert got.festival == "Diwali"
    assert got.suggested_dishes == ["Gulab Jamun", "Samosa", "Kaju Katli"]


@pytest.mark.asyncio
async def test_get_recipe_keeps_instruction_order(fake_llm: FakeLLM) -> None:
    got = await get_recipe({"dishName": "Flatbread"}, llm=fake_llm)  # pyright: ignore[reportArgumentType]
    assert len(got.ingredients) >= 1
    assert got.instructions == RECIPE["instructions"]
    assert "Flatbread" in fake_llm.calls[0][0]


@pytest.mark.asyncio
async def test_find_recipes_fixes_mood_and_goals(fake_llm: FakeLLM) -> None:
    got = await find_recipes({"availableIngredients": "paneer, peas"}, llm=fake_llm)  # pyright: ignore[reportArgumentType]
    assert_full_meal_plan(got)
    prompt = fake_llm.calls[0][0]
    assert f"Mood: {FINDER_MOOD}" in prompt
    assert f"Dietary Goals: {FINDER_DIETARY_GOALS}" in prompt
    assert "Available Ingredients: paneer, peas" in prompt


@pytest.mark.parametrize(
    "raw,field",
    (
        ({"email": "cook.example.com", "password": "secret1"}, "email"),
        ({"email": "cook@example.com", "password": "12345"}, "password"),
    ),
)
@pytest.mark.asyncio
async def test_bad_credentials_never_reach_the_provider(raw: dict, field: str) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return firebase_ok(request)

    provider = identity_provider(handler)
    for flow in (create_user, sign_in):
        with pytest.raises(ValidationError) as exc:
            await flow(raw, identity=provider)
        assert [v.field for v in exc.value.violations] == [field]
    assert calls == []


@pytest.mark.asyncio
async def test_create_user() -> None:
    got = await create_user(
        {"email": "cook@example.com", "password": "secret1"},
        identity=identity_provider(firebase_ok),
    )
    assert got.uid == "uid-123"


@pytest.mark.parametrize(
    "message,expected",
    (
        ("EMAIL_EXISTS", ACCOUNT_EXISTS_MSG),
        ("INTERNAL_ERROR", CREATE_FAILED_MSG),
    ),
)
@pytest.mark.asyncio
async def test_create_user_errors(message: str, expected: str) -> None:
    with pytest.raises(IdentityError) as exc:
        await create_user(
            {"email": "cook@example.com", "password": "secret1"},
            identity=identity_provider(firebase_error(message)),
        )
    assert exc.value.message == expected


def test_add_shopping_item() -> None:
    shopping_list = ShoppingList(["milk"])
    got = add_shopping_item({"item": "  2 lbs apples "}, shopping_list=shopping_list)
    assert got == "2 lbs apples"
    assert shopping_list.items == ("2 lbs apples", "milk")


def test_add_empty_shopping_item() -> None:
    shopping_list = ShoppingList(["milk"])
    with pytest.raises(ValidationError):
        add_shopping_item({"item": "   "}, shopping_list=shopping_list)
    assert shopping_list.items == ("milk",)


def test_add_journal_entry() -> None:
    journal = FoodJournal()
    journal.add(mood=Mood.sad, food="Cold leftovers")
    got = add_journal_entry({"mood": "Happy", "food": "Pancakes"}, journal=journal)
    assert journal.entries[0] is got
    assert got.mood is Mood.happy
