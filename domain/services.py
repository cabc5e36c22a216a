from collections.abc import Mapping
from typing import Any, TypeAlias

from domain.identity import IdentityProvider
from domain.llm_service import LLMService
from domain.models import (
    Credentials,
    FestivalRequest,
    FestivalResult,
    Identity,
    JournalEntry,
    JournalRequest,
    MealPlanRequest,
    MealPlanResult,
    RecipeFinderRequest,
    RecipeRequest,
    RecipeResult,
    ShoppingItemRequest,
)
from domain.prompts import UseCase, render_prompt
from domain.repository import FoodJournal, ShoppingList
from domain.validation import validate


RawInput: TypeAlias = Mapping[str, Any]


FINDER_MOOD = "creative"
FINDER_DIETARY_GOALS = "using up what I have"


async def generate_meal_plan(raw: RawInput, *, llm: LLMService) -> MealPlanResult:
    request = validate(MealPlanRequest, raw)
    prompt = render_prompt(UseCase.MEAL_PLAN, request)
    return await llm.generate(prompt, MealPlanResult)


async def find_recipes(raw: RawInput, *, llm: LLMService) -> MealPlanResult:
    """Meal plan built around what is in the fridge."""
    finder = validate(RecipeFinderRequest, raw)
    request = MealPlanRequest(
        mood=FINDER_MOOD,
        dietary_goals=FINDER_DIETARY_GOALS,
        available_ingredients=finder.available_ingredients,
    )
    prompt = render_prompt(UseCase.MEAL_PLAN, request)
    return await llm.generate(prompt, MealPlanResult)


async def suggest_festival_meals(raw: RawInput, *, llm: LLMService) -> FestivalResult:
    request = validate(FestivalRequest, raw)
    prompt = render_prompt(UseCase.FESTIVAL, request)
    return await llm.generate(prompt, FestivalResult)


async def get_recipe(raw: RawInput, *, llm: LLMService) -> RecipeResult:
    request = validate(RecipeRequest, raw)
    prompt = render_prompt(UseCase.RECIPE, request)
    return await llm.generate(prompt, RecipeResult)


async def create_user(raw: RawInput, *, identity: IdentityProvider) -> Identity:
    credentials = validate(Credentials, raw)
    return await identity.create_account(credentials.email, credentials.password)


async def sign_in(raw: RawInput, *, identity: IdentityProvider) -> Identity:
    credentials = validate(Credentials, raw)
    return await identity.sign_in(credentials.email, credentials.password)


def add_shopping_item(raw: RawInput, *, shopping_list: ShoppingList) -> str:
    request = validate(ShoppingItemRequest, raw)
    shopping_list.add(request.item)
    return request.item


def add_journal_entry(raw: RawInput, *, journal: FoodJournal) -> JournalEntry:
    request = validate(JournalRequest, raw)
    return journal.add(mood=request.mood, food=request.food)
