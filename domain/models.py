from datetime import date
from enum import Enum
from typing import Annotated, ClassVar

import markdown2  # pyright: ignore[reportMissingTypeStubs]
from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class Schema(BaseModel):
    """Wire names are camelCase, attributes are snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class Request(Schema):
    # field name -> rule -> user-facing message
    messages: ClassVar[dict[str, dict[str, str]]] = {}


class MealPlanRequest(Request):
    mood: str = Field(min_length=1, max_length=50)
    dietary_goals: str = Field(min_length=1, max_length=100)
    available_ingredients: str = Field(min_length=1, max_length=200)

    messages = {
        "mood": {
            "required": "Please share your mood.",
            "min_length": "Please share your mood.",
            "max_length": "Keep your mood under 50 characters.",
        },
        "dietaryGoals": {
            "required": "What are your goals?",
            "min_length": "What are your goals?",
            "max_length": "Keep your goals under 100 characters.",
        },
        "availableIngredients": {
            "required": "What ingredients do you have?",
            "min_length": "What ingredients do you have?",
            "max_length": "Keep your ingredients under 200 characters.",
        },
    }


class RecipeFinderRequest(Request):
    available_ingredients: str = Field(min_length=1, max_length=200)

    messages = {
        "availableIngredients": {
            "required": "What's in your fridge?",
            "min_length": "What's in your fridge?",
            "max_length": "Keep your ingredients under 200 characters.",
        },
    }


class FestivalRequest(Request):
    location: str = Field(min_length=2, max_length=50)

    messages = {
        "location": {
            "required": "Please enter a location.",
            "min_length": "Please enter a location.",
            "max_length": "Keep your location under 50 characters.",
        },
    }


class RecipeRequest(Request):
    dish_name: str = Field(min_length=1)

    messages = {
        "dishName": {
            "required": "Which dish would you like a recipe for?",
            "min_length": "Which dish would you like a recipe for?",
        },
    }


class Credentials(Request):
    """Passwords are passed on exactly as typed."""

    model_config = ConfigDict(str_strip_whitespace=False)

    email: Annotated[
        str, StringConstraints(strip_whitespace=True, pattern=EMAIL_PATTERN)
    ]
    password: str = Field(min_length=6)


    messages = {
        "email": {
            "required": "Please enter a valid email address.",
            "format": "Please enter a valid email address.",
        },
        "password": {
            "required": "Password must be at least 6 characters.",
            "min_length": "Password must be at least 6 characters.",
        },
    }


class ShoppingItemRequest(Request):
    item: str = Field(min_length=1)

    messages = {
        "item": {
            "required": "Please enter an item.",
            "min_length": "Please enter an item.",
        },
    }


class Mood(Enum):
    happy = "Happy"
    comforted = "Comforted"
    sad = "Sad"
    neutral = "Neutral"
    stressed = "Stressed"


class JournalRequest(Request):
    mood: Mood
    food: str = Field(min_length=3, max_length=500)

    messages = {
        "mood": {
            "required": "Please select a mood.",
            "choice": "Please select a mood.",
        },
        "food": {
            "required": "Please describe what you ate.",
            "min_length": "Please describe what you ate.",
            "max_length": "Keep your description under 500 characters.",
        },
    }


class MealPlan(Schema):
    breakfast: str = Field(min_length=1, description="A suggestion for breakfast.")
    lunch: str = Field(min_length=1, description="A suggestion for lunch.")
    dinner: str = Field(min_length=1, description="A suggestion for dinner.")
    snacks: str = Field(min_length=1, description="Suggestions for snacks.")

    def slots(self) -> list[tuple[str, str]]:
        return [
            ("Breakfast", self.breakfast),
            ("Lunch", self.lunch),
            ("Dinner", self.dinner),
            ("Snacks", self.snacks),
        ]


class MealPlanResult(Schema):
    meal_plan: MealPlan
    reasoning: str = Field(
        description=(
            "Reasoning behind the generated meal plan (how it fits the mood, "
            "dietary goals, and available ingredients)."
        ),
    )

    @property
    def reasoning_html(self) -> str:
        return markdown2.markdown(  # pyright: ignore[reportUnknownVariableType, reportUnknownMemberType]
            self.reasoning, safe_mode="escape"
        )


class FestivalResult(Schema):
    festival: str = Field(min_length=1, description="The festival being celebrated.")
    suggested_dishes: list[str] = Field(
        min_length=1, description="Dishes traditionally eaten during the festival."
    )


class RecipeResult(Schema):
    ingredients: list[str] = Field(
        min_length=1, description="A list of ingredients required for the recipe."
    )
    instructions: list[str] = Field(
        min_length=1, description="Step-by-step preparation instructions, in order."
    )
    servings: str = Field(description="The number of servings the recipe makes.")
    prep_time: str = Field(description="The preparation time for the recipe.")


class Identity:
    def __init__(self, *, uid: str, email: str, id_token: str = "") -> None:
        self.uid = uid
        self.email = email
        self.id_token = id_token

    def __repr__(self) -> str:
        return f"<Identity(uid={self.uid}, email={self.email})>"

    def to_dict(self) -> dict[str, str]:
        return {"uid": self.uid, "email": self.email, "id_token": self.id_token}


class JournalEntry:
    def __init__(self, *, id: int, date: str, mood: Mood, food: str) -> None:
        self.id = id
        self.date = date
        self.mood = mood
        self.food = food

    def __repr__(self) -> str:
        return f"<JournalEntry(id={self.id}, mood={self.mood.value})>"


def format_date(d: date) -> str:
    return f"{d.month}/{d.day}/{d.year}"
