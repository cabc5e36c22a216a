from enum import Enum

from domain.models import (
    FestivalRequest,
    FestivalResult,
    MealPlanRequest,
    MealPlanResult,
    RecipeRequest,
    RecipeResult,
    Request,
    Schema,
)


class UseCase(Enum):
    MEAL_PLAN = "meal-plan"
    FESTIVAL = "festival"
    RECIPE = "recipe"


MEAL_PLAN_PROMPT = """
You are an AI meal planning assistant that generates meal plans based on the
user's mood, dietary goals, and available ingredients.

Mood: {mood}
Dietary Goals: {dietary_goals}
Available Ingredients: {available_ingredients}

Generate a meal plan consisting of breakfast, lunch, dinner, and snacks that
aligns with the user's mood, dietary goals, and available ingredients.
Also, provide reasoning on why you generated this meal plan.
Every one of breakfast, lunch, dinner, and snacks must be filled in.
""".strip()


FESTIVAL_PROMPT = """
You are a meal suggestion AI that specializes in recommending dishes based on
the user's location and the festivals celebrated there.

The user is currently in {location}.

Identify the festival being celebrated in that location right now, or one
coming up in the next few weeks. Prefer a festival that is happening now or is
about to happen over one that has already passed this year.
Suggest dishes that are traditionally eaten during that festival.
If there is no such festival, name a popular local dish of the location
instead and suggest it along with a few other local favourites.
""".strip()


RECIPE_PROMPT = """
You are an expert chef. Generate a detailed recipe for the following dish:
{dish_name}.

Include the required ingredients, step-by-step instructions in the order they
should be carried out, the number of servings, and the estimated preparation
time.
""".strip()


SCHEMA_INSTRUCTION = """
Format your response as a JSON object matching the {schema} schema.
Do not include any text outside the JSON object.
""".strip()


TEMPLATES: dict[UseCase, tuple[str, type[Request], type[Schema]]] = {
    UseCase.MEAL_PLAN: (MEAL_PLAN_PROMPT, MealPlanRequest, MealPlanResult),
    UseCase.FESTIVAL: (FESTIVAL_PROMPT, FestivalRequest, FestivalResult),
    UseCase.RECIPE: (RECIPE_PROMPT, RecipeRequest, RecipeResult),
}


def result_type(use_case: UseCase) -> type[Schema]:
    return TEMPLATES[use_case][2]


class Prompt:
    def __init__(self, use_case: UseCase, request: Request) -> None:
        template, request_type, _ = TEMPLATES[use_case]
        if not isinstance(request, request_type):
            raise TypeError(
                f"{use_case.value} prompt needs a {request_type.__name__}, "
                f"got {type(request).__name__}"
            )
        self.use_case = use_case
        self.template = template
        self.request = request

    @property
    def schema_name(self) -> str:
        return result_type(self.use_case).__name__

    def __str__(self) -> str:
        body = self.template.format(**self.request.model_dump())
        instruction = SCHEMA_INSTRUCTION.format(schema=self.schema_name)
        return f"{body}\n\n{instruction}"


def render_prompt(use_case: UseCase, request: Request) -> str:
    return str(Prompt(use_case, request))
