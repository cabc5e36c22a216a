from jinja2 import Environment

from domain.models import RecipeResult


class RecipeDetail:
    def __init__(
        self,
        dish_name: str,
        recipe: RecipeResult,
        *,
        environment: Environment,
        template_name: str = "recipe-detail.html",
    ) -> None:
        self.dish_name = dish_name
        self.recipe = recipe
        self.env = environment
        self.name = template_name

    @property
    def title(self) -> str:
        return self.dish_name

    @property
    def ingredients(self) -> list[str]:
        return self.recipe.ingredients

    @property
    def steps(self) -> list[tuple[int, str]]:
        return list(enumerate(self.recipe.instructions, start=1))

    @property
    def summary(self) -> str:
        return f"Serves {self.recipe.servings} · Prep time {self.recipe.prep_time}"

    def render(self) -> str:
        return self.env.get_template(self.name).render(recipe=self)
