import contextlib
import functools
import logging
from typing import Any, Awaitable, Callable

from jinja2 import Environment, FileSystemLoader, select_autoescape
from rich.logging import RichHandler
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from app import config
from app.html.recipe_detail import RecipeDetail
from domain.errors import GenerationError, IdentityError, ValidationError
from domain.identity import IdentityProvider
from domain.llm_service import LLMService
from domain.models import Identity, Mood
from domain.repository import Kitchen, KitchenRepository
from domain.services import (
    add_journal_entry,
    add_shopping_item,
    create_user,
    find_recipes,
    generate_meal_plan,
    get_recipe,
    sign_in,
    suggest_festival_meals,
)


CONFIG = config.Config()


logging.basicConfig(
    level=CONFIG.log_level,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = logging.getLogger(__name__)


TEMPLATES = Environment(
    loader=FileSystemLoader(CONFIG.html_dir),
    autoescape=select_autoescape(),
)


TABS = (
    ("meal-plan", "AI Meal Plan"),
    ("festive-foods", "Festive Foods"),
    ("recipe-finder", "Recipe Finder"),
    ("shopping-list", "Shopping List"),
    ("journal", "Food Journal"),
)


SERVICES = (
    ("meal-plan", "AI Meal Plan", "Get personalized meal plans based on your mood and diet."),
    ("festive-foods", "Festive Foods", "Discover dishes for current cultural celebrations near you."),
    ("recipe-finder", "Recipe Finder", "Turn the ingredients you have into delicious meals."),
    ("shopping-list", "Shopping List", "Keep track of your grocery needs all in one place."),
    ("journal", "Food Journal", "Connect your mood with your meals and find patterns."),
)


DEFAULTS: dict[str, dict[str, str]] = {
    "meal-plan": {
        "mood": "craving something comforting",
        "dietaryGoals": "balanced and healthy",
        "availableIngredients": "tomatoes, bread, cheese, garlic",
    },
    "festive-foods": {"location": "Mumbai, India"},
    "recipe-finder": {"availableIngredients": "paneer, peas, tomatoes, onion, ginger"},
    "journal": {"mood": "", "food": ""},
    "shopping-list": {"item": ""},
}


ERROR_TITLE = "Oh no! Something went wrong."


class RequestContext:
    """Who is asking, read once from the session for the whole request."""

    def __init__(self, user: Identity | None) -> None:
        self.user = user
        self.signed_in = user is not None

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        data = request.session.get("user")
        if not isinstance(data, dict):
            return cls(None)
        try:
            return cls(Identity(**data))
        except TypeError:
            return cls(None)

    def kitchen(self, request: Request) -> Kitchen:
        assert self.user is not None
        kitchens: KitchenRepository = request.app.state.kitchens
        return kitchens.get(self.user.uid)


def render(name: str, **kwargs: Any) -> str:
    return TEMPLATES.get_template(name).render(**kwargs)


def toast(description: str, *, title: str = ERROR_TITLE, error: bool = True) -> str:
    return render("toast.html", title=title, description=description, error=error)


def flash(request: Request, title: str, description: str, *, error: bool = False) -> None:
    request.session["flash"] = {"title": title, "description": description, "error": error}


def pop_flash(request: Request) -> str:
    data = request.session.pop("flash", None)
    if not isinstance(data, dict):
        return ""
    return toast(data["description"], title=data["title"], error=data["error"])


def aHTMLResponse(route: Callable[..., Awaitable[str | tuple[str, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> HTMLResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            html, code = resp, 200
        else:
            html, code = resp
        return HTMLResponse(html, status_code=code)

    return wrapper


def sign_in_gate(tab: str) -> str:
    return render("sign-in-gate.html", tab=tab)


async def form_data(request: Request) -> dict[str, str]:
    async with request.form() as form:
        return {k: v for k, v in form.items() if isinstance(v, str)}


@aHTMLResponse
async def homepage(request: Request) -> str:
    ctx = RequestContext.from_request(request)
    tab = request.query_params.get("tab", "meal-plan")
    if tab not in dict(TABS):
        tab = "meal-plan"
    return render(
        "index.html",
        ctx=ctx,
        tab=tab,
        tabs=TABS,
        values=DEFAULTS.get(tab, {}),
        errors={},
        kitchen=ctx.kitchen(request) if ctx.signed_in else None,
        moods=list(Mood),
        flash=pop_flash(request),
    )


async def dashboard(request: Request) -> HTMLResponse | RedirectResponse:
    ctx = RequestContext.from_request(request)
    if not ctx.signed_in:
        return RedirectResponse("/signin", status_code=303)
    return HTMLResponse(
        render("dashboard.html", ctx=ctx, services=SERVICES, flash=pop_flash(request))
    )


@aHTMLResponse
async def meal_plan(request: Request) -> str:
    ctx = RequestContext.from_request(request)
    if not ctx.signed_in:
        return sign_in_gate("meal-plan")
    raw = await form_data(request)
    try:
        result = await generate_meal_plan(raw, llm=request.app.state.llm)
    except ValidationError as e:
        return render("meal-plan.html", values=raw, errors=e.fields, result=None)
    except GenerationError:
        return render(
            "meal-plan.html", values=raw, errors={}, result=None
        ) + toast("There was a problem with generating your meal plan.")
    return render("meal-plan.html", values=raw, errors={}, result=result)


@aHTMLResponse
async def recipe_finder(request: Request) -> str:
    raw = await form_data(request)
    try:
        result = await find_recipes(raw, llm=request.app.state.llm)
    except ValidationError as e:
        return render("recipe-finder.html", values=raw, errors=e.fields, result=None)
    except GenerationError:
        return render(
            "recipe-finder.html", values=raw, errors={}, result=None
        ) + toast("There was a problem with finding recipes for you.")
    return render("recipe-finder.html", values=raw, errors={}, result=result)


@aHTMLResponse
async def festive_foods(request: Request) -> str:
    ctx = RequestContext.from_request(request)
    if not ctx.signed_in:
        return sign_in_gate("festive-foods")
    raw = await form_data(request)
    try:
        result = await suggest_festival_meals(raw, llm=request.app.state.llm)
    except ValidationError as e:
        return render("festive-foods.html", values=raw, errors=e.fields, result=None)
    except GenerationError:
        return render(
            "festive-foods.html", values=raw, errors={}, result=None
        ) + toast("There was a problem with getting festival suggestions.")
    return render("festive-foods.html", values=raw, errors={}, result=result)


@aHTMLResponse
async def recipe(request: Request) -> str:
    raw = await form_data(request)
    try:
        result = await get_recipe(raw, llm=request.app.state.llm)
    except ValidationError as e:
        return render("recipe-dialog.html", detail="") + toast(
            e.fields.get("dishName", "Could not fetch the recipe for this dish.")
        )
    except GenerationError:
        return render("recipe-dialog.html", detail="") + toast(
            "Could not fetch the recipe for this dish."
        )
    dish_name = raw.get("dishName", "").strip()
    detail = RecipeDetail(dish_name, result, environment=TEMPLATES)
    return render("recipe-dialog.html", detail=detail.render())


def shopping_list_panel(
    ctx: RequestContext,
    request: Request,
    *,
    values: dict[str, str] | None = None,
    errors: dict[str, str] | None = None,
) -> str:
    return render(
        "shopping-list.html",
        ctx=ctx,
        kitchen=ctx.kitchen(request),
        values=values or DEFAULTS["shopping-list"],
        errors=errors or {},
    )


@aHTMLResponse
async def shopping_list_add(request: Request) -> str:
    ctx = RequestContext.from_request(request)
    if not ctx.signed_in:
        return sign_in_gate("shopping-list")
    raw = await form_data(request)
    try:
        add_shopping_item(raw, shopping_list=ctx.kitchen(request).shopping_list)
    except ValidationError as e:
        return shopping_list_panel(ctx, request, values=raw, errors=e.fields)
    return shopping_list_panel(ctx, request)


@aHTMLResponse
async def shopping_list_remove(request: Request) -> str:
    ctx = RequestContext.from_request(request)
    if not ctx.signed_in:
        return sign_in_gate("shopping-list")
    raw = await form_data(request)
    ctx.kitchen(request).shopping_list.remove(raw.get("item", ""))
    return shopping_list_panel(ctx, request)


@aHTMLResponse
async def shopping_list_clear(request: Request) -> str:
    ctx = RequestContext.from_request(request)
    if not ctx.signed_in:
        return sign_in_gate("shopping-list")
    ctx.kitchen(request).shopping_list.clear()
    return shopping_list_panel(ctx, request)


@aHTMLResponse
async def shopping_list_ingredients(request: Request) -> str:
    """Copy result fields into the shopping list.

    Either every ingredient of a fetched recipe (with `dishName` set) or a
    single suggested dish.
    """
    ctx = RequestContext.from_request(request)
    if not ctx.signed_in:
        return toast("Sign in to manage your shopping list.")
    async with request.form() as form:
        dish_name = str(form.get("dishName", "")).strip()
        items = [i.strip() for i in form.getlist("ingredient") if isinstance(i, str)]
    items = [i for i in items if i]
    if not items:
        return toast("There was nothing to add to your shopping list.")
    ctx.kitchen(request).shopping_list.add_all(items)
    if dish_name:
        return toast(
            f"Ingredients for {dish_name} have been added to your shopping list.",
            title="Ingredients Added!",
            error=False,
        )
    return toast(
        f"{', '.join(items)} added to your shopping list.",
        title="Added to Shopping List!",
        error=False,
    )


@aHTMLResponse
async def journal(request: Request) -> str:
    ctx = RequestContext.from_request(request)
    if not ctx.signed_in:
        return sign_in_gate("journal")
    raw = await form_data(request)
    kitchen = ctx.kitchen(request)
    try:
        add_journal_entry(raw, journal=kitchen.journal)
    except ValidationError as e:
        values, errors = raw, e.fields
    else:
        values, errors = DEFAULTS["journal"], {}
    return render(
        "journal.html",
        ctx=ctx,
        kitchen=kitchen,
        moods=list(Mood),
        values=values,
        errors=errors,
    )


async def signin(request: Request) -> HTMLResponse | RedirectResponse:
    match request.method.lower():
        case "get":
            return HTMLResponse(
                render("signin.html", values={}, errors={}, flash=pop_flash(request))
            )
        case "post":
            raw = await form_data(request)
            try:
                user = await sign_in(raw, identity=request.app.state.identity)
            except ValidationError as e:
                return HTMLResponse(
                    render("signin.html", values=raw, errors=e.fields, flash="")
                )
            except IdentityError as e:
                return HTMLResponse(
                    render("signin.html", values=raw, errors={}, flash=toast(e.message))
                )
            request.session["user"] = user.to_dict()
            flash(request, "Signed In Successfully!", "Welcome back!")
            return RedirectResponse("/dashboard", status_code=303)
        case _:
            raise ValueError("Unsupported method.")


async def signup(request: Request) -> HTMLResponse | RedirectResponse:
    match request.method.lower():
        case "get":
            return HTMLResponse(render("signup.html", values={}, errors={}, flash=""))
        case "post":
            raw = await form_data(request)
            try:
                await create_user(raw, identity=request.app.state.identity)
            except ValidationError as e:
                return HTMLResponse(
                    render("signup.html", values=raw, errors=e.fields, flash="")
                )
            except IdentityError as e:
                return HTMLResponse(
                    render("signup.html", values=raw, errors={}, flash=toast(e.message))
                )
            flash(request, "Account Created!", "Sign in to get started.")
            return RedirectResponse("/signin", status_code=303)
        case _:
            raise ValueError("Unsupported method.")


async def signout(request: Request) -> RedirectResponse:
    ctx = RequestContext.from_request(request)
    identity: IdentityProvider = request.app.state.identity
    identity.sign_out(ctx.user)
    request.session.clear()
    flash(request, "Signed Out", "You have been successfully signed out.")
    return RedirectResponse("/", status_code=303)


def log_session_change(user: Identity | None) -> None:
    if user is None:
        logger.info("Session ended")
    else:
        logger.info("Session started for %s", user.uid)


@contextlib.asynccontextmanager
async def lifespan(app: Starlette):
    yield
    await app.state.llm.close()
    await app.state.identity.close()


def create_app(
    *,
    llm: LLMService | None = None,
    identity: IdentityProvider | None = None,
    kitchens: KitchenRepository | None = None,
) -> Starlette:
    if (
        CONFIG.env != config.Env.local
        and CONFIG.session_secret == config.LOCAL_SESSION_SECRET
    ):
        raise ValueError("SESSION_SECRET must be set outside local development.")

    app = Starlette(
        debug=True if CONFIG.env == config.Env.local else False,
        routes=[
            Route("/", homepage),
            Route("/dashboard", dashboard),
            Route("/signin", signin, methods=["GET", "POST"]),
            Route("/signup", signup, methods=["GET", "POST"]),
            Route("/signout", signout, methods=["POST"]),
            Route("/meal-plan", meal_plan, methods=["POST"]),
            Route("/recipe-finder", recipe_finder, methods=["POST"]),
            Route("/festive-foods", festive_foods, methods=["POST"]),
            Route("/recipes", recipe, methods=["POST"]),
            Route("/shopping-list", shopping_list_add, methods=["POST"]),
            Route("/shopping-list/remove", shopping_list_remove, methods=["POST"]),
            Route("/shopping-list/clear", shopping_list_clear, methods=["POST"]),
            Route(
                "/shopping-list/ingredients",
                shopping_list_ingredients,
                methods=["POST"],
            ),
            Route("/journal", journal, methods=["POST"]),
            Mount("/assets", StaticFiles(directory=CONFIG.assets_dir), name="assets"),
        ],
        middleware=[Middleware(SessionMiddleware, secret_key=CONFIG.session_secret)],
        lifespan=lifespan,
    )

    app.state.llm = (
        LLMService(
            api_key=CONFIG.openai_api_key,
            model=CONFIG.openai_model,
            timeout=CONFIG.openai_timeout,
        )
        if llm is None
        else llm
    )
    app.state.identity = (
        IdentityProvider(
            api_key=CONFIG.firebase_api_key,
            base_url=CONFIG.identity_url,
        )
        if identity is None
        else identity
    )
    app.state.kitchens = KitchenRepository() if kitchens is None else kitchens
    app.state.identity.subscribe(log_session_change)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.app:app", host="0.0.0.0", port=8080, reload=CONFIG.env == config.Env.local)
