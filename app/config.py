from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.aopenai import DEFAULT_MODEL


ROOT = Path(__file__).resolve().parent.parent

# Only accepted when env is local.
LOCAL_SESSION_SECRET = "CHANGE_ME_IN_PRODUCTION"


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: Env = Env.local
    log_level: str = "INFO"
    html_dir: Path = ROOT / "assets" / "html"
    assets_dir: Path = ROOT / "assets"
    openai_api_key: str = ""
    openai_model: str = DEFAULT_MODEL
    openai_timeout: float = 60 * 2
    firebase_api_key: str = ""
    identity_url: str = "https://identitytoolkit.googleapis.com/v1/"
    session_secret: str = LOCAL_SESSION_SECRET
