# backend configuration
# loads env vars for mongodb, jwt, facebook login

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# load .env from project root
load_dotenv(Path(__file__).parent.parent.parent / ".env")


class Settings(BaseSettings):
    # mongodb
    PLANT_DB_URL: str = os.getenv("PLANT_DB_URL", "127.0.0.1")
    PLANT_DB_NAME: str = os.getenv("PLANT_DB_NAME", "plant")
    DB_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    DB_OPERATION_TIMEOUT_SECONDS: float = 10.0

    # jwt auth
    JWT_SECRET: str = os.getenv("JWT_SECRET", "plant-dev-secret-change-in-production")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # facebook login
    FACEBOOK_GRAPH_URL: str = os.getenv("FACEBOOK_GRAPH_URL", "https://graph.facebook.com/v19.0")
    FACEBOOK_PROFILE_FIELDS: str = "id,name,email,first_name,last_name,picture"
    FACEBOOK_TIMEOUT_SECONDS: float = 10.0

    # cors
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def mongo_connection(self) -> str:
        return f"mongodb://{self.PLANT_DB_URL}/{self.PLANT_DB_NAME}"


settings = Settings()
