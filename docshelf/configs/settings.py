from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    APP_NAME: str = "docshelf"
    APP_ENV: Literal["dev", "prod"] = "dev"
    APP_DEBUG: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")


class MongoSettings(BaseSettings):
    MONGO_ADDRESS: str = ""
    MONGO_HOST: str = ""
    MONGO_PORT: int = 27017
    MONGO_DB: str = "docshelf"
    MONGO_USER: str = ""
    MONGO_PWD: str = ""

    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 8000
    MONGO_CONNECT_TIMEOUT_MS: int = 8000
    MONGO_SOCKET_TIMEOUT_MS: int = 10000
    MONGO_MAX_POOL_SIZE: int = 50
    MONGO_MIN_POOL_SIZE: int = 0

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    @property
    def MONGO_URL(self) -> str:
        if self.MONGO_ADDRESS:
            if self.MONGO_ADDRESS.startswith(("mongodb://", "mongodb+srv://")):
                return self.MONGO_ADDRESS
            address = self.MONGO_ADDRESS
        else:
            host = self.MONGO_HOST or "localhost"
            port = self.MONGO_PORT or 27017
            address = f"{host}:{port}"
        if self.MONGO_USER and self.MONGO_PWD:
            return f"mongodb://{self.MONGO_USER}:{self.MONGO_PWD}@{address}"
        return f"mongodb://{address}"

    @property
    def client_options(self) -> dict:
        return {
            "serverSelectionTimeoutMS": self.MONGO_SERVER_SELECTION_TIMEOUT_MS,
            "connectTimeoutMS": self.MONGO_CONNECT_TIMEOUT_MS,
            "socketTimeoutMS": self.MONGO_SOCKET_TIMEOUT_MS,
            "maxPoolSize": self.MONGO_MAX_POOL_SIZE,
            "minPoolSize": self.MONGO_MIN_POOL_SIZE,
            "tz_aware": True,
        }


class Settings(AppSettings, MongoSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")
