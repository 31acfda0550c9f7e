import functools
import os
import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from pydantic import BaseModel, Field, PlainSerializer
from pydantic_settings import BaseSettings, SettingsConfigDict

from lendgraph.logging import logger

CONFIG_DIR = Path(os.environ.get("LENDGRAPH_CONFIG_DIR", Path.home() / ".config" / "lendgraph"))
CONFIG_FILE = CONFIG_DIR / "config.toml"
DB_PATH = CONFIG_DIR / "lendgraph.db"


class DatabaseSettings(BaseModel):
    # Serialize the path as a string representation of the absolute path
    path: Annotated[
        Path,
        PlainSerializer(lambda path: str(path.absolute()), return_type=str),
    ]


class ProjectionSettings(BaseModel):
    # Number of events applied between session commits
    batch_size: int = Field(default=1000, gt=0)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LENDGRAPH_")

    database: DatabaseSettings
    projection: ProjectionSettings = ProjectionSettings()


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(),
        ),
    )


@functools.cache
def get_settings() -> Settings:
    """
    Load the settings from the config file, creating the config directory, a default config file and
    an empty database on first use.
    """

    if not CONFIG_DIR.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created a configuration directory at {CONFIG_DIR}.")

    if CONFIG_FILE.exists():
        return load_config_from_file(CONFIG_FILE)

    settings = Settings(
        database=DatabaseSettings(
            path=DB_PATH,
        ),
    )
    save_config_to_file(settings, CONFIG_FILE)
    logger.info(f"Created a configuration file at {CONFIG_FILE}.")

    if not settings.database.path.exists():
        from lendgraph.database.operations import create_new_sqlite_database

        create_new_sqlite_database(db_path=settings.database.path)

    return settings
