import os
from functools import lru_cache
from pathlib import Path

from src.rules.loader import DEFAULT_RULES_PATH, load_rules
from src.rules.models import MenuRules

DB_NAME = "menus.db"


class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("MENU_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / DB_NAME)
        self.rules_path = Path(os.environ.get("MENU_RULES_PATH", DEFAULT_RULES_PATH))
        self.migrations_dir = self.base_dir / "migrations"


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_rules() -> MenuRules:
    return load_rules(get_settings().rules_path)
