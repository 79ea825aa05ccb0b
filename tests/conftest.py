from pathlib import Path

import pytest

from src.adapters.sqlite.menu_registry import SQLiteMenuRegistry
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.app_shell.context import MenuServiceContext
from src.rules.loader import load_rules
from src.rules.models import MenuRules

PROJECT_ROOT = Path(__file__).resolve().parent.parent
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"


@pytest.fixture
def rules() -> MenuRules:
    # Load REAL rules from project root
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "menus.db")


@pytest.fixture
def migrated_db(db_path) -> str:
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()
    return db_path


@pytest.fixture
def sqlite_registry(migrated_db) -> SQLiteMenuRegistry:
    return SQLiteMenuRegistry(migrated_db)


@pytest.fixture
def test_ctx(migrated_db, rules) -> MenuServiceContext:
    """
    Full MenuServiceContext backed by a temporary SQLite DB, system menus installed.
    """
    ctx = MenuServiceContext.create(migrated_db, rules)
    ctx.menus.ensure_system_menus()
    return ctx


@pytest.fixture
def memory_ctx(rules) -> MenuServiceContext:
    ctx = MenuServiceContext.in_memory(rules)
    ctx.menus.ensure_system_menus()
    return ctx
