import argparse
import logging
import sys
from pathlib import Path

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.app_shell.config import get_rules, get_settings
from src.app_shell.context import MenuServiceContext
from src.components.menu_rebuild import (
    DefinitionError,
    RebuildInput,
    load_definitions,
    run_rebuild,
)
from src.components.menu_tree import CountLinksInput, ListTreeInput, run_count, run_list_tree
from src.components.menus import ListMenusInput, run_list

logger = logging.getLogger("cli")


def get_context() -> MenuServiceContext:
    settings = get_settings()
    try:
        rules = get_rules()
    except (FileNotFoundError, ValueError) as e:
        logger.error("Cannot load rules: %s", e)
        sys.exit(1)

    return MenuServiceContext.create(settings.db_path, rules)


def handle_migrate(ctx: MenuServiceContext, args: argparse.Namespace) -> None:
    settings = get_settings()
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    installed = ctx.menus.ensure_system_menus()
    print(f"Applied {len(applied)} migration(s); installed {len(installed)} system menu(s).")


def handle_rebuild(ctx: MenuServiceContext, args: argparse.Namespace) -> None:
    try:
        definitions = load_definitions([Path(p) for p in args.paths])
    except (FileNotFoundError, DefinitionError) as e:
        logger.error("%s", e)
        sys.exit(1)

    result = run_rebuild(RebuildInput(definitions=tuple(definitions)), ctx.rebuild)
    if not result.success:
        for error in result.errors:
            print(f"{error.code}: {error.message}", file=sys.stderr)
        sys.exit(1)

    summary = result.summary
    assert summary is not None
    print(
        f"added={summary.added} removed={summary.removed} "
        f"updated={summary.updated} unchanged={summary.unchanged}"
    )


def handle_count(ctx: MenuServiceContext, args: argparse.Namespace) -> None:
    print(run_count(CountLinksInput(menu_name=args.menu), ctx.links).count)


def handle_tree(ctx: MenuServiceContext, args: argparse.Namespace) -> None:
    result = run_list_tree(
        ListTreeInput(
            menu_name=args.menu,
            max_depth=args.depth,
            expand_all=True,
            only_enabled=not args.all,
        ),
        ctx.links,
    )
    if not result.success:
        for error in result.errors:
            print(f"{error.code}: {error.message}", file=sys.stderr)
        sys.exit(1)

    for item in result.items:
        flag = "" if item.link.enabled else " (disabled)"
        print(f"{'  ' * item.depth}{item.link.title} [{item.link.id}] w={item.link.weight}{flag}")


def handle_menus(ctx: MenuServiceContext, args: argparse.Namespace) -> None:
    result = run_list(ListMenusInput(limit=args.limit, offset=args.offset), ctx.menus)
    for menu in result.menus:
        lock = " (system)" if menu.locked else ""
        print(f"{menu.id}\t{menu.label}{lock}")
    print(f"{len(result.menus)} of {result.total} menu(s)")


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Menu link tree CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply migrations and install system menus")

    # rebuild
    rebuild_parser = subparsers.add_parser("rebuild", help="Reconcile declared plugin links")
    rebuild_parser.add_argument(
        "paths", nargs="+", help="*.links.menu.yml files or directories holding them"
    )

    # count
    count_parser = subparsers.add_parser("count", help="Count links")
    count_parser.add_argument("--menu", help="Restrict the count to one menu")

    # tree
    tree_parser = subparsers.add_parser("tree", help="Print a menu tree")
    tree_parser.add_argument("menu", help="Menu id")
    tree_parser.add_argument("--depth", type=int, help="Number of levels to print")
    tree_parser.add_argument("--all", action="store_true", help="Include disabled links")

    # menus
    menus_parser = subparsers.add_parser("menus", help="List menus")
    menus_parser.add_argument("--limit", type=int, help="Page size")
    menus_parser.add_argument("--offset", type=int, default=0, help="Page offset")

    args = parser.parse_args()

    get_settings().data_dir.mkdir(parents=True, exist_ok=True)
    ctx = get_context()

    if args.command == "migrate":
        handle_migrate(ctx, args)
    elif args.command == "rebuild":
        handle_rebuild(ctx, args)
    elif args.command == "count":
        handle_count(ctx, args)
    elif args.command == "tree":
        handle_tree(ctx, args)
    elif args.command == "menus":
        handle_menus(ctx, args)


if __name__ == "__main__":
    main()
