"""
SQLite menu registry (Link Registry implementation).

Tables: menus, menu_links, menu_link_overrides (see migrations/).
Every RegistryChanges batch runs in a single IMMEDIATE transaction; snapshots
are read inside one transaction so they never mix two commits.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from src.domain.entities import (
    ContentOrigin,
    LinkDefaults,
    LinkOverride,
    LinkTarget,
    Menu,
    MenuLink,
    PluginOrigin,
)
from src.ports.registry import LinkNotFoundError, RegistryChanges, RegistrySnapshot

logger = logging.getLogger(__name__)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def _bool_or_none(value: int | None) -> bool | None:
    return None if value is None else bool(value)


class SQLiteMenuRegistry:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode; transactions are opened explicitly below
        conn = sqlite3.connect(self.db_path, isolation_level=None, timeout=30)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _read(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN")
            yield conn
            conn.execute("COMMIT")
        finally:
            conn.close()

    @contextmanager
    def _write(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    # --- Links ---

    def get(self, link_id: str) -> MenuLink | None:
        with self._read() as conn:
            row = conn.execute("SELECT * FROM menu_links WHERE id = ?", (link_id,)).fetchone()
        return self._map_link(row) if row else None

    def list_by_menu(self, menu_name: str) -> list[MenuLink]:
        with self._read() as conn:
            rows = conn.execute(
                "SELECT * FROM menu_links WHERE menu_name = ?", (menu_name,)
            ).fetchall()
        return [self._map_link(row) for row in rows]

    def list_by_parent(self, link_id: str) -> list[MenuLink]:
        with self._read() as conn:
            rows = conn.execute(
                "SELECT * FROM menu_links WHERE parent_id = ?", (link_id,)
            ).fetchall()
        return [self._map_link(row) for row in rows]

    def list_all(self) -> list[MenuLink]:
        with self._read() as conn:
            rows = conn.execute("SELECT * FROM menu_links").fetchall()
        return [self._map_link(row) for row in rows]

    def count(self, menu_name: str | None = None) -> int:
        with self._read() as conn:
            if menu_name is None:
                row = conn.execute("SELECT COUNT(*) AS n FROM menu_links").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) AS n FROM menu_links WHERE menu_name = ?", (menu_name,)
                ).fetchone()
        return int(row["n"])

    def put(self, link: MenuLink) -> MenuLink:
        self.commit(RegistryChanges(save_links=[link]))
        return link

    def delete(self, link_id: str) -> None:
        with self._write() as conn:
            cursor = conn.execute("DELETE FROM menu_links WHERE id = ?", (link_id,))
            if cursor.rowcount == 0:
                raise LinkNotFoundError(link_id)

    # --- Overrides / menus ---

    def get_override(self, link_id: str) -> LinkOverride | None:
        with self._read() as conn:
            row = conn.execute(
                "SELECT * FROM menu_link_overrides WHERE link_id = ?", (link_id,)
            ).fetchone()
        return self._map_override(row) if row else None

    def get_menu(self, menu_id: str) -> Menu | None:
        with self._read() as conn:
            row = conn.execute("SELECT * FROM menus WHERE id = ?", (menu_id,)).fetchone()
        return self._map_menu(row) if row else None

    def list_menus(self) -> list[Menu]:
        with self._read() as conn:
            rows = conn.execute("SELECT * FROM menus").fetchall()
        return [self._map_menu(row) for row in rows]

    # --- Snapshot / batch ---

    def snapshot(self) -> RegistrySnapshot:
        with self._read() as conn:
            link_rows = conn.execute("SELECT * FROM menu_links").fetchall()
            override_rows = conn.execute("SELECT * FROM menu_link_overrides").fetchall()
            menu_rows = conn.execute("SELECT * FROM menus").fetchall()

        links = {row["id"]: self._map_link(row) for row in link_rows}
        overrides = {row["link_id"]: self._map_override(row) for row in override_rows}
        menus = {row["id"]: self._map_menu(row) for row in menu_rows}
        return RegistrySnapshot(links=links, overrides=overrides, menus=menus)

    def commit(self, changes: RegistryChanges) -> None:
        if changes.is_empty():
            return
        with self._write() as conn:
            for link_id in changes.delete_links:
                conn.execute("DELETE FROM menu_links WHERE id = ?", (link_id,))
            for link in changes.save_links:
                self._upsert_link(conn, link)
            for link_id in changes.delete_overrides:
                conn.execute("DELETE FROM menu_link_overrides WHERE link_id = ?", (link_id,))
            for override in changes.save_overrides:
                self._upsert_override(conn, override)
            for menu_id in changes.delete_menus:
                conn.execute("DELETE FROM menus WHERE id = ?", (menu_id,))
            for menu in changes.save_menus:
                self._upsert_menu(conn, menu)
        logger.debug(
            "Committed registry batch: %d saved, %d deleted links",
            len(changes.save_links),
            len(changes.delete_links),
        )

    # --- Row mapping ---

    def _upsert_link(self, conn: sqlite3.Connection, link: MenuLink) -> None:
        origin = link.origin
        provider = origin.provider if isinstance(origin, PluginOrigin) else None
        defaults_json = (
            origin.defaults.model_dump_json() if isinstance(origin, PluginOrigin) else None
        )
        revision_state = origin.revision_state if isinstance(origin, ContentOrigin) else None
        conn.execute(
            """
            INSERT INTO menu_links (
                id, menu_name, parent_id, weight, title, description, target_json,
                enabled, expanded, origin_kind, provider, defaults_json, revision_state
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                menu_name=excluded.menu_name,
                parent_id=excluded.parent_id,
                weight=excluded.weight,
                title=excluded.title,
                description=excluded.description,
                target_json=excluded.target_json,
                enabled=excluded.enabled,
                expanded=excluded.expanded,
                origin_kind=excluded.origin_kind,
                provider=excluded.provider,
                defaults_json=excluded.defaults_json,
                revision_state=excluded.revision_state
        """,
            (
                link.id,
                link.menu_name,
                link.parent_id,
                link.weight,
                link.title,
                link.description,
                link.target.model_dump_json(),
                int(link.enabled),
                int(link.expanded),
                origin.kind,
                provider,
                defaults_json,
                revision_state,
            ),
        )

    def _upsert_override(self, conn: sqlite3.Connection, override: LinkOverride) -> None:
        conn.execute(
            """
            INSERT INTO menu_link_overrides (
                link_id, weight, parent_id, parent_set, enabled, expanded, title, description
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(link_id) DO UPDATE SET
                weight=excluded.weight,
                parent_id=excluded.parent_id,
                parent_set=excluded.parent_set,
                enabled=excluded.enabled,
                expanded=excluded.expanded,
                title=excluded.title,
                description=excluded.description
        """,
            (
                override.link_id,
                override.weight,
                override.parent_id,
                int(override.parent_set),
                None if override.enabled is None else int(override.enabled),
                None if override.expanded is None else int(override.expanded),
                override.title,
                override.description,
            ),
        )

    def _upsert_menu(self, conn: sqlite3.Connection, menu: Menu) -> None:
        conn.execute(
            """
            INSERT INTO menus (id, label, description, locked) VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                label=excluded.label,
                description=excluded.description,
                locked=excluded.locked
        """,
            (menu.id, menu.label, menu.description, int(menu.locked)),
        )

    def _map_link(self, row: dict[str, Any]) -> MenuLink:
        origin: PluginOrigin | ContentOrigin
        if row["origin_kind"] == "plugin":
            origin = PluginOrigin(
                provider=row["provider"] or "",
                defaults=LinkDefaults.model_validate(json.loads(row["defaults_json"])),
            )
        else:
            origin = ContentOrigin(revision_state=row["revision_state"] or "default")

        return MenuLink(
            id=row["id"],
            menu_name=row["menu_name"],
            parent_id=row["parent_id"],
            weight=row["weight"],
            title=row["title"],
            description=row["description"],
            target=LinkTarget.model_validate(json.loads(row["target_json"])),
            enabled=bool(row["enabled"]),
            expanded=bool(row["expanded"]),
            origin=origin,
        )

    def _map_override(self, row: dict[str, Any]) -> LinkOverride:
        return LinkOverride(
            link_id=row["link_id"],
            weight=row["weight"],
            parent_id=row["parent_id"],
            parent_set=bool(row["parent_set"]),
            enabled=_bool_or_none(row["enabled"]),
            expanded=_bool_or_none(row["expanded"]),
            title=row["title"],
            description=row["description"],
        )

    def _map_menu(self, row: dict[str, Any]) -> Menu:
        return Menu(
            id=row["id"],
            label=row["label"],
            description=row["description"],
            locked=bool(row["locked"]),
        )
