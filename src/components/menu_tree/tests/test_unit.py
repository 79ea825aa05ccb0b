"""
Menu tree component unit tests.

Tests for link placement, structural validation and mutations.
"""

from __future__ import annotations

import pytest

from src.components.menu_tree import (
    ApplyOverviewInput,
    CountLinksInput,
    CreateLinkInput,
    DeleteLinkInput,
    GetLinkInput,
    ListTreeInput,
    MenuLinkService,
    MenuTreeConfig,
    MoveLinkInput,
    OverviewEntry,
    ParentOptionsInput,
    ResetLinkInput,
    SetRevisionStateInput,
    TargetResolution,
    ToggleLinkInput,
    UpdateLinkInput,
    run,
    run_apply_overview,
    run_count,
    run_create,
    run_delete,
    run_get,
    run_list_tree,
    run_move,
    run_parent_options,
    run_reset,
    run_set_revision_state,
    run_toggle,
    run_update,
)
from src.domain.entities import (
    LinkDefaults,
    LinkOverride,
    LinkTarget,
    Menu,
    MenuLink,
    PluginOrigin,
)
from src.ports.registry import LinkNotFoundError, RegistryChanges, RegistrySnapshot

# --- Mock Registry ---


class MockMenuRegistry:
    """In-memory registry for testing."""

    def __init__(self) -> None:
        self._links: dict[str, MenuLink] = {}
        self._overrides: dict[str, LinkOverride] = {}
        self._menus: dict[str, Menu] = {}
        self.commits = 0

    def get(self, link_id: str) -> MenuLink | None:
        return self._links.get(link_id)

    def list_by_menu(self, menu_name: str) -> list[MenuLink]:
        return [link for link in self._links.values() if link.menu_name == menu_name]

    def list_by_parent(self, link_id: str) -> list[MenuLink]:
        return [link for link in self._links.values() if link.parent_id == link_id]

    def list_all(self) -> list[MenuLink]:
        return list(self._links.values())

    def count(self, menu_name: str | None = None) -> int:
        if menu_name is None:
            return len(self._links)
        return len(self.list_by_menu(menu_name))

    def put(self, link: MenuLink) -> MenuLink:
        self._links[link.id] = link
        return link

    def delete(self, link_id: str) -> None:
        if link_id not in self._links:
            raise LinkNotFoundError(link_id)
        del self._links[link_id]

    def get_override(self, link_id: str) -> LinkOverride | None:
        return self._overrides.get(link_id)

    def get_menu(self, menu_id: str) -> Menu | None:
        return self._menus.get(menu_id)

    def list_menus(self) -> list[Menu]:
        return list(self._menus.values())

    def snapshot(self) -> RegistrySnapshot:
        return RegistrySnapshot(
            links=dict(self._links),
            overrides=dict(self._overrides),
            menus=dict(self._menus),
        )

    def commit(self, changes: RegistryChanges) -> None:
        self.commits += 1
        for link in changes.save_links:
            self._links[link.id] = link
        for link_id in changes.delete_links:
            self._links.pop(link_id, None)
        for override in changes.save_overrides:
            self._overrides[override.link_id] = override
        for link_id in changes.delete_overrides:
            self._overrides.pop(link_id, None)
        for menu in changes.save_menus:
            self._menus[menu.id] = menu
        for menu_id in changes.delete_menus:
            self._menus.pop(menu_id, None)


class MockResolver:
    """Resolves /node/{n}; /admin paths are inaccessible."""

    def resolve(self, path: str) -> TargetResolution:
        if path.startswith("/admin"):
            return TargetResolution(status="inaccessible")
        if path.startswith("/node/"):
            return TargetResolution(
                status="resolved",
                route_name="entity.node.canonical",
                route_parameters={"node": path.rsplit("/", 1)[-1]},
            )
        return TargetResolution(status="not_found")


class MockRevisions:
    def __init__(self) -> None:
        self.pending: set[str] = set()

    def is_pending_revision(self, link_id: str) -> bool:
        return link_id in self.pending


@pytest.fixture
def registry() -> MockMenuRegistry:
    reg = MockMenuRegistry()
    reg.commit(
        RegistryChanges(
            save_menus=[
                Menu(id="main", label="Main navigation", locked=True),
                Menu(id="footer", label="Footer"),
            ]
        )
    )
    return reg


@pytest.fixture
def service(registry: MockMenuRegistry) -> MenuLinkService:
    return MenuLinkService(registry=registry)


def add(
    service: MenuLinkService,
    title: str,
    parent_id: str | None = None,
    weight: int = 0,
    menu_name: str = "main",
    **kwargs,
) -> MenuLink:
    link, errors = service.create(
        menu_name=menu_name,
        title=title,
        target="/node/1",
        parent_id=parent_id,
        weight=weight,
        **kwargs,
    )
    assert errors == []
    assert link is not None
    return link


def plugin_link(
    link_id: str = "system.admin",
    menu_name: str = "main",
    parent_id: str | None = None,
    weight: int = 0,
    title: str = "Administration",
) -> MenuLink:
    defaults = LinkDefaults(parent_id=parent_id, weight=weight, title=title)
    return MenuLink(
        id=link_id,
        menu_name=menu_name,
        parent_id=parent_id,
        weight=weight,
        title=title,
        target=LinkTarget(kind="route", uri="route:system.admin", route_name="system.admin"),
        origin=PluginOrigin(provider="system", defaults=defaults),
    )


def codes(errors) -> list[str]:
    return [e.code for e in errors]


# --- Creation Tests ---


class TestCreateLink:
    """Test content link creation."""

    def test_create_link_success(self, service: MenuLinkService) -> None:
        """Creates root link with a generated id."""
        result = run_create(
            CreateLinkInput(menu_name="main", title="About", target="/node/1"),
            service,
        )

        assert result.success is True
        assert result.link is not None
        assert result.link.id.startswith("menu_link_content:")
        assert result.link.parent_id is None
        assert result.link.origin.kind == "content"
        assert result.errors == []

    def test_create_child(self, service: MenuLinkService) -> None:
        parent = add(service, "Parent")
        child = add(service, "Child", parent_id=parent.id)

        assert child.parent_id == parent.id
        assert service.depth(child.id) == 1

    def test_create_unknown_menu(self, service: MenuLinkService) -> None:
        result = run_create(
            CreateLinkInput(menu_name="nope", title="About", target="/node/1"),
            service,
        )

        assert result.success is False
        assert codes(result.errors) == ["menu_not_found"]

    def test_create_parent_not_found(self, service: MenuLinkService) -> None:
        result = run_create(
            CreateLinkInput(menu_name="main", title="x", target="/node/1", parent_id="missing"),
            service,
        )

        assert codes(result.errors) == ["parent_not_found"]

    def test_create_cross_menu_parent(self, service: MenuLinkService) -> None:
        footer_link = add(service, "Contact", menu_name="footer")
        result = run_create(
            CreateLinkInput(
                menu_name="main", title="x", target="/node/1", parent_id=footer_link.id
            ),
            service,
        )

        assert codes(result.errors) == ["cross_menu_parent_mismatch"]

    def test_create_missing_title(self, service: MenuLinkService) -> None:
        result = run_create(CreateLinkInput(menu_name="main", title="  ", target="/"), service)

        assert result.success is False
        assert codes(result.errors) == ["title_required"]

    def test_create_title_too_long(self, registry: MockMenuRegistry) -> None:
        service = MenuLinkService(registry=registry, config=MenuTreeConfig(title_max=10))
        result = run_create(
            CreateLinkInput(menu_name="main", title="x" * 11, target="/"), service
        )

        assert codes(result.errors) == ["title_too_long"]

    def test_create_unsafe_target(self, service: MenuLinkService) -> None:
        result = run_create(
            CreateLinkInput(menu_name="main", title="x", target="javascript:alert(1)"),
            service,
        )

        assert codes(result.errors) == ["invalid_target"]

    def test_create_relative_path_rejected(self, service: MenuLinkService) -> None:
        result = run_create(CreateLinkInput(menu_name="main", title="x", target="node/1"), service)

        assert codes(result.errors) == ["invalid_target"]
        assert "should start with" in result.errors[0].message

    def test_create_inaccessible_target(self, registry: MockMenuRegistry) -> None:
        service = MenuLinkService(registry=registry, resolver=MockResolver())
        result = run_create(
            CreateLinkInput(menu_name="main", title="x", target="/admin/config"), service
        )

        assert codes(result.errors) == ["inaccessible"]
        assert registry.count() == 0

    def test_create_resolves_route(self, registry: MockMenuRegistry) -> None:
        service = MenuLinkService(registry=registry, resolver=MockResolver())
        result = run_create(
            CreateLinkInput(menu_name="main", title="x", target="internal:/node/7?a=b#top"),
            service,
        )

        assert result.success is True
        target = result.link.target
        assert target.route_name == "entity.node.canonical"
        assert target.route_parameters == {"node": "7"}
        assert target.query == "a=b"
        assert target.fragment == "top"

    def test_create_front_page(self, service: MenuLinkService) -> None:
        link = service.create(menu_name="main", title="Home", target="<front>")[0]

        assert link is not None
        assert link.target.kind == "front"

    def test_create_uses_id_factory(self, registry: MockMenuRegistry) -> None:
        service = MenuLinkService(registry=registry, id_factory=lambda: "fixed")
        add(service, "One")
        link, errors = service.create(menu_name="main", title="Two", target="/")

        assert link is None
        assert codes(errors) == ["id_collision"]


# --- Depth and Cycle Tests ---


class TestStructure:
    """Test depth limit and cycle detection."""

    def test_depth_limit(self, service: MenuLinkService) -> None:
        """Nine levels fit; the tenth chained link is rejected."""
        parent_id = None
        for level in range(9):
            parent_id = add(service, f"Level {level}", parent_id=parent_id).id

        result = run_create(
            CreateLinkInput(menu_name="main", title="Too deep", target="/", parent_id=parent_id),
            service,
        )

        assert codes(result.errors) == ["depth_exceeded"]
        assert service.count_links("main") == 9

    def test_move_under_descendant_is_cycle(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        b = add(service, "B", parent_id=a.id)
        c = add(service, "C", parent_id=b.id)

        result = run_move(MoveLinkInput(link_id=a.id, parent_id=c.id), service)

        assert codes(result.errors) == ["cycle_detected"]
        assert service.get(a.id).parent_id is None

    def test_move_under_itself_is_cycle(self, service: MenuLinkService) -> None:
        a = add(service, "A")

        result = run_move(MoveLinkInput(link_id=a.id, parent_id=a.id), service)

        assert codes(result.errors) == ["cycle_detected"]

    def test_move_counts_subtree_height(self, service: MenuLinkService) -> None:
        """A subtree is rejected when its deepest descendant would overflow."""
        deep = None
        for level in range(7):
            deep = add(service, f"D{level}", parent_id=deep).id
        top = add(service, "Top")
        mid = add(service, "Mid", parent_id=top.id)
        add(service, "Leaf", parent_id=mid.id)

        # top would land at depth 7, pushing its leaf to depth 9
        result = run_move(MoveLinkInput(link_id=top.id, parent_id=deep), service)
        assert codes(result.errors) == ["depth_exceeded"]

        one_up = service.index().ancestors(deep)[0]
        assert run_move(MoveLinkInput(link_id=top.id, parent_id=one_up), service).success
        assert service.depth(service.subtree(top.id)[-1]) == 8

    def test_move_keeps_subtree(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        b = add(service, "B", parent_id=a.id)
        add(service, "C2", parent_id=b.id, weight=2)
        add(service, "C1", parent_id=b.id, weight=1)
        target = add(service, "Target")
        before = service.subtree(b.id)

        result = run_move(MoveLinkInput(link_id=b.id, parent_id=target.id), service)

        assert result.success is True
        assert service.subtree(b.id) == before
        assert service.depth(before[0]) == 2

    def test_move_to_other_menu_takes_children(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        b = add(service, "B", parent_id=a.id)
        c = add(service, "C", parent_id=b.id)

        result = run_move(MoveLinkInput(link_id=b.id, parent_id=None, menu_name="footer"), service)

        assert result.success is True
        assert service.get(b.id).menu_name == "footer"
        assert service.get(c.id).menu_name == "footer"
        assert service.get(c.id).parent_id == b.id
        assert service.count_links("footer") == 2

    def test_move_to_unknown_parent(self, service: MenuLinkService) -> None:
        a = add(service, "A")

        result = run_move(MoveLinkInput(link_id=a.id, parent_id="ghost"), service)

        assert codes(result.errors) == ["parent_not_found"]

    def test_move_to_unknown_menu(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        a = add(service, "A")
        b = add(service, "B", parent_id=a.id)
        commits = registry.commits

        result = run_move(MoveLinkInput(link_id=a.id, parent_id=None, menu_name="nowhere"), service)

        assert codes(result.errors) == ["menu_not_found"]
        assert registry.commits == commits
        assert service.get(a.id).menu_name == "main"
        assert service.get(b.id).menu_name == "main"

    def test_move_across_menus_keeps_plugin_links_home(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        a = add(service, "A")
        registry.put(plugin_link(parent_id=a.id))

        result = run_move(MoveLinkInput(link_id=a.id, parent_id=None, menu_name="footer"), service)

        assert codes(result.errors) == ["cannot_modify_protected"]
        assert "system.admin" in result.errors[0].message
        assert service.get(a.id).menu_name == "main"
        assert service.get("system.admin").menu_name == "main"

    def test_move_within_menu_with_plugin_descendant(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        a = add(service, "A")
        b = add(service, "B")
        registry.put(plugin_link(parent_id=a.id))

        result = run_move(MoveLinkInput(link_id=a.id, parent_id=b.id), service)

        assert result.success is True
        assert service.get("system.admin").parent_id == a.id


# --- Pending Revision Tests ---


class TestPendingRevisions:
    """Test the structural freeze of pending content links."""

    def test_pending_link_cannot_move(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        b = add(service, "B")
        run_set_revision_state(SetRevisionStateInput(link_id=b.id, revision_state="pending"), service)

        result = run_move(MoveLinkInput(link_id=b.id, parent_id=a.id), service)

        assert codes(result.errors) == ["pending_revision_locked"]

    def test_pending_link_weight_locked(self, service: MenuLinkService) -> None:
        b = add(service, "B")
        service.set_revision_state(b.id, "pending")

        result = run_update(UpdateLinkInput(link_id=b.id, updates={"weight": 3}), service)

        assert codes(result.errors) == ["pending_revision_locked"]

    def test_pending_link_title_editable(self, service: MenuLinkService) -> None:
        b = add(service, "B")
        service.set_revision_state(b.id, "pending")

        result = run_update(
            UpdateLinkInput(link_id=b.id, updates={"title": "Renamed", "enabled": False}),
            service,
        )

        assert result.success is True
        assert result.link.title == "Renamed"
        assert result.link.enabled is False

    def test_pending_link_cannot_be_parent(self, service: MenuLinkService) -> None:
        b = add(service, "B")
        service.set_revision_state(b.id, "pending")

        link, errors = service.create(menu_name="main", title="x", target="/", parent_id=b.id)

        assert link is None
        assert codes(errors) == ["pending_revision_parent"]
        assert service.can_add_child(b.id) is False

    def test_revision_port_wins(self, registry: MockMenuRegistry) -> None:
        revisions = MockRevisions()
        service = MenuLinkService(registry=registry, revisions=revisions)
        a = add(service, "A")
        b = add(service, "B")
        revisions.pending.add(b.id)

        assert codes(service.move(b.id, a.id)[1]) == ["pending_revision_locked"]

        revisions.pending.clear()
        assert service.move(b.id, a.id)[1] == []

    def test_plugin_link_has_no_revisions(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        registry.put(plugin_link())

        result = run_set_revision_state(
            SetRevisionStateInput(link_id="system.admin", revision_state="pending"), service
        )

        assert codes(result.errors) == ["cannot_modify_protected"]


# --- Update Tests ---


class TestUpdateLink:
    """Test attribute updates."""

    def test_update_not_found(self, service: MenuLinkService) -> None:
        result = run_update(UpdateLinkInput(link_id="missing", updates={"title": "x"}), service)

        assert codes(result.errors) == ["not_found"]

    def test_update_unknown_field(self, service: MenuLinkService) -> None:
        a = add(service, "A")

        result = run_update(UpdateLinkInput(link_id=a.id, updates={"origin": None}), service)

        assert codes(result.errors) == ["unknown_field"]

    def test_update_target(self, service: MenuLinkService) -> None:
        a = add(service, "A")

        result = run_update(
            UpdateLinkInput(link_id=a.id, updates={"target": "https://example.com/x"}), service
        )

        assert result.success is True
        assert result.link.target.kind == "external"
        assert result.link.target.url == "https://example.com/x"

    def test_toggle(self, service: MenuLinkService) -> None:
        a = add(service, "A")

        result = run_toggle(ToggleLinkInput(link_id=a.id, enabled=False), service)

        assert result.success is True
        assert service.get(a.id).enabled is False

    def test_toggle_not_found(self, service: MenuLinkService) -> None:
        result = run_toggle(ToggleLinkInput(link_id="missing", enabled=False), service)

        assert codes(result.errors) == ["not_found"]

    def test_weights_kept_as_given(self, service: MenuLinkService) -> None:
        parent = add(service, "Parent")
        last = None
        for weight in range(-50, 52):
            last = add(service, f"W{weight}", parent_id=parent.id, weight=weight)

        assert last.weight == 51
        assert service.get(last.id).weight == 51
        children = service.index().children(parent.id)
        assert [c.weight for c in children] == list(range(-50, 52))

    def test_update_rejects_wrong_type(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        a = add(service, "A", weight=4)
        commits = registry.commits

        result = run_update(UpdateLinkInput(link_id=a.id, updates={"weight": "heavy"}), service)

        assert codes(result.errors) == ["invalid_value"]
        assert result.errors[0].field == "weight"
        assert registry.commits == commits
        assert service.get(a.id).weight == 4
        items, errors = service.list_tree("main")
        assert errors == []
        assert [i.link.id for i in items] == [a.id]

    @pytest.mark.parametrize("updates", [{"title": 7}, {"description": ["x"]}, {"enabled": "maybe"}])
    def test_update_rejects_bad_values(self, service: MenuLinkService, updates) -> None:
        a = add(service, "A")

        result = run_update(UpdateLinkInput(link_id=a.id, updates=updates), service)

        assert codes(result.errors) == ["invalid_value"]
        assert service.get(a.id) == a

    def test_create_rejects_wrong_type(self, service: MenuLinkService) -> None:
        link, errors = service.create(menu_name="main", title="A", target="/", weight="heavy")

        assert link is None
        assert codes(errors) == ["invalid_value"]
        assert service.count_links() == 0

    def test_revision_state_must_be_known(self, service: MenuLinkService) -> None:
        a = add(service, "A")

        result = run_set_revision_state(
            SetRevisionStateInput(link_id=a.id, revision_state="draft"), service
        )

        assert codes(result.errors) == ["invalid_value"]
        assert service.get(a.id).is_pending is False


# --- Plugin Link Tests ---


class TestPluginLinks:
    """Test override and reset of plugin links."""

    def test_update_creates_override(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        registry.put(plugin_link())

        result = run_update(
            UpdateLinkInput(link_id="system.admin", updates={"weight": 5, "title": "Admin"}),
            service,
        )

        assert result.success is True
        override = registry.get_override("system.admin")
        assert override is not None
        assert override.weight == 5
        assert override.title == "Admin"
        assert override.parent_set is False

    def test_update_back_to_default_drops_override(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        registry.put(plugin_link())
        service.update("system.admin", {"weight": 5})

        service.update("system.admin", {"weight": 0})

        assert registry.get_override("system.admin") is None

    def test_plugin_target_fixed(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        registry.put(plugin_link())

        result = run_update(
            UpdateLinkInput(link_id="system.admin", updates={"target": "/node/2"}), service
        )

        assert codes(result.errors) == ["cannot_modify_protected"]

    def test_plugin_menu_fixed(self, registry: MockMenuRegistry, service: MenuLinkService) -> None:
        registry.put(plugin_link())

        result = run_move(
            MoveLinkInput(link_id="system.admin", parent_id=None, menu_name="footer"), service
        )

        assert codes(result.errors) == ["cannot_modify_protected"]

    def test_plugin_title_when_disallowed(self, registry: MockMenuRegistry) -> None:
        service = MenuLinkService(
            registry=registry, config=MenuTreeConfig(allow_plugin_title=False)
        )
        registry.put(plugin_link())

        _, errors = service.update("system.admin", {"title": "Mine"})

        assert codes(errors) == ["cannot_modify_protected"]

    def test_reset_restores_defaults(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        registry.put(plugin_link())
        parent = add(service, "Parent")
        service.update("system.admin", {"weight": 9, "parent_id": parent.id, "enabled": False})
        assert registry.get_override("system.admin").parent_set is True

        result = run_reset(ResetLinkInput(link_id="system.admin"), service)

        assert result.success is True
        link = service.get("system.admin")
        assert link.weight == 0
        assert link.parent_id is None
        assert link.enabled is True
        assert registry.get_override("system.admin") is None

    def test_reset_content_link(self, service: MenuLinkService) -> None:
        a = add(service, "A")

        result = run_reset(ResetLinkInput(link_id=a.id), service)

        assert codes(result.errors) == ["not_resettable"]

    def test_delete_plugin_link(self, registry: MockMenuRegistry, service: MenuLinkService) -> None:
        registry.put(plugin_link())

        result = run_delete(DeleteLinkInput(link_id="system.admin"), service)

        assert result.success is False
        assert codes(result.errors) == ["cannot_delete_protected"]
        assert service.get("system.admin") is not None


# --- Delete Tests ---


class TestDeleteLink:
    """Test cascading deletion."""

    def test_delete_cascades(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        b = add(service, "B", parent_id=a.id)
        add(service, "C", parent_id=b.id)
        keep = add(service, "Keep")

        result = run_delete(DeleteLinkInput(link_id=a.id), service)

        assert result.success is True
        assert service.count_links("main") == 1
        assert service.get(keep.id) is not None

    def test_delete_not_found(self, service: MenuLinkService) -> None:
        result = run_delete(DeleteLinkInput(link_id="missing"), service)

        assert result.success is False
        assert codes(result.errors) == ["not_found"]

    def test_delete_blocked_by_plugin_descendant(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        a = add(service, "A")
        registry.put(plugin_link(parent_id=a.id))

        result = run_delete(DeleteLinkInput(link_id=a.id), service)

        assert codes(result.errors) == ["cannot_delete_protected"]
        assert service.get(a.id) is not None


# --- Read Tests ---


class TestReads:
    """Test get, count, listing and parent options."""

    def test_get(self, service: MenuLinkService) -> None:
        a = add(service, "A")

        assert run_get(GetLinkInput(link_id=a.id), service).link == a
        assert codes(run_get(GetLinkInput(link_id="x"), service).errors) == ["not_found"]

    def test_count(self, service: MenuLinkService) -> None:
        add(service, "A")
        add(service, "B", menu_name="footer")

        assert run_count(CountLinksInput(), service).count == 2
        assert run_count(CountLinksInput(menu_name="footer"), service).count == 1

    def test_list_tree_order(self, service: MenuLinkService) -> None:
        add(service, "Beta", weight=0)
        add(service, "Alpha", weight=0)
        add(service, "Heavy", weight=-5)

        result = run_list_tree(ListTreeInput(menu_name="main"), service)

        assert [i.link.title for i in result.items] == ["Heavy", "Alpha", "Beta"]

    def test_list_tree_collapsed_children(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        b = add(service, "B", parent_id=a.id)

        collapsed = run_list_tree(ListTreeInput(menu_name="main"), service)
        expanded = run_list_tree(ListTreeInput(menu_name="main", expand_all=True), service)
        trail = run_list_tree(ListTreeInput(menu_name="main", active_trail=(a.id,)), service)

        assert [i.link.id for i in collapsed.items] == [a.id]
        assert [(i.link.id, i.depth) for i in expanded.items] == [(a.id, 0), (b.id, 1)]
        assert trail.total == 2

    def test_list_tree_max_depth(self, service: MenuLinkService) -> None:
        a = add(service, "A", expanded=True)
        add(service, "B", parent_id=a.id)

        result = run_list_tree(ListTreeInput(menu_name="main", max_depth=1), service)

        assert [i.link.id for i in result.items] == [a.id]

    def test_list_tree_only_enabled(self, service: MenuLinkService) -> None:
        a = add(service, "A", enabled=False)
        add(service, "B", parent_id=a.id)
        c = add(service, "C")

        result = run_list_tree(
            ListTreeInput(menu_name="main", expand_all=True, only_enabled=True), service
        )

        assert [i.link.id for i in result.items] == [c.id]

    def test_list_tree_unknown_menu(self, service: MenuLinkService) -> None:
        result = run_list_tree(ListTreeInput(menu_name="nope"), service)

        assert result.success is False
        assert codes(result.errors) == ["menu_not_found"]

    def test_parent_options(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        b = add(service, "B", parent_id=a.id)
        c = add(service, "C")
        service.set_revision_state(c.id, "pending")
        d = add(service, "D")

        result = run_parent_options(ParentOptionsInput(menu_name="main", link_id=a.id), service)

        ids = [i.link.id for i in result.items]
        assert a.id not in ids
        assert b.id not in ids
        assert c.id not in ids
        assert ids == [d.id]


# --- Overview Tests ---


class TestApplyOverview:
    """Test bulk saves of one menu."""

    def test_overview_saves_all(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        b = add(service, "B")

        result = run_apply_overview(
            ApplyOverviewInput(
                menu_name="main",
                entries=(
                    OverviewEntry(link_id=a.id, weight=3, parent_id=None, enabled=True),
                    OverviewEntry(link_id=b.id, weight=0, parent_id=a.id, enabled=False),
                ),
            ),
            service,
        )

        assert result.success is True
        assert service.get(a.id).weight == 3
        assert service.get(b.id).parent_id == a.id
        assert service.get(b.id).enabled is False

    def test_overview_is_all_or_nothing(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        a = add(service, "A")
        b = add(service, "B", parent_id=a.id)
        commits = registry.commits

        result = run_apply_overview(
            ApplyOverviewInput(
                menu_name="main",
                entries=(
                    OverviewEntry(link_id=b.id, weight=7, parent_id=a.id, enabled=True),
                    OverviewEntry(link_id=a.id, weight=0, parent_id=b.id, enabled=True),
                ),
            ),
            service,
        )

        assert codes(result.errors) == ["cycle_detected"]
        assert registry.commits == commits
        assert service.get(b.id).weight == 0

    def test_overview_pending_row(self, service: MenuLinkService) -> None:
        a = add(service, "A")
        service.set_revision_state(a.id, "pending")

        unchanged = service.apply_overview(
            "main", [OverviewEntry(link_id=a.id, weight=0, parent_id=None, enabled=True)]
        )
        changed = service.apply_overview(
            "main", [OverviewEntry(link_id=a.id, weight=0, parent_id=None, enabled=False)]
        )

        assert unchanged[1] == []
        assert codes(changed[1]) == ["pending_revision_locked"]

    def test_overview_rejects_other_menu(self, service: MenuLinkService) -> None:
        f = add(service, "F", menu_name="footer")

        _, errors = service.apply_overview(
            "main", [OverviewEntry(link_id=f.id, weight=0, parent_id=None, enabled=True)]
        )

        assert codes(errors) == ["not_found"]

    def test_overview_rejects_wrong_type(
        self, registry: MockMenuRegistry, service: MenuLinkService
    ) -> None:
        a = add(service, "A")
        b = add(service, "B")
        commits = registry.commits

        _, errors = service.apply_overview(
            "main",
            [
                OverviewEntry(link_id=a.id, weight=5, parent_id=None, enabled=True),
                OverviewEntry(link_id=b.id, weight="last", parent_id=None, enabled=True),
            ],
        )

        assert codes(errors) == ["invalid_value"]
        assert registry.commits == commits
        assert service.get(a.id).weight == 0


# --- Dispatcher ---


def test_run_dispatches(service: MenuLinkService) -> None:
    result = run(CreateLinkInput(menu_name="main", title="A", target="/"), service=service)

    assert result.success is True


def test_run_unknown_input(service: MenuLinkService) -> None:
    with pytest.raises(ValueError):
        run(object(), service=service)  # type: ignore[arg-type]
