"""
TreeIndex - derived hierarchy over a registry snapshot.

Functional Core - pure computation, no I/O.

Depth of a link is its number of ancestors (roots are 0). A menu's max_depth
counts levels, so a link is legal while depth < max_depth, and a subtree of
height h may only sit where depth + h < max_depth.

Key behaviors:
- Siblings ordered by (weight, title), id as final tie-break
- Pending content links can never be parents
- Cycles are detected before a move is committed
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Callable, Iterable

from src.domain.entities import MenuLink

from .models import MenuLinkError, TreeItem


class TreeCycleError(ValueError):
    """Raised when a proposed parent is the link itself or one of its descendants."""

    def __init__(self, link_id: str, parent_id: str) -> None:
        self.link_id = link_id
        self.parent_id = parent_id
        super().__init__(f"Link {parent_id} is {link_id} or one of its descendants")


def _sibling_key(link: MenuLink) -> tuple[int, str, str]:
    return (link.weight, link.title, link.id)


class TreeIndex:
    """Ordered children and ancestor chains for a set of links."""

    def __init__(
        self,
        links: Iterable[MenuLink],
        max_depth: int,
        is_pending: Callable[[MenuLink], bool] | None = None,
    ) -> None:
        self._max_depth = max_depth
        self._is_pending = is_pending or (lambda link: link.is_pending)
        self._links: dict[str, MenuLink] = {link.id: link for link in links}
        self._children: dict[str, list[str]] = defaultdict(list)
        self._roots: dict[str, list[str]] = defaultdict(list)

        for link in self._links.values():
            parent = self._links.get(link.parent_id) if link.parent_id else None
            if parent is None:
                # Missing parents are treated as roots so nothing becomes unreachable
                self._roots[link.menu_name].append(link.id)
            else:
                self._children[parent.id].append(link.id)

        for ids in (*self._children.values(), *self._roots.values()):
            ids.sort(key=lambda i: _sibling_key(self._links[i]))

    # --- Lookups ---

    def max_depth(self) -> int:
        return self._max_depth

    def get(self, link_id: str) -> MenuLink | None:
        return self._links.get(link_id)

    def __contains__(self, link_id: object) -> bool:
        return link_id in self._links

    def is_pending(self, link: MenuLink) -> bool:
        return self._is_pending(link)

    def children(self, link_id: str) -> list[MenuLink]:
        return [self._links[i] for i in self._children.get(link_id, [])]

    def roots(self, menu_name: str) -> list[MenuLink]:
        return [self._links[i] for i in self._roots.get(menu_name, [])]

    def ancestors(self, link_id: str) -> list[str]:
        """Ancestor ids, nearest parent first."""
        chain: list[str] = []
        seen = {link_id}
        current = self._links.get(link_id)
        while current is not None and current.parent_id:
            parent_id = current.parent_id
            if parent_id not in self._links:
                break
            if parent_id in seen:
                raise TreeCycleError(link_id, parent_id)
            seen.add(parent_id)
            chain.append(parent_id)
            current = self._links[parent_id]
        return chain

    def depth(self, link_id: str) -> int:
        return len(self.ancestors(link_id))

    def compute_depth(self, link_id: str | None, proposed_parent_id: str | None) -> int:
        """
        Depth link_id would have under proposed_parent_id.

        Raises:
            TreeCycleError: if the proposed parent is the link or a descendant.
        """
        if not proposed_parent_id:
            return 0
        chain = [proposed_parent_id, *self.ancestors(proposed_parent_id)]
        if link_id is not None and link_id in chain:
            raise TreeCycleError(link_id, proposed_parent_id)
        return len(chain)

    def subtree(self, link_id: str) -> list[str]:
        """Descendant ids, breadth-first, ordered by (depth, weight, title)."""
        found: list[tuple[int, str]] = []
        seen = {link_id}
        queue = deque((child, 1) for child in self._children.get(link_id, []))
        while queue:
            current, level = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            found.append((level, current))
            queue.extend((child, level + 1) for child in self._children.get(current, []))

        found.sort(key=lambda item: (item[0], *_sibling_key(self._links[item[1]])))
        return [descendant for _, descendant in found]

    def height(self, link_id: str | None) -> int:
        """Levels below link_id; 0 for a leaf or a link not yet created."""
        if link_id is None or link_id not in self._links:
            return 0
        best = 0
        stack = [(child, 1) for child in self._children.get(link_id, [])]
        while stack:
            current, level = stack.pop()
            best = max(best, level)
            stack.extend((child, level + 1) for child in self._children.get(current, []))
        return best

    # --- Validation ---

    def validate_move(
        self,
        link_id: str | None,
        proposed_parent_id: str | None,
        proposed_menu_name: str,
    ) -> list[MenuLinkError]:
        """
        Check that link_id (None for a new link) may sit under proposed_parent_id
        in proposed_menu_name, carrying its whole subtree along.
        """
        if proposed_parent_id:
            parent = self._links.get(proposed_parent_id)
            if parent is None:
                return [
                    MenuLinkError(
                        code="parent_not_found",
                        message=f"Parent link {proposed_parent_id} not found",
                        field="parent_id",
                    )
                ]
            if parent.menu_name != proposed_menu_name:
                return [
                    MenuLinkError(
                        code="cross_menu_parent_mismatch",
                        message=(
                            f"Parent link {proposed_parent_id} belongs to menu "
                            f"'{parent.menu_name}', not '{proposed_menu_name}'"
                        ),
                        field="parent_id",
                    )
                ]
            if self._is_pending(parent):
                return [
                    MenuLinkError(
                        code="pending_revision_parent",
                        message=(
                            f"Link {proposed_parent_id} has a pending revision "
                            "and cannot be used as a parent"
                        ),
                        field="parent_id",
                    )
                ]

        try:
            new_depth = self.compute_depth(link_id, proposed_parent_id)
        except TreeCycleError as e:
            return [
                MenuLinkError(
                    code="cycle_detected",
                    message=str(e),
                    field="parent_id",
                )
            ]

        if new_depth + self.height(link_id) >= self._max_depth:
            return [
                MenuLinkError(
                    code="depth_exceeded",
                    message=(
                        f"The link or its children would exceed the maximum depth "
                        f"of {self._max_depth}"
                    ),
                    field="parent_id",
                )
            ]

        return []

    def can_add_child(self, link_id: str) -> bool:
        link = self._links.get(link_id)
        if link is None or self._is_pending(link):
            return False
        return self.depth(link_id) + 1 < self._max_depth

    # --- Materialization ---

    def walk(
        self,
        menu_name: str,
        *,
        max_depth: int | None = None,
        expand_all: bool = False,
        active_trail: Iterable[str] = (),
        only_enabled: bool = False,
    ) -> list[TreeItem]:
        """
        Pre-order listing of a menu.

        Children are shown when their parent is expanded, in the active trail,
        or expand_all is set. max_depth limits the number of levels returned.
        """
        trail = set(active_trail)
        items: list[TreeItem] = []

        def visit(link: MenuLink, depth: int) -> None:
            if only_enabled and not link.enabled:
                return
            items.append(TreeItem(link=link, depth=depth))
            if max_depth is not None and depth + 1 >= max_depth:
                return
            if expand_all or link.expanded or link.id in trail:
                for child in self.children(link.id):
                    visit(child, depth + 1)

        for root in self.roots(menu_name):
            visit(root, 0)
        return items

    def parent_options(self, menu_name: str, link_id: str | None = None) -> list[TreeItem]:
        """Links of menu_name that may parent link_id (or a new link)."""
        excluded = set()
        if link_id is not None:
            excluded = {link_id, *self.subtree(link_id)}
        room = self.height(link_id)

        return [
            item
            for item in self.walk(menu_name, expand_all=True)
            if item.link.id not in excluded
            and not self._is_pending(item.link)
            and item.depth + 1 + room < self._max_depth
        ]

    def pending_links(self, menu_name: str) -> list[MenuLink]:
        return [
            link
            for link in self._links.values()
            if link.menu_name == menu_name and self._is_pending(link)
        ]
