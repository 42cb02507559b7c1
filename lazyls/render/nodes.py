"""Display-tree construction from flat pre-order entry lists."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..entry_model import EntryRecord
from ..style import StyleDecision, StyleResolver

SiblingOrder = Callable[[list[EntryRecord]], list[EntryRecord]]


@dataclass(frozen=True)
class DisplayNode:
    """One renderable entry with its resolved style and ordered children.

    ``expanded`` is true for directories whose contents were listed, even when
    that listing turned out empty.
    """

    entry: EntryRecord
    style: StyleDecision
    depth: int
    children: tuple[DisplayNode, ...] = ()
    expanded: bool = False

    def iter_preorder(self):
        yield self
        for child in self.children:
            yield from child.iter_preorder()


def build_display_nodes(
    entries: Sequence[EntryRecord],
    resolver: StyleResolver,
    *,
    order: SiblingOrder,
    expands: Callable[[EntryRecord], bool],
) -> list[DisplayNode]:
    """Group one root's pre-order ``entries`` by parent into display nodes.

    ``order`` sorts each sibling group; ``expands`` says whether a directory
    entry had its contents walked. Roots keep their given order.
    """
    by_parent: dict[str, list[EntryRecord]] = defaultdict(list)
    roots: list[EntryRecord] = []
    for entry in entries:
        if entry.depth == 0 or entry.parent is None:
            roots.append(entry)
        else:
            by_parent[entry.parent].append(entry)

    def build(entry: EntryRecord) -> DisplayNode:
        expanded = not entry.is_marker and entry.is_dir and expands(entry)
        children: tuple[DisplayNode, ...] = ()
        if expanded:
            children = tuple(build(child) for child in order(by_parent.get(entry.path, [])))
        return DisplayNode(
            entry=entry,
            style=resolver.resolve(entry),
            depth=entry.depth,
            children=children,
            expanded=expanded,
        )

    return [build(root) for root in roots]


__all__ = ["DisplayNode", "SiblingOrder", "build_display_nodes"]
