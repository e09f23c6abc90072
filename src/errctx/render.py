"""Tree rendering of errctx nodes with rich.

A node renders as three top-level branches::

    ERR
    └── connection refused
    CTX
    ├── attempt: 3
    └── timestamp: 2024-05-01T12:30:00Z
    STACK
    ├── file: app/db.py
    └── line: 42

Nested nodes (as the wrapped error or as a context value) are drawn as
sub-trees, so a cause chain nests visually under ``ERR``.
"""

import io
from typing import TYPE_CHECKING

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from errctx.config import RenderConfig
from errctx.fields import FieldKind, FieldValue, error_text, safe_str

if TYPE_CHECKING:
    from errctx.error import ContextError

# Width taken by one level of tree guides
_GUIDE_WIDTH = 4


def _label(text: str) -> Text:
    # Leaves keep their full text; the console is sized to fit them
    return Text(text, no_wrap=True, overflow="ignore")


def _leaf_text(key: str, field: FieldValue) -> str:
    if field.kind is FieldKind.ERROR:
        return f"{key}: {error_text(field.value)}"
    return f"{key}: {safe_str(field.value)}"


def _add_fields(parent: Tree, entries: list[tuple[str, FieldValue]], sort_keys: bool) -> None:
    for key, field in entries:
        if field.kind is FieldKind.NODE:
            add_node_branches(parent.add(_label(key)), field.value, sort_keys)
        else:
            parent.add(_label(_leaf_text(key, field)))


def add_node_branches(parent: Tree, node: "ContextError", sort_keys: bool = True) -> Tree:
    """Add the ERR, CTX and STACK branches of a node under ``parent``.

    Args:
        parent: Tree to attach the branches to
        node: Node to draw
        sort_keys: Sort context and stack entries by key

    Returns:
        The parent tree
    """
    err_branch = parent.add(Text("ERR"))
    wrapped = node.wrapped_field
    if wrapped.kind is FieldKind.NODE:
        add_node_branches(err_branch, wrapped.value, sort_keys)
    elif wrapped.kind is FieldKind.ERROR:
        err_branch.add(_label(error_text(wrapped.value)))
    else:
        err_branch.add(_label(safe_str(wrapped.value)))

    _add_fields(parent.add(Text("CTX")), node.context_entries(sort_keys), sort_keys)
    _add_fields(parent.add(Text("STACK")), node.stack_entries(sort_keys), sort_keys)
    return parent


def required_width(tree: Tree) -> int:
    """Columns needed to draw every label of a tree without wrapping."""
    widest = 0
    pending = [(child, 0) for child in tree.children]
    while pending:
        branch, depth = pending.pop()
        label = branch.label.plain if isinstance(branch.label, Text) else str(branch.label)
        for line in label.splitlines() or [""]:
            widest = max(widest, depth * _GUIDE_WIDTH + cell_len(line))
        pending.extend((child, depth + 1) for child in branch.children)
    return widest + _GUIDE_WIDTH


def build_tree(node: "ContextError", sort_keys: bool = True) -> Tree:
    """Build a rich Tree for a node under a hidden root."""
    return add_node_branches(Tree("", hide_root=True), node, sort_keys)


def render_tree(node: "ContextError", config: RenderConfig | None = None) -> str:
    """Render a node as plain text.

    Args:
        node: Node to render
        config: Render settings (default: RenderConfig())

    Returns:
        Tree text without colors or trailing whitespace
    """
    config = config or RenderConfig()
    buffer = io.StringIO()
    tree = build_tree(node, config.sort_keys)
    console = Console(
        file=buffer,
        width=max(config.width, required_width(tree)),
        color_system=None,
        force_terminal=False,
        force_jupyter=False,
        no_color=True,
        markup=False,
        emoji=False,
        highlight=False,
    )
    console.print(tree, soft_wrap=True)
    return "\n".join(line.rstrip() for line in buffer.getvalue().splitlines())
