from typing import Any, Callable, Dict, List, Optional

import streamlit as st

Node = Dict[str, Any]


def _dot_label(name: str) -> str:
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def tree_to_dot(tree: Node) -> str:
    """Graphviz source for the tree, laid out left to right."""
    lines = [
        "digraph repository {",
        "  rankdir=LR;",
        '  node [fontname="Helvetica", fontsize=10];',
    ]
    counter = 0
    stack = [(tree, None)]
    while stack:
        node, parent_id = stack.pop()
        node_id = f"n{counter}"
        counter += 1
        shape = "note" if node.get("content") is not None else "folder"
        lines.append(f"  {node_id} [label={_dot_label(node['name'])}, shape={shape}];")
        if parent_id is not None:
            lines.append(f"  {parent_id} -> {node_id};")
        for child in reversed(node.get("children") or []):
            stack.append((child, node_id))
    lines.append("}")
    return "\n".join(lines)


def display_tree_manual_expand(node: Node, on_select: Callable[[Node], None], level: int = 0, path: str = "",
                               index_path: str = "0") -> None:
    """
    Expand/collapse tree of buttons; a click on any node reports its payload.

    Widget keys come from the child-index path ("0.2.1"), since names may
    collide once sanitized.
    """
    node_path = f"{path}/{node['name']}" if path else node['name']

    cols = st.columns([1, 10]) # Simple ratio for indent effect + label
    with cols[0]: # Indentation column
        st.markdown(f"<div style='width: {level*20}px;'></div>", unsafe_allow_html=True)

    if node.get("children") is not None:
        expanded_state_key = f"expanded_{index_path}"
        if expanded_state_key not in st.session_state:
            st.session_state[expanded_state_key] = (level < 1) # Expand first level by default

        with cols[1]: # Label and toggle button column
            icon = "▼" if st.session_state[expanded_state_key] else "▶"
            if st.button(f"{icon} 📁 {node['name']}", key=f"toggle_btn_{index_path}",
                         help=f"Click to expand/collapse {node['name']}", use_container_width=True):
                st.session_state[expanded_state_key] = not st.session_state[expanded_state_key]
                on_select(node)

        if st.session_state[expanded_state_key]:
            for i, child_node in enumerate(node["children"]):
                display_tree_manual_expand(child_node, on_select, level + 1, node_path, f"{index_path}.{i}")
    else:
        with cols[1]: # File button column
            if st.button(f"📄 {node['name']}", key=f"file_btn_{index_path}",
                         help=f"View content of {node_path}", use_container_width=True):
                on_select(node)


def render_tree(tree: Optional[Node], on_select: Callable[[Node], None], mounted: bool, loading: bool = False) -> None:
    """Draws nothing until the session has mounted or without a tree; a loading refetch keeps the old tree."""
    if not mounted or tree is None:
        if loading:
            st.info("Fetching repository tree...")
        else:
            st.info("Enter a GitHub repository URL to see its structure here.")
        return

    with st.expander("Diagram", expanded=False):
        st.graphviz_chart(tree_to_dot(tree), use_container_width=True)
    display_tree_manual_expand(tree, on_select)


def tree_stats_caption(response: Dict[str, Any]) -> str:
    parts: List[str] = [f"{response.get('owner')}/{response.get('repo')}"]
    if "file_count" in response:
        parts.append(f"{response['file_count']} files")
    if "dir_count" in response:
        parts.append(f"{response['dir_count']} directories")
    return " · ".join(parts)
