from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator


class TreeNode(BaseModel):
    """A file (leaf, has content) or a directory (internal node, has children)."""
    name: str
    content: Optional[str] = None
    children: Optional[List['TreeNode']] = None

    @model_validator(mode="after")
    def _exactly_one_payload(self) -> 'TreeNode':
        if (self.content is None) == (self.children is None):
            raise ValueError(f"Node {self.name!r} must have exactly one of 'content' or 'children'")
        return self

    @classmethod
    def leaf(cls, name: str, content: str) -> 'TreeNode':
        return cls(name=name, content=content)

    @classmethod
    def directory(cls, name: str) -> 'TreeNode':
        return cls(name=name, children=[])

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    def iter_nodes(self) -> Iterator['TreeNode']:
        """Yields this node and all its descendants in depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    def count(self) -> Tuple[int, int]:
        """Returns (leaf count, internal node count), root included."""
        files = dirs = 0
        for node in self.iter_nodes():
            if node.is_leaf:
                files += 1
            else:
                dirs += 1
        return files, dirs

    def to_payload(self) -> dict:
        """Plain dict without the absent field, as sent over the wire."""
        return self.model_dump(exclude_none=True)

TreeNode.model_rebuild() # For recursive Pydantic models


class RemoteEntry(BaseModel):
    """One item of a GitHub contents listing."""
    type: str # 'file', 'dir', 'symlink' or 'submodule'
    name: str
    path: str
    download_url: Optional[str] = None


class RepoRequest(BaseModel):
    github_url: str
    github_token: Optional[str] = Field(None, description="Optional GitHub Personal Access Token provided by the user")


class RepoTreeResponse(BaseModel):
    owner: str
    repo: str
    tree: TreeNode
    file_count: int
    dir_count: int


class AnalyzeRequest(BaseModel):
    tree: Optional[TreeNode] = None
    selected_content: Optional[str] = None


class AnalyzeResponse(BaseModel):
    analysis: str
    failed: bool = False # True when the text is the fixed failure message
