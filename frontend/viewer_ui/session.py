"""
Per-session state of the viewer page: the fetched tree, the selected node and
the analysis panel.

Every fetch attempt is tagged with a generation number. A result that comes
back for anything but the latest generation is dropped, so an older, slower
fetch can never overwrite the tree of a newer one.
"""
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
READY = "ready"
FAILED = "failed"

UNREQUESTED = "unrequested"
PENDING = "pending"
SHOWN = "shown"
ERROR_SHOWN = "error_shown"

DIRECTORY_SELECTED = "This is a directory."


def select_node(node: Dict[str, Any]) -> str:
    """Content of a clicked leaf, or the directory marker for an internal node."""
    content = node.get("content")
    if content is None:
        return DIRECTORY_SELECTED
    return content


class FetchState:
    def __init__(self):
        self.status = IDLE
        self.generation = 0
        self.tree: Optional[Dict[str, Any]] = None
        self.repo: Optional[str] = None # "owner/repo" of the displayed tree
        self.error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status == LOADING

    def begin(self) -> int:
        """Starts a new attempt; any attempt still in flight becomes stale."""
        self.generation += 1
        self.status = LOADING
        self.error = None
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def complete(self, generation: int, tree: Dict[str, Any], repo: Optional[str] = None) -> bool:
        if not self.is_current(generation):
            logger.info("Discarding tree from stale fetch %d (current is %d)", generation, self.generation)
            return False
        self.tree = tree
        self.repo = repo
        self.status = READY
        return True

    def fail(self, generation: int, error: str) -> bool:
        """Records a failed attempt; the previously displayed tree is kept."""
        if not self.is_current(generation):
            logger.info("Ignoring failure of stale fetch %d: %s", generation, error)
            return False
        self.error = error
        self.status = FAILED
        return True


class AnalysisState:
    def __init__(self):
        self.status = UNREQUESTED
        self.text: Optional[str] = None

    def reset(self) -> None:
        self.status = UNREQUESTED
        self.text = None

    def start(self) -> None:
        self.status = PENDING
        self.text = None

    def show(self, text: str, failed: bool = False) -> None:
        self.status = ERROR_SHOWN if failed else SHOWN
        self.text = text
