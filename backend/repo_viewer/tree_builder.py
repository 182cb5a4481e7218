"""
Materializes a repository's directory structure as a TreeNode tree.

The walk is driven by a LIFO work queue rather than recursion. Each job is
either "list a directory" or "fetch a file's content"; a directory job pushes
its entries back onto the queue in reverse order, so a single worker visits
the repository in depth-first pre-order with one request in flight at a
time. More workers turn the same queue into a bounded-concurrency pool.
Child nodes are created in listing order before any of them is expanded,
so the resulting tree never depends on how requests interleave.
"""
import asyncio
import logging
import os
from typing import List, Optional, Tuple

from .github_client import GitHubClient
from .models import RemoteEntry, TreeNode

logger = logging.getLogger(__name__)

# --- List of common binary/image file extensions to ignore content for ---
BINARY_FILE_EXTENSIONS = {
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tiff', '.webp', '.svg', '.ico',
    '.mp3', '.wav', '.aac', '.ogg', '.flac', '.mp4', '.mov', '.avi', '.mkv', '.webm',
    '.zip', '.tar', '.gz', '.rar', '.7z', '.pdf', '.doc', '.docx', '.ppt', '.pptx', '.xls', '.xlsx',
    '.exe', '.dll', '.so', '.dylib', '.jar', '.pyc', '.pyo', '.class', '.o', '.a', '.obj',
    '.eot', '.otf', '.ttf', '.woff', '.woff2', '.DS_Store'
}

LIST_JOB = "list"
FETCH_JOB = "fetch"

# (kind, node, entry path, depth, download url)
Job = Tuple[str, TreeNode, str, int, Optional[str]]


def is_binary_file(file_path: str) -> bool:
    """Checks if a file is likely binary based on its extension."""
    _, ext = os.path.splitext(file_path)
    return ext.lower() in BINARY_FILE_EXTENSIONS


class TreeBuilder:
    def __init__(
        self,
        client: GitHubClient,
        max_concurrency: int = 1,
        max_depth: Optional[int] = None,
        skip_binary: bool = False,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if max_depth is not None and max_depth < 0:
            raise ValueError("max_depth must not be negative")
        self.client = client
        self.max_concurrency = max_concurrency
        self.max_depth = max_depth
        self.skip_binary = skip_binary

    async def build(self, owner: str, repo: str) -> TreeNode:
        """
        Walks owner/repo and returns a root directory node named after the repo.

        Raises GitHubAPIError from the first failed request; no partial tree
        is returned.
        """
        if not owner or not repo:
            raise ValueError("Both owner and repo are required")

        root = TreeNode.directory(repo)
        queue: asyncio.LifoQueue = asyncio.LifoQueue()
        queue.put_nowait((LIST_JOB, root, "", 0, None))
        errors: List[Exception] = []

        logger.info("Building tree for %s/%s (concurrency=%d, max_depth=%s)",
                    owner, repo, self.max_concurrency, self.max_depth)
        workers = [
            asyncio.create_task(self._worker(owner, repo, queue, errors))
            for _ in range(self.max_concurrency)
        ]
        try:
            await queue.join()
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        if errors:
            raise errors[0]

        files, dirs = root.count()
        logger.info("Built tree for %s/%s: %d files, %d directories", owner, repo, files, dirs)
        return root

    async def _worker(self, owner: str, repo: str, queue: asyncio.LifoQueue, errors: List[Exception]) -> None:
        while True:
            job = await queue.get()
            try:
                # After the first failure the remaining jobs are only drained
                if not errors:
                    await self._run(owner, repo, job, queue)
            except Exception as exc:
                errors.append(exc)
            finally:
                queue.task_done()

    async def _run(self, owner: str, repo: str, job: Job, queue: asyncio.LifoQueue) -> None:
        kind, node, path, depth, download_url = job
        if kind == FETCH_JOB:
            node.content = await self.client.fetch_content(download_url)
            return

        if self.max_depth is not None and depth > self.max_depth:
            logger.warning("Not expanding %s/%s/%s: deeper than max_depth=%d", owner, repo, path, self.max_depth)
            return

        entries = await self.client.list_directory(owner, repo, path)
        jobs = []
        for entry in entries:
            child, child_job = self._expand_entry(entry, depth)
            if child is None:
                continue
            node.children.append(child)
            if child_job is not None:
                jobs.append(child_job)

        for child_job in reversed(jobs):
            queue.put_nowait(child_job)

    def _expand_entry(self, entry: RemoteEntry, depth: int) -> Tuple[Optional[TreeNode], Optional[Job]]:
        if entry.type == 'dir':
            child = TreeNode.directory(entry.name)
            return child, (LIST_JOB, child, entry.path, depth + 1, None)

        if entry.type == 'file':
            if self.skip_binary and is_binary_file(entry.path):
                return TreeNode.leaf(entry.name, f"[Content of binary/image file: {entry.path}]"), None
            if not entry.download_url:
                return TreeNode.leaf(entry.name, f"[Text content not fetched for {entry.path} - no download URL]"), None
            # Content is filled in when the fetch job runs
            child = TreeNode.leaf(entry.name, "")
            return child, (FETCH_JOB, child, entry.path, depth + 1, entry.download_url)

        logger.debug("Skipping %s entry %s", entry.type, entry.path)
        return None, None
