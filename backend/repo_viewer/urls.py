import re
from typing import Optional, Tuple

# owner/repo, optional .git; anything after the repo segment (/tree/<branch>/..., ?tab=...) is ignored
GITHUB_URL_PATTERN = re.compile(
    r"^https?://(?:www\.)?github\.com/([^/\s?#]+)/([^/\s?#]+?)(?:\.git)?(?:[/?#]\S*)?$"
)


def match_github_url(text: str) -> Optional[Tuple[str, str]]:
    """Extracts (owner, repo) from a repository URL, or None if it does not match."""
    match = GITHUB_URL_PATTERN.match(text.strip())
    if not match:
        return None
    owner, repo = match.groups()
    return owner, repo


def parse_github_url(url: str) -> Tuple[str, str]:
    """Parses GitHub URL to extract owner and repository name."""
    parsed = match_github_url(url)
    if parsed is None:
        raise ValueError("Invalid GitHub URL format. Expected: https://github.com/owner/repo")
    return parsed
