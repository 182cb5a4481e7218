import re
from typing import Optional, Tuple

# https://github.com/<owner>/<repo>[.git][/tree/<branch>/...]; the rest of the path is ignored
REPO_URL_PATTERN = re.compile(
    r"^https?://(?:www\.)?github\.com/([^/\s?#]+)/([^/\s?#]+?)(?:\.git)?(?:[/?#]\S*)?$"
)


def match_repo_url(text: str) -> Optional[Tuple[str, str]]:
    """(owner, repo) for a GitHub repository URL, None for anything else."""
    match = REPO_URL_PATTERN.match(text.strip())
    if not match:
        return None
    return match.group(1), match.group(2)
