"""
AI-powered repository analysis using Google Gemini API.
"""
import asyncio
import json
import logging
from typing import Any, Optional

from google import genai

from .config import DEFAULT_GEMINI_MODEL, Settings
from .models import AnalyzeResponse, TreeNode

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No repository data available to analyze."
FAILURE_MESSAGE = "Failed to generate analysis. Please try again."

GENERATION_CONFIG = {
    "temperature": 0.2,
    "top_p": 0.8,
    "top_k": 20,
}

PROMPT_TEMPLATE = """You are an experienced software engineer reviewing a GitHub repository.

The repository structure is given below as JSON. Directories have "children", files have "content".

```json
{tree_json}
```

The user has selected the following file:

```
{selected}
```

Explain what the selected file does and how it fits into the rest of the repository.
Mention the files it most likely depends on or is used by, and point out anything notable.
Answer in Markdown."""


def build_prompt(tree: TreeNode, selected_content: Optional[str]) -> str:
    tree_json = json.dumps(tree.to_payload(), indent=2, ensure_ascii=False)
    selected = selected_content if selected_content else "(no file selected)"
    return PROMPT_TEMPLATE.format(tree_json=tree_json, selected=selected)


def create_client(settings: Settings) -> Optional[genai.Client]:
    """Builds the Gemini client; returns None when no API key is set."""
    if not settings.google_api_key:
        logger.warning("GOOGLE_API_KEY not found in environment variables or .env file; analysis is disabled.")
        return None
    return genai.Client(api_key=settings.google_api_key)


class AnalysisService:
    """Turns a tree plus the selected file into a Markdown analysis."""

    def __init__(self, client: Optional[Any], model_name: str = DEFAULT_GEMINI_MODEL):
        self.client = client
        self.model_name = model_name

    async def analyze(self, tree: Optional[TreeNode], selected_content: Optional[str]) -> AnalyzeResponse:
        if tree is None:
            return AnalyzeResponse(analysis=NO_DATA_MESSAGE)
        if self.client is None:
            logger.error("Analysis requested but no Gemini client is configured")
            return AnalyzeResponse(analysis=FAILURE_MESSAGE, failed=True)

        prompt = build_prompt(tree, selected_content)
        try:
            # The client call blocks; keep it off the event loop
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model_name,
                contents=prompt,
                config=GENERATION_CONFIG,
            )
            # None when the candidate was blocked or has no text parts
            text = response.text
        except Exception:
            logger.exception("Error calling Google Gemini API")
            return AnalyzeResponse(analysis=FAILURE_MESSAGE, failed=True)

        if not isinstance(text, str) or not text.strip():
            logger.error("Gemini returned an empty or malformed response")
            return AnalyzeResponse(analysis=FAILURE_MESSAGE, failed=True)
        return AnalyzeResponse(analysis=text)
