import logging
import os
import time

import streamlit as st

from viewer_ui.backend_client import DEFAULT_BACKEND_URL, BackendClient, BackendError
from viewer_ui.debounce import Debouncer
from viewer_ui.repo_url import match_repo_url
from viewer_ui.session import AnalysisState, FetchState, select_node
from viewer_ui.tree_view import render_tree, tree_stats_caption

# --- Streamlit Page Configuration ---
st.set_page_config(page_title="Repository Tree Viewer", layout="wide")

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("app_streamlit")

# --- Configuration ---
BACKEND_API_URL = os.getenv("BACKEND_API_URL", DEFAULT_BACKEND_URL)
DEBOUNCE_SECONDS = float(os.getenv("DEBOUNCE_SECONDS", "1.0"))

INTERRUPTED_MESSAGE = "Fetching was interrupted before it finished. Edit the URL to try again."

# --- Initialize session state variables ---
default_session_states = {
    'fetch': FetchState,
    'analysis': AnalysisState,
    'debouncer': lambda: Debouncer(DEBOUNCE_SECONDS),
    'backend': lambda: BackendClient(BACKEND_API_URL),
    'selected_content': lambda: None,
    'user_github_token': lambda: "",
    'mounted': lambda: False,
}
for key, factory in default_session_states.items():
    if key not in st.session_state:
        st.session_state[key] = factory()

fetch: FetchState = st.session_state.fetch
analysis: AnalysisState = st.session_state.analysis
debouncer: Debouncer = st.session_state.debouncer
backend: BackendClient = st.session_state.backend


def run_fetch(repo_url: str) -> None:
    parsed = match_repo_url(repo_url)
    if parsed is None:
        logger.info("Ignoring input that is not a GitHub repository URL: %r", repo_url)
        return

    generation = fetch.begin()
    try:
        with st.spinner(f"Fetching {parsed[0]}/{parsed[1]}..."):
            try:
                response = backend.fetch_tree(repo_url, st.session_state.user_github_token)
            except BackendError as e:
                logger.error("Fetching %s failed: %s", repo_url, e)
                fetch.fail(generation, str(e))
                return

            if fetch.complete(generation, response["tree"], repo=tree_stats_caption(response)):
                st.session_state.selected_content = None
                analysis.reset()
    finally:
        # A rerun can cut the script short before the result is recorded
        if fetch.is_current(generation) and fetch.loading:
            logger.warning("Fetch %d of %s was interrupted", generation, repo_url)
            fetch.fail(generation, INTERRUPTED_MESSAGE)


def handle_node_click(node) -> None:
    st.session_state.selected_content = select_node(node)


# --- Main App UI ---
st.title("Repository Tree Viewer 🌳")

repo_url_input = st.text_input(
    "GitHub Repository URL:",
    placeholder="https://github.com/owner/repo",
    key="repo_url_input_key",
)

with st.sidebar:
    st.header("Settings")
    st.session_state.user_github_token = st.text_input(
        "Optional GitHub Token (PAT):",
        type="password",
        value=st.session_state.user_github_token,
        help="Used for private repos or higher rate limits. Falls back to the backend's token.",
    )
    st.info("The tree is refetched one second after the URL stops changing.")

debouncer.push(repo_url_input)
settled_url = debouncer.poll()
if settled_url is not None:
    run_fetch(settled_url)

if fetch.error:
    st.error(fetch.error)

col_tree, col_analysis = st.columns([3, 2])

with col_tree:
    st.markdown("#### Repository Structure")
    if fetch.repo:
        st.caption(fetch.repo)
    render_tree(fetch.tree, handle_node_click, mounted=st.session_state.mounted, loading=fetch.loading)

with col_analysis:
    st.markdown("#### Analysis")
    if st.session_state.selected_content is not None:
        with st.expander("Selected", expanded=False):
            st.code(st.session_state.selected_content)

    if st.button("🔍 Analyze Repository", type="primary", disabled=fetch.tree is None,
                 use_container_width=True, key="analyze_button"):
        analysis.reset()
        analysis.start()
        with st.spinner("Analyzing with Gemini..."):
            text, failed = backend.analyze(fetch.tree, st.session_state.selected_content)
        analysis.show(text, failed=failed)

    if analysis.text is not None:
        st.markdown(analysis.text)
    else:
        st.info("Select a file in the tree, then analyze it.")

st.session_state.mounted = True

# Keep rerunning until the pending URL has settled
if debouncer.pending:
    time.sleep(debouncer.remaining() or 0)
    st.rerun()
