import os
from dotenv import load_dotenv

from flowscope.analysis.policy import DEFAULT_POLICY, ScoringPolicy
from flowscope.graph.traversal import TraversalLimits

# Load .env from project root
load_dotenv()

API_TITLE = os.getenv("FLOWSCOPE_API_TITLE", "Process Diagram Analysis API")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FLOWSCOPE_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("FLOWSCOPE_LOG_LEVEL", "INFO").upper()

MAX_PATHS = int(os.getenv("FLOWSCOPE_MAX_PATHS", "1000"))
MAX_TRAVERSAL_STEPS = int(os.getenv("FLOWSCOPE_MAX_TRAVERSAL_STEPS", "200000"))


def runtime_policy() -> ScoringPolicy:
    """The shipped scoring policy with the configured traversal limits."""
    return DEFAULT_POLICY.with_limits(
        TraversalLimits(max_paths=MAX_PATHS, max_steps=MAX_TRAVERSAL_STEPS)
    )
