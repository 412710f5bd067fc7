"""Remote procedure clients."""

from smart_triage.tools.triage_function import (
    TriageFunctionClient,
    get_triage_client,
)

__all__ = [
    "TriageFunctionClient",
    "get_triage_client",
]
