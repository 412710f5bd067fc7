"""Client for the remote triage function.

The function is a single serverless endpoint that dispatches on an
``action`` discriminator:

- ``triage``             -> risk classification for one patient
- ``parse-document``     -> sparse intake fields extracted from a stored file
- ``generate-synthetic`` -> inserts sample patients as a side effect

Every call fails as a unit; there are no partial results and no retries.
"""

from typing import Any, Dict, Optional
import logging

import httpx
from pydantic import ValidationError as SchemaError

from smart_triage.config.settings import settings
from smart_triage.models.intake import ParsedDocument
from smart_triage.models.triage import ClassificationResult
from smart_triage.utils.errors import RemoteProcedureError

logger = logging.getLogger(__name__)

ACTION_TRIAGE = "triage"
ACTION_PARSE_DOCUMENT = "parse-document"
ACTION_GENERATE_SYNTHETIC = "generate-synthetic"


class TriageFunctionClient:
    """Invokes the triage function over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        function_name: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Functions base URL (overrides settings)
            function_name: Function to invoke (overrides settings)
            api_key: Bearer token (overrides settings)
            timeout: Request timeout in seconds (overrides settings)
            transport: Custom httpx transport, mainly for tests
        """
        self.base_url = (base_url or settings.functions_url).rstrip("/")
        self.function_name = function_name or settings.triage_function_name
        self.api_key = api_key if api_key is not None else settings.functions_api_key
        self.timeout = timeout or settings.function_timeout_seconds
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.function_name}"

    async def invoke(self, action: str, **payload: Any) -> Dict[str, Any]:
        """
        Invoke the function with an action discriminator.

        Args:
            action: One of the ACTION_* constants
            **payload: Extra body fields for the action

        Returns:
            Decoded JSON response body (empty dict for an empty body)

        Raises:
            RemoteProcedureError: On any transport, status or decoding failure
        """
        body = {"action": action, **payload}
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.url, json=body, headers=headers)
                response.raise_for_status()
                data = response.json() if response.content else {}
        except httpx.TimeoutException as e:
            logger.warning(f"Triage function timeout for action {action}")
            raise RemoteProcedureError(
                f"The '{action}' call timed out", action
            ) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Triage function failed for action {action}: {e.response.status_code}"
            )
            raise RemoteProcedureError(
                f"The '{action}' call failed with status {e.response.status_code}",
                action,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Triage function request error for action {action}: {e}")
            raise RemoteProcedureError(f"The '{action}' call failed", action) from e
        except ValueError as e:
            logger.error(f"Triage function returned invalid JSON for {action}")
            raise RemoteProcedureError(
                f"The '{action}' call returned an unreadable response", action
            ) from e

        if not isinstance(data, dict):
            raise RemoteProcedureError(
                f"The '{action}' call returned an unexpected response", action
            )
        if data.get("error"):
            logger.warning(f"Triage function reported error for {action}: {data['error']}")
            raise RemoteProcedureError(str(data["error"]), action)

        logger.info(f"Triage function action {action} succeeded")
        return data

    async def classify(self, patient: Dict[str, Any]) -> ClassificationResult:
        """Request a risk classification for a normalized patient payload."""
        data = await self.invoke(ACTION_TRIAGE, patient=patient)
        try:
            return ClassificationResult(**data)
        except SchemaError as e:
            logger.error(f"Incomplete classification response: {e}")
            raise RemoteProcedureError(
                "The classification response was incomplete", ACTION_TRIAGE
            ) from e

    async def parse_document(self, file_path: str) -> ParsedDocument:
        """Extract sparse intake fields from an uploaded document."""
        data = await self.invoke(ACTION_PARSE_DOCUMENT, filePath=file_path)
        parsed = data.get("parsed") or {}
        try:
            return ParsedDocument(**parsed)
        except (SchemaError, TypeError) as e:
            logger.error(f"Unusable parse-document response: {e}")
            raise RemoteProcedureError(
                "The parsed document could not be read", ACTION_PARSE_DOCUMENT
            ) from e

    async def generate_synthetic(self) -> None:
        """Ask the function to insert synthetic patients."""
        await self.invoke(ACTION_GENERATE_SYNTHETIC)


_triage_client: Optional[TriageFunctionClient] = None


def get_triage_client() -> TriageFunctionClient:
    """Get or create TriageFunctionClient instance."""
    global _triage_client
    if _triage_client is None:
        _triage_client = TriageFunctionClient()
    return _triage_client
