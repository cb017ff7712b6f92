"""API client for the remote document store."""

from __future__ import annotations

import logging
import random
import time
from typing import Any

import httpx

from .config import config
from .exceptions import (
    VeloceAPIError,
    VeloceAuthenticationError,
    VeloceConfigError,
    VeloceInvalidResponseError,
    VeloceNetworkError,
    VeloceNotFoundError,
    VelocePermissionError,
    VeloceRateLimitError,
)
from .models import PRODUCT_MODEL_FIELDS, PRODUCT_MODEL_OBJECT, ProductModel

logger = logging.getLogger(__name__)


def soql_quote(value: str) -> str:
    """Quote a string literal for use in a SOQL query."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class VeloceClient:
    """Client for the org REST API (records, documents and folders)."""

    def __init__(
        self,
        instance_url: str | None = None,
        access_token: str | None = None,
        api_version: str | None = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
    ):
        """Initialize API client.

        Args:
            instance_url: Org base URL (uses config if not provided)
            access_token: OAuth access token (uses config if not provided)
            api_version: REST API version (uses config if not provided)
            max_retries: Maximum number of retry attempts (default: 3)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Request timeout in seconds (default: 30.0)
        """
        self.instance_url = (instance_url or config.instance_url or "").rstrip("/")
        self.access_token = access_token or config.access_token
        self.api_version = api_version or config.api_version
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

        if not self.instance_url or not self.access_token:
            raise VeloceConfigError(
                "Instance URL or access token not configured. Please set "
                "VELOCE_INSTANCE_URL and VELOCE_ACCESS_TOKEN or run 'veloce init'."
            )

        self._client: httpx.Client | None = None

    @property
    def base_path(self) -> str:
        return f"/services/data/v{self.api_version}"

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Exponential backoff with +/- 25% jitter.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    def _handle_http_error(
        self, e: httpx.HTTPStatusError, attempt: int
    ) -> tuple[Exception, bool]:
        """Map an HTTP error to a typed exception.

        Args:
            e: The HTTP error exception
            attempt: Current attempt number

        Returns:
            Tuple of (exception to raise, should_retry)
        """
        status_code = e.response.status_code

        if status_code == 401:
            raise VeloceAuthenticationError(
                "Invalid or expired access token"
            ) from e
        elif status_code == 403:
            raise VelocePermissionError(
                "Access forbidden - check your permissions"
            ) from e
        elif status_code == 404:
            raise VeloceNotFoundError("Resource not found") from e
        elif status_code == 429:
            error = VeloceRateLimitError("Rate limit exceeded - please try again later")
            return (error, attempt < self.max_retries)

        error_msg = f"API request failed with status {status_code}"
        try:
            if e.response.content:
                error_data = e.response.json()
                # Errors come back as a list of {"message", "errorCode"}
                if isinstance(error_data, list) and error_data:
                    error_data = error_data[0]
                if isinstance(error_data, dict):
                    msg = error_data.get("message") or error_data.get("error")
                    if msg:
                        error_msg = f"{error_msg}: {msg}"
        except ValueError:
            pass

        error = VeloceAPIError(error_msg)
        should_retry = 500 <= status_code < 600 and attempt < self.max_retries
        return (error, should_retry)

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Send a request with retry logic and return the raw response.

        Args:
            method: HTTP method
            endpoint: Path relative to the instance URL
            **kwargs: Additional arguments passed to httpx

        Raises:
            VeloceAPIError: If the request fails after all retries
        """
        url = f"{self.instance_url}/{endpoint.lstrip('/')}"
        last_exception: Exception | None = None
        client = self._get_client()

        for attempt in range(self.max_retries + 1):
            try:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                error, should_retry = self._handle_http_error(e, attempt)
                last_exception = error

                if should_retry:
                    retry_after = e.response.headers.get("Retry-After")
                    if isinstance(error, VeloceRateLimitError) and (
                        retry_after and retry_after.isdigit()
                    ):
                        delay = float(retry_after)
                    else:
                        delay = self._calculate_retry_delay(attempt)
                    logger.debug("Retrying %s %s in %.2fs", method, url, delay)
                    time.sleep(delay)
                    continue
                raise error from e
            except httpx.RequestError as e:
                error = VeloceNetworkError(f"Network error: {e}")
                last_exception = error
                if attempt < self.max_retries:
                    time.sleep(self._calculate_retry_delay(attempt))
                    continue
                raise error from e

        if last_exception:
            raise last_exception
        raise VeloceAPIError("Request failed after all retry attempts")

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make an API request and return the decoded JSON body."""
        response = self._send(method, endpoint, **kwargs)

        if not response.content:
            return {}

        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            # Login pages come back as HTML when the session is invalid
            if "text/html" in content_type:
                raise VeloceAuthenticationError(
                    "Invalid access token - server returned HTML instead of JSON"
                )
            raise VeloceInvalidResponseError(
                f"Unexpected response type: {content_type}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise VeloceInvalidResponseError("Invalid JSON response from server") from e

    # =========================
    # Query Operations
    # =========================

    def query(self, soql: str) -> list[dict[str, Any]]:
        """Run a SOQL query and return all records, following pagination.

        Args:
            soql: Query string

        Returns:
            List of record dictionaries
        """
        logger.debug("Query: %s", soql)
        result = self._request("GET", f"{self.base_path}/query", params={"q": soql})
        records: list[dict[str, Any]] = list(result.get("records", []))

        while not result.get("done", True) and result.get("nextRecordsUrl"):
            result = self._request("GET", result["nextRecordsUrl"])
            records.extend(result.get("records", []))

        return records

    def query_records(self, names: list[str] | None = None) -> list[ProductModel]:
        """Fetch product model records, optionally restricted by name.

        Args:
            names: Record names to select (None or empty for all)

        Returns:
            List of product models
        """
        soql = f"SELECT {','.join(PRODUCT_MODEL_FIELDS)} FROM {PRODUCT_MODEL_OBJECT}"
        if names:
            soql += f" WHERE Name IN ({','.join(soql_quote(n) for n in names)})"
        return [ProductModel.from_dict(r) for r in self.query(soql)]

    def update_record(self, record_id: str, fields: dict[str, Any]) -> None:
        """Update fields of a product model record.

        Args:
            record_id: Record id
            fields: Field values to set
        """
        self._request(
            "PATCH",
            f"{self.base_path}/sobjects/{PRODUCT_MODEL_OBJECT}/{record_id}",
            json=fields,
        )

    # =========================
    # Document Operations
    # =========================

    def fetch_document(self, document_id: str | None) -> dict[str, Any] | None:
        """Look up a document by id.

        Args:
            document_id: Document id (may be empty)

        Returns:
            The document record (with at least ``Id``) or None if absent
        """
        if not document_id:
            return None
        records = self.query(
            f"SELECT Id, Name, FolderId FROM Document WHERE Id={soql_quote(document_id)}"
        )
        return records[0] if records else None

    def fetch_document_body(self, document_id: str) -> bytes:
        """Download the raw body of a document.

        The platform strips one base64 layer on read, so the returned bytes
        are the wire text minus that layer.

        Args:
            document_id: Document id

        Returns:
            Raw body bytes

        Raises:
            VeloceNotFoundError: If the document does not exist
        """
        records = self.query(
            f"SELECT Body FROM Document WHERE Id={soql_quote(document_id)}"
        )
        if not records or not records[0].get("Body"):
            raise VeloceNotFoundError(f"Document not found: {document_id}")

        body_url = records[0]["Body"]
        logger.debug("Fetching document body: %s", body_url)
        return self._send("GET", body_url).content

    def create_document(self, folder_id: str, name: str, body: str) -> dict[str, Any]:
        """Create a document in a folder.

        Args:
            folder_id: Folder id
            name: Document name
            body: Wire text

        Returns:
            Response with the new document ``id``
        """
        payload = {"FolderId": folder_id, "Name": name, "Body": body}
        result: dict[str, Any] = self._request(
            "POST", f"{self.base_path}/sobjects/Document", json=payload
        )
        return result

    def update_document(self, document_id: str, body: str) -> None:
        """Replace the body of an existing document.

        Args:
            document_id: Document id
            body: Wire text
        """
        self._request(
            "PATCH",
            f"{self.base_path}/sobjects/Document/{document_id}",
            json={"Body": body},
        )

    # =========================
    # Folder Operations
    # =========================

    def fetch_folder(self, name: str) -> dict[str, Any] | None:
        """Find a document folder by name."""
        records = self.query(f"SELECT Id FROM Folder WHERE Name={soql_quote(name)}")
        return records[0] if records else None

    def create_folder(self, name: str) -> dict[str, Any]:
        """Create a public document folder."""
        payload = {
            "Name": name,
            "DeveloperName": name,
            "AccessType": "Public",
            "Type": "Document",
        }
        result: dict[str, Any] = self._request(
            "POST", f"{self.base_path}/sobjects/Folder", json=payload
        )
        return result

    def ensure_folder(self, name: str) -> str:
        """Get or create a document folder and return its id."""
        folder = self.fetch_folder(name)
        if folder and folder.get("Id"):
            logger.debug("Folder %s exists: %s", name, folder["Id"])
            return str(folder["Id"])

        created = self.create_folder(name)
        folder_id = created.get("id")
        if not folder_id:
            raise VeloceAPIError(f"Could not create folder '{name}'")
        logger.debug("Created folder %s: %s", name, folder_id)
        return str(folder_id)
