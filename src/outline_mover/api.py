"""Outline API client."""

from typing import Any

import requests
from loguru import logger

from outline_mover.config import (
    COLLECTIONS_PAGE_SIZE,
    DOCUMENTS_LIMIT,
    FETCH_TIMEOUT,
    FIRST_PAGE_OFFSET,
    INITIAL_BACKOFF,
    MAX_RETRIES,
)
from outline_mover.errors import OutlineApiError
from outline_mover.models.document import Collection
from outline_mover.transport import api_headers, parse_api_error, request_with_policy


class OutlineApi:
    """The subset of the Outline API needed to list, create and move documents."""

    def __init__(
        self,
        outline_url: str,
        api_token: str,
        *,
        session: requests.Session | None = None,
        max_retries: int = MAX_RETRIES,
        initial_backoff: float = INITIAL_BACKOFF,
        timeout: float = FETCH_TIMEOUT,
        rate_limit_deadline: float | None = None,
    ) -> None:
        self.base_url = outline_url.rstrip("/")
        self.api_token = api_token
        self.headers = api_headers(api_token)
        self.sess = session or requests.Session()
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.timeout = timeout
        self.rate_limit_deadline = rate_limit_deadline

        logger.debug("API ready: base_url {!r}, max_retries {!r}", self.base_url, max_retries)

    def _post(self, verb: str, payload: dict[str, Any]) -> requests.Response:
        endpoint = f"{self.base_url}/api/{verb}"
        logger.debug("Making request: {!r} {}", verb, repr(payload)[:64])
        return request_with_policy(
            self.sess,
            endpoint,
            headers=self.headers,
            payload=payload,
            max_retries=self.max_retries,
            initial_backoff=self.initial_backoff,
            timeout=self.timeout,
            rate_limit_deadline=self.rate_limit_deadline,
        )

    def call(self, verb: str, payload: dict[str, Any], *, error_text: str) -> Any:
        """Invoke an endpoint and return the ``data`` member of its JSON response.

        Raises:
            OutlineApiError: The response status is not 2xx.
        """
        response = self._post(verb, payload)
        if not response.ok:
            msg = parse_api_error(response, error_text)
            raise OutlineApiError(msg, response.status_code)
        return response.json().get("data")

    def create_collection(self, name: str) -> str:
        """Create a collection and return its id."""
        data = self.call(
            "collections.create",
            {
                "name": name,
                "description": "",
                "permission": "read",
                "color": "#123123",
                "private": False,
            },
            error_text="Collection creation failed",
        )
        return data["id"]  # type: ignore[no-any-return]

    def create_document(
        self,
        *,
        title: str,
        text: str,
        collection_id: str,
        publish: bool = True,
        parent_document_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a document, optionally nested under a parent document.

        Args:
            title: The document title.
            text: Markdown body.
            collection_id: Collection to create the document in.
            publish: Whether to publish right away.
            parent_document_id: Parent document; blank means collection root.

        Returns:
            The created document data.
        """
        payload: dict[str, Any] = {
            "title": title,
            "text": text,
            "collectionId": collection_id,
            "publish": publish,
        }
        if parent_document_id and parent_document_id.strip():
            payload["parentDocumentId"] = parent_document_id
        return self.call(  # type: ignore[no-any-return]
            "documents.create", payload, error_text="Document creation failed"
        )

    def list_collections(self) -> list[Collection]:
        """List every collection, following offset pagination until a short page."""
        collections: list[Collection] = []
        offset = FIRST_PAGE_OFFSET
        limit = COLLECTIONS_PAGE_SIZE

        while True:
            page = self.call(
                "collections.list",
                {"offset": offset, "limit": limit},
                error_text="Listing collections failed",
            )
            if not isinstance(page, list):
                break
            collections.extend(Collection(id=c["id"], name=c.get("name", "")) for c in page)
            if len(page) < limit:
                break
            offset += limit

        logger.debug("Listed {} collections", len(collections))
        return collections

    def get_collection_documents(self, collection_id: str) -> list[dict[str, Any]]:
        """Return the document listing of a collection.

        The listing may be nested (``children``) or flat (``parentDocumentId``).
        """
        data = self.call(
            "collections.documents",
            {"id": collection_id, "offset": FIRST_PAGE_OFFSET, "limit": DOCUMENTS_LIMIT},
            error_text="Fetching collection documents failed",
        )
        return data or []

    def move_document(
        self,
        document_id: str,
        collection_id: str,
        parent_document_id: str | None = None,
    ) -> dict[str, Any]:
        """Move a document to a new collection and/or parent document.

        A blank ``parent_document_id`` moves the document to the collection root.
        """
        payload: dict[str, Any] = {"id": document_id, "collectionId": collection_id}
        if parent_document_id and parent_document_id.strip():
            payload["parentDocumentId"] = parent_document_id
        return self.call(  # type: ignore[no-any-return]
            "documents.move", payload, error_text="Moving document failed"
        )

    def get_document(self, document_id: str) -> dict[str, Any] | None:
        """Return document details, or None if the lookup fails for any reason."""
        response = self._post("documents.info", {"id": document_id})
        if not response.ok:
            logger.debug("Document {!r} not found (status {})", document_id, response.status_code)
            return None
        return response.json().get("data")  # type: ignore[no-any-return]

    def auth_info(self) -> dict[str, Any]:
        """Return information about the authenticated user and team."""
        return self.call("auth.info", {}, error_text="Auth check failed")  # type: ignore[no-any-return]
