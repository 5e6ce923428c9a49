"""Protocols for dependency injection in outline-mover."""

from typing import Any, Protocol, runtime_checkable

from outline_mover.models.document import Collection


@runtime_checkable
class OutlineApiProtocol(Protocol):
    """The Outline API operations used by the mover session and the relocation engine."""

    def list_collections(self) -> list[Collection]:
        """Return every collection."""
        ...

    def get_collection_documents(self, collection_id: str) -> list[dict[str, Any]]:
        """Return the (possibly nested) document listing of a collection."""
        ...

    def move_document(
        self,
        document_id: str,
        collection_id: str,
        parent_document_id: str | None = None,
    ) -> dict[str, Any]:
        """Move a document to a collection, optionally under a parent document."""
        ...


@runtime_checkable
class SettingsStoreProtocol(Protocol):
    """Key/value storage for string settings."""

    def get(self, keys: list[str]) -> dict[str, str | None]:
        """Return the stored value for each key, None when unset."""
        ...

    def set(self, values: dict[str, str]) -> None:
        """Persist the given values."""
        ...


@runtime_checkable
class SelectionProvider(Protocol):
    """Source of the document ids currently selected by the user."""

    def get_selected_ids(self) -> set[str]:
        """Return the selected document ids."""
        ...
