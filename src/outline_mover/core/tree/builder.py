"""Build document trees from Outline listings, and flatten them back for display."""

from typing import Any

from outline_mover.models.document import Document, DocumentTree, FlatEntry


def flatten_api_docs(
    docs: list[dict[str, Any]],
    parent_document_id: str | None = None,
) -> list[Document]:
    """Flatten a possibly nested API listing into a pre-order list of documents.

    A nested child without a ``parentDocumentId`` is given the id of the node it
    is nested under. A parent id already present is kept as is. The input is not
    modified.

    Args:
        docs: Document dicts as returned by ``collections.documents``.
        parent_document_id: Parent id to assign to top-level entries lacking one.

    Returns:
        Documents in pre-order, with empty ``children``.
    """
    flat: list[Document] = []
    for raw in docs:
        flat.append(
            Document(
                id=raw["id"],
                title=raw.get("title") or "",
                parent_document_id=raw.get("parentDocumentId") or parent_document_id,
            )
        )
        children = raw.get("children") or []
        if children:
            flat.extend(flatten_api_docs(children, raw["id"]))
    return flat


def build_tree(flat_docs: list[Document]) -> DocumentTree:
    """Link a flat list of documents into a tree.

    Existing ``children`` are discarded first. A document whose parent is not in
    the list becomes a root. Sibling order follows the order of ``flat_docs``.
    """
    index: dict[str, Document] = {}
    for doc in flat_docs:
        doc.children = []
        index[doc.id] = doc

    roots: list[Document] = []
    for doc in flat_docs:
        parent = index.get(doc.parent_document_id) if doc.parent_document_id else None
        if parent is not None:
            parent.children.append(doc)
        else:
            roots.append(doc)

    return DocumentTree(roots=roots, index=index)


def load_tree(docs: list[dict[str, Any]]) -> DocumentTree:
    """Build a tree straight from a ``collections.documents`` response."""
    return build_tree(flatten_api_docs(docs))


def flatten_tree(tree: list[Document], indent: int = 0) -> list[FlatEntry]:
    """Pre-order listing of a tree, one indent level per depth."""
    flat: list[FlatEntry] = []
    for node in tree:
        flat.append(FlatEntry(id=node.id, name=node.display_title, indent=indent))
        if node.children:
            flat.extend(flatten_tree(node.children, indent + 1))
    return flat

