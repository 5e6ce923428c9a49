"""Domain models for outline-mover."""

from dataclasses import dataclass, field

UNTITLED = "(Untitled)"


@dataclass(frozen=True)
class Collection:
    """An Outline collection: the top-level container of a document forest."""

    id: str
    name: str


@dataclass(eq=False)
class Document:
    """A document node. ``children`` is rebuilt locally on every tree load."""

    id: str
    title: str
    parent_document_id: str | None = None
    children: list["Document"] = field(default_factory=list)

    @property
    def display_title(self) -> str:
        return self.title or UNTITLED


@dataclass(frozen=True)
class DocumentTree:
    """Root documents of a collection plus an id -> document index."""

    roots: list[Document]
    index: dict[str, Document]

    def get(self, document_id: str) -> Document | None:
        return self.index.get(document_id)


@dataclass(frozen=True)
class FlatEntry:
    """A single line of an indented listing, used to populate folder pickers."""

    id: str
    name: str
    indent: int


@dataclass(frozen=True)
class MoveTask:
    """One remote ``documents.move`` call."""

    document_id: str
    title: str
    collection_id: str
    parent_document_id: str | None
