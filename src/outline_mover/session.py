"""Per-user mover state: loaded trees, folder pickers, and the move action."""

from dataclasses import dataclass, field

from loguru import logger

from outline_mover.core.move.relocation import (
    filter_top_level_selected,
    plan_moves,
)
from outline_mover.core.move.relocation import move_selected as move_selected_subtrees
from outline_mover.core.tree.builder import flatten_tree, load_tree
from outline_mover.models.document import Collection, DocumentTree, FlatEntry, MoveTask
from outline_mover.protocols import OutlineApiProtocol, SelectionProvider

_EMPTY_TREE = DocumentTree(roots=[], index={})


@dataclass(frozen=True)
class StaticSelection:
    """A fixed set of selected ids, e.g. given on the command line."""

    ids: frozenset[str] = field(default_factory=frozenset)

    def get_selected_ids(self) -> set[str]:
        return set(self.ids)


class MoverSession:
    """Holds the source and destination trees between user actions.

    Trees are replaced wholesale on every load, never patched.
    """

    def __init__(self, api: OutlineApiProtocol) -> None:
        self.api = api
        self.collections: list[Collection] = []
        self.source_collection_id: str | None = None
        self.source_tree: DocumentTree = _EMPTY_TREE
        self.destination_collection_id: str | None = None
        self.destination_tree: DocumentTree = _EMPTY_TREE

    def load_collections(self) -> list[Collection]:
        self.collections = self.api.list_collections()
        logger.debug("Collections loaded: {}", len(self.collections))
        return self.collections

    def _fetch_tree(self, collection_id: str) -> DocumentTree:
        docs = self.api.get_collection_documents(collection_id)
        tree = load_tree(docs)
        logger.debug("Loaded {} documents from collection {}", len(tree.index), collection_id)
        return tree

    def select_source_collection(self, collection_id: str) -> DocumentTree:
        """Load the tree of the collection documents will be moved from."""
        self.source_tree = self._fetch_tree(collection_id)
        self.source_collection_id = collection_id
        return self.source_tree

    def refresh_source(self) -> DocumentTree:
        if self.source_collection_id is None:
            return self.source_tree
        return self.select_source_collection(self.source_collection_id)

    def select_destination_collection(self, collection_id: str) -> list[FlatEntry]:
        """Load the destination tree and return its folder options."""
        self.destination_tree = self._fetch_tree(collection_id)
        self.destination_collection_id = collection_id
        return flatten_tree(self.destination_tree.roots)

    def subfolder_options(self, folder_id: str | None) -> list[FlatEntry]:
        """Flattened descendants of a destination folder.

        Empty for the collection root, for unknown ids and for leaf documents.
        """
        if not folder_id:
            return []
        folder = self.destination_tree.get(folder_id)
        if folder is None or not folder.children:
            return []
        return flatten_tree(folder.children)

    @staticmethod
    def resolve_destination_parent(
        folder_id: str | None, subfolder_id: str | None = None
    ) -> str | None:
        """Pick the destination parent: subfolder if chosen, else folder, else root."""
        return subfolder_id or folder_id or None

    @staticmethod
    def _validate(
        selection: SelectionProvider, collection_id: str | None
    ) -> tuple[set[str], str]:
        selected_ids = selection.get_selected_ids()
        if not selected_ids:
            msg = "Please select at least one document to move."
            raise ValueError(msg)
        if not collection_id:
            msg = "Please select a destination collection."
            raise ValueError(msg)
        return selected_ids, collection_id

    def plan_selected(
        self,
        selection: SelectionProvider,
        collection_id: str | None,
        parent_document_id: str | None = None,
    ) -> list[MoveTask]:
        """The move calls ``move_selected`` would make, without making them."""
        selected_ids, dest_collection_id = self._validate(selection, collection_id)
        tasks: list[MoveTask] = []
        for doc in filter_top_level_selected(self.source_tree.roots, selected_ids):
            tasks.extend(plan_moves(doc, dest_collection_id, parent_document_id))
        return tasks

    def move_selected(
        self,
        selection: SelectionProvider,
        collection_id: str | None,
        parent_document_id: str | None = None,
    ) -> list[MoveTask]:
        """Move the selected subtrees, then reload the source tree.

        The source tree is reloaded even when a move fails, so it reflects what
        actually happened remotely; the original error is re-raised.

        Raises:
            ValueError: Nothing selected, or no destination collection.
        """
        selected_ids, dest_collection_id = self._validate(selection, collection_id)
        try:
            done = move_selected_subtrees(
                self.api,
                self.source_tree.roots,
                selected_ids,
                dest_collection_id,
                parent_document_id,
            )
        except Exception:
            logger.error("Move aborted, reloading source collection")
            self._refresh_after_failure()
            raise

        logger.info("Moved {} documents", len(done))
        self.refresh_source()
        return done

    def _refresh_after_failure(self) -> None:
        try:
            self.refresh_source()
        except Exception:
            logger.opt(exception=True).warning("Reloading source collection failed")
