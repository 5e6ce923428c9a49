"""Top-level selection and ordered, recursive relocation of document subtrees."""

from loguru import logger

from outline_mover.models.document import Document, MoveTask
from outline_mover.protocols import OutlineApiProtocol


def filter_top_level_selected(tree: list[Document], selected_ids: set[str]) -> list[Document]:
    """Return selected documents that have no selected ancestor, in pre-order.

    A selected document moves together with its whole subtree, so its selected
    descendants are not reported separately. Unselected documents are searched
    for selected descendants.
    """
    result: list[Document] = []
    for node in tree:
        if node.id in selected_ids:
            result.append(node)
        elif node.children:
            result.extend(filter_top_level_selected(node.children, selected_ids))
    return result


def plan_moves(
    doc: Document,
    collection_id: str,
    parent_document_id: str | None,
) -> list[MoveTask]:
    """Ordered move calls that recreate ``doc``'s subtree at the destination.

    The document comes first; every child is then moved under its own,
    already-moved parent, so the hierarchy is preserved.
    """
    tasks = [
        MoveTask(
            document_id=doc.id,
            title=doc.display_title,
            collection_id=collection_id,
            parent_document_id=parent_document_id or None,
        )
    ]
    for child in doc.children:
        tasks.extend(plan_moves(child, collection_id, doc.id))
    return tasks


def move_recursively(
    api: OutlineApiProtocol,
    doc: Document,
    collection_id: str,
    parent_document_id: str | None,
) -> list[MoveTask]:
    """Move a document and its descendants, one call at a time.

    Calls are strictly sequential: a parent is always in place before its
    children move. Errors are not caught; a failure stops the chain and the
    documents moved so far stay where they are.

    Returns:
        The tasks that were executed.
    """
    done: list[MoveTask] = []
    for task in plan_moves(doc, collection_id, parent_document_id):
        logger.info(
            "Moving document {} to collection {}, parent {}",
            task.document_id,
            task.collection_id,
            task.parent_document_id or "(root)",
        )
        api.move_document(task.document_id, task.collection_id, task.parent_document_id)
        done.append(task)
    return done


def move_selected(
    api: OutlineApiProtocol,
    tree: list[Document],
    selected_ids: set[str],
    collection_id: str,
    parent_document_id: str | None,
) -> list[MoveTask]:
    """Move every top-level selected subtree, in tree order."""
    done: list[MoveTask] = []
    for doc in filter_top_level_selected(tree, selected_ids):
        done.extend(move_recursively(api, doc, collection_id, parent_document_id))
    return done
