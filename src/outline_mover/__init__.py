"""Bulk-move Outline documents, with their sub-trees, between collections."""

from outline_mover.api import OutlineApi
from outline_mover.protocols import OutlineApiProtocol, SelectionProvider, SettingsStoreProtocol
from outline_mover.session import MoverSession, StaticSelection
from outline_mover.settings import JsonSettingsStore, SettingsManager

__all__ = [
    "JsonSettingsStore",
    "MoverSession",
    "OutlineApi",
    "OutlineApiProtocol",
    "SelectionProvider",
    "SettingsManager",
    "SettingsStoreProtocol",
    "StaticSelection",
]
