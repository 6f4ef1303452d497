"""Errors raised by the hierarchy service.

Each error carries a human readable ``message`` and a machine readable
``code``; the views turn them into JSON error bodies.
"""

from __future__ import annotations

from typing import Dict, List, Optional


class NodeError(Exception):
    """Base exception for hierarchy failures."""

    code = "NODE_ERROR"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NodeValidationError(NodeError):
    """A command failed validation; ``errors`` maps field names to messages."""

    code = "VALIDATION_ERROR"

    def __init__(self, errors: Dict[str, List[str]], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.errors = errors


class NodeNotFound(NodeError):
    """The addressed node id does not resolve to an existing node."""

    code = "NOT_FOUND"

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node '{node_id}' not found")
        self.node_id = node_id


class NodeConflict(NodeError):
    """The tree changed underneath an operation, which was rolled back."""

    code = "CONFLICT"
