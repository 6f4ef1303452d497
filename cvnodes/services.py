"""
Hierarchy service for the CV tree.

``HierarchyService`` is the only place that changes nodes.  Views hand it
bound command forms; it validates them, resolves parent references,
merges attribute patches and runs the cascading delete.  Read methods
return ``NodeDto`` objects, the public representation of a node.

Policies:

* An unknown ``parentId`` is ignored; the node is created (or kept) as
  if no parent had been given.
* Attribute updates are merged into the existing map; keys that the
  update does not mention are kept.
* Deleting a node removes its whole subtree, children first, in one
  transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from django import forms
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError

from .exceptions import NodeConflict, NodeNotFound, NodeValidationError
from .forms import CreateNodeCommand, UpdateNodeCommand
from .models import CvNode

logger = logging.getLogger(__name__)

DUPLICATE_ID = "A node with this id already exists."


@dataclass(frozen=True)
class NodeDto:
    """Public representation of a node."""

    id: str
    type: str
    parent_id: Optional[str]
    label: str
    description: Optional[str]
    attributes: Optional[Dict[str, Any]]
    position_x: Optional[int]
    position_y: Optional[int]

    @classmethod
    def from_node(cls, node: CvNode) -> "NodeDto":
        return cls(
            id=node.id,
            type=node.type,
            parent_id=node.parent_id,
            label=node.label,
            description=node.description,
            attributes=node.attributes,
            position_x=node.position_x,
            position_y=node.position_y,
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "parentId": self.parent_id,
            "label": self.label,
            "description": self.description,
            "attributes": self.attributes,
            "positionX": self.position_x,
            "positionY": self.position_y,
        }


def _validated(command: forms.Form) -> Dict[str, Any]:
    """Return the cleaned data of ``command`` or raise ``NodeValidationError``."""
    if not command.is_valid():
        errors = {
            field: [error["message"] for error in field_errors]
            for field, field_errors in command.errors.get_json_data().items()
        }
        raise NodeValidationError(errors)
    return command.cleaned_data


class HierarchyService:
    """Create, update, delete and query nodes of the CV tree."""

    def __init__(self, nodes=None) -> None:
        self.nodes = nodes if nodes is not None else CvNode.objects

    # ----- Queries -----

    def get_all(self) -> List[NodeDto]:
        return [NodeDto.from_node(node) for node in self.nodes.all()]

    def get(self, node_id: str) -> NodeDto:
        return NodeDto.from_node(self._get_node(node_id))

    def get_children(self, parent_id: str) -> List[NodeDto]:
        return [NodeDto.from_node(node) for node in self.nodes.by_parent(parent_id)]

    def search(self, query: str) -> List[NodeDto]:
        return [NodeDto.from_node(node) for node in self.nodes.search(query)]

    # ----- Commands -----

    @transaction.atomic
    def create(self, command: CreateNodeCommand) -> NodeDto:
        """Create the node described by a creation command.

        The node type and the attribute payload both come from the
        command's variant.  Raises ``NodeValidationError`` before touching
        the store if the command is invalid or the id is already taken.
        """
        data = _validated(command)
        if self.nodes.filter(pk=data["id"]).exists():
            raise NodeValidationError({"id": [DUPLICATE_ID]})

        node = CvNode(
            id=data["id"],
            type=command.node_type,
            label=data["label"],
            description=data["description"],
            attributes=command.attributes(),
            position_x=data["positionX"],
            position_y=data["positionY"],
        )
        if data["parentId"] is not None:
            node.parent = self._resolve_parent(data["parentId"])
        try:
            with transaction.atomic():
                node.save(force_insert=True)
        except IntegrityError:
            # Another request took the id after the check above.
            raise NodeValidationError({"id": [DUPLICATE_ID]}) from None
        logger.info("Created %s node %s (parent=%s)", node.type, node.id, node.parent_id)
        return NodeDto.from_node(node)

    @transaction.atomic
    def update(self, command: UpdateNodeCommand) -> NodeDto:
        """Apply a partial update to an existing node.

        Raises ``NodeNotFound`` if the id does not resolve, and
        ``NodeValidationError`` if the command is invalid or the new parent
        would put the node inside its own subtree.
        """
        data = _validated(command)
        node = self._get_node(data["id"], for_update=True)
        changes = command.changes()

        if "label" in changes:
            node.label = changes["label"]
        if "description" in changes:
            node.description = changes["description"]
        if "attributes" in changes:
            node.attributes = merge_attributes(node.attributes, changes["attributes"])
        if "positionX" in changes:
            node.position_x = changes["positionX"]
        if "positionY" in changes:
            node.position_y = changes["positionY"]
        if "parentId" in changes:
            parent = self._resolve_parent(changes["parentId"])
            if parent is not None:
                if node.is_ancestor_of(parent):
                    raise NodeValidationError(
                        {"parentId": ["A node cannot be moved below itself or one of its descendants."]}
                    )
                node.parent = parent

        node.save()
        logger.info("Updated node %s (%s)", node.id, ", ".join(sorted(changes)) or "no changes")
        return NodeDto.from_node(node)

    @transaction.atomic
    def delete(self, node_id: str) -> bool:
        """Delete a node and its entire subtree.

        Returns False if the id does not resolve to a node.  Raises
        ``NodeConflict``, with nothing deleted, if a child is added to the
        subtree while it is being removed.
        """
        node = self.nodes.select_for_update().filter(pk=node_id).first()
        if node is None:
            return False
        try:
            removed = self._delete_subtree(node)
        except ProtectedError:
            logger.warning("Delete of %s raced with a new child; rolled back", node_id)
            raise NodeConflict(f"Node '{node_id}' gained children while being deleted") from None
        logger.info("Deleted node %s and %d descendant(s)", node_id, removed - 1)
        return True

    # ----- Helpers -----

    def _get_node(self, node_id: str, for_update: bool = False) -> CvNode:
        queryset = self.nodes.select_for_update() if for_update else self.nodes.all()
        try:
            return queryset.get(pk=node_id)
        except CvNode.DoesNotExist:
            raise NodeNotFound(node_id) from None

    def _resolve_parent(self, parent_id: str) -> Optional[CvNode]:
        parent = self.nodes.filter(pk=parent_id).first()
        if parent is None:
            logger.debug("Ignoring unknown parent %s", parent_id)
        return parent

    def _delete_subtree(self, node: CvNode) -> int:
        """Delete ``node`` after all of its descendants; return the number removed."""
        removed = 0
        for child in list(self.nodes.by_parent(node.pk).select_for_update()):
            removed += self._delete_subtree(child)
        node.delete()
        return removed + 1


def merge_attributes(
    current: Optional[Dict[str, Any]], patch: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    """Overlay ``patch`` on ``current`` and return the result.

    Keys missing from ``patch`` keep their value.  An empty result is
    returned as ``None``.
    """
    merged = dict(current or {})
    merged.update(patch)
    return merged or None
