"""
JSON views for the CV tree.

Reads are plain function-based views.  Everything addressed through
``cv/nodes/<key>`` goes through ``NodeView``: ``key`` is a node id for
GET, PUT and DELETE, and the kind of node to create (``profile``,
``category``, ``item``, ``skill-group`` or ``skill``) for POST.

Write access control is not handled here; ``access.middleware`` rejects
unauthorised writes before they reach these views.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from django.http import HttpResponse, JsonResponse
from django.urls import reverse
from django.views import View
from django.views.decorators.http import require_GET

from .exceptions import NodeConflict, NodeError, NodeNotFound, NodeValidationError
from .forms import UpdateNodeCommand, command_for_slug
from .services import HierarchyService

logger = logging.getLogger(__name__)

_service = HierarchyService()


def error_response(
    message: str, code: str, status: int, errors: Optional[Dict[str, Any]] = None
) -> JsonResponse:
    body: Dict[str, Any] = {"message": message, "code": code}
    if errors:
        body["errors"] = errors
    return JsonResponse(body, status=status)


def _node_error_response(exc: NodeError) -> JsonResponse:
    if isinstance(exc, NodeValidationError):
        return error_response(exc.message, exc.code, 400, exc.errors)
    if isinstance(exc, NodeNotFound):
        return error_response(exc.message, exc.code, 404)
    if isinstance(exc, NodeConflict):
        return error_response(exc.message, exc.code, 409)
    return error_response(exc.message, exc.code, 400)


def _read_json_object(request) -> Dict[str, Any]:
    """Decode the request body, which must be a JSON object."""
    try:
        payload = json.loads(request.body or b"null")
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise NodeValidationError({}, "Request body is not valid JSON") from None
    if not isinstance(payload, dict):
        raise NodeValidationError({}, "Request body must be a JSON object")
    return payload


@require_GET
def all_nodes(request):
    """Return every node of the CV."""
    nodes = _service.get_all()
    return JsonResponse({"nodes": [node.to_json() for node in nodes]})


@require_GET
def children(request, node_id: str):
    """Return the direct children of a node (empty for unknown ids)."""
    nodes = _service.get_children(node_id)
    return JsonResponse([node.to_json() for node in nodes], safe=False)


@require_GET
def search(request):
    """Case-insensitive search over labels and descriptions."""
    query = request.GET.get("q")
    if query is None:
        return error_response("Missing query parameter 'q'", "VALIDATION_ERROR", 400)
    nodes = _service.search(query)
    return JsonResponse([node.to_json() for node in nodes], safe=False)


class NodeView(View):
    """Single-node endpoint: fetch, create, update and delete."""

    http_method_names = ["get", "post", "put", "delete", "head", "options"]
    service = _service

    def dispatch(self, request, *args, **kwargs):  # type: ignore[override]
        try:
            return super().dispatch(request, *args, **kwargs)
        except NodeError as exc:
            logger.debug("%s %s failed: %s", request.method, request.path, exc.code)
            return _node_error_response(exc)

    def get(self, request, key: str):  # type: ignore[override]
        return JsonResponse(self.service.get(key).to_json())

    def post(self, request, key: str):  # type: ignore[override]
        command_class = command_for_slug(key)
        if command_class is None:
            return error_response(f"Unknown node kind '{key}'", "NOT_FOUND", 404)
        created = self.service.create(command_class(_read_json_object(request)))
        response = JsonResponse(created.to_json(), status=201)
        response["Location"] = reverse("node", args=[created.id])
        return response

    def put(self, request, key: str):  # type: ignore[override]
        payload = _read_json_object(request)
        if payload.get("id") != key:
            return error_response("Node id in path and body must match", "ID_MISMATCH", 400)
        updated = self.service.update(UpdateNodeCommand(payload))
        return JsonResponse(updated.to_json())

    def delete(self, request, key: str):  # type: ignore[override]
        if not self.service.delete(key):
            raise NodeNotFound(key)
        return HttpResponse(status=204)
