"""
URL patterns for the cvnodes app.

All routes live under ``cv``; ``cv/nodes/<key>`` serves both the
single-node operations and the typed creation endpoints.
"""

from django.urls import path

from . import views


urlpatterns = [
    path("cv", views.all_nodes, name="all_nodes"),
    path("cv/search", views.search, name="search"),
    path("cv/nodes/<str:node_id>/children", views.children, name="node_children"),
    path("cv/nodes/<str:key>", views.NodeView.as_view(), name="node"),
]
