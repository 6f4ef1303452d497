"""
URL configuration for the Virtual CV API.

The whole API is provided by the ``cvnodes`` app, which mounts its routes
under ``cv``.  See Django documentation for details.
"""

from django.urls import path, include

urlpatterns = [
    path("", include("cvnodes.urls")),
]
