"""Django project package for the Virtual CV API.

Holds the settings, the root URL configuration and the WSGI entry point.
The node hierarchy lives in the ``cvnodes`` app and write access control
in the ``access`` app.
"""
