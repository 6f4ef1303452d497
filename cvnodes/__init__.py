"""cvnodes application package for the Virtual CV API.

Contains the node model, the command forms, the hierarchy service, and
the JSON views and URL configuration that expose the CV tree over HTTP.
"""
