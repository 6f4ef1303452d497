from django.apps import AppConfig


class CvNodesConfig(AppConfig):
    name = "cvnodes"
    verbose_name = "CV nodes"
