#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

Delegates to Django's command-line interface with the settings of the
Virtual CV API (``virtualcv.settings``).  Typical use is
``python manage.py migrate`` followed by ``python manage.py runserver``.
"""

import os
import sys


def main() -> None:
    """Run administrative tasks."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "virtualcv.settings")
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
