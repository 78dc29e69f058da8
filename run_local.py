#!/usr/bin/env python
"""Script to run the Django development server."""

import os
import sys

from django.core.management import execute_from_command_line


def main():
    """Create the tables and run the Django development server.

    The RQ worker and scheduler run separately
    (``manage.py rqworker --with-scheduler``); start the periodic nudge
    check once with ``manage.py schedule_nudge_checks``.
    """
    os.environ.setdefault(
        "DJANGO_SETTINGS_MODULE", "companion_notifications.settings"
    )
    execute_from_command_line([sys.argv[0], "migrate", "--run-syncdb", "--noinput"])
    execute_from_command_line([sys.argv[0], "runserver"])


if __name__ == "__main__":
    main()
