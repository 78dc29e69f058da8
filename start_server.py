"""Production server startup script for the companion notification service.

Starts the Django application under Gunicorn. Delivery and nudge jobs run
in separate ``rqworker --with-scheduler`` processes.
"""

import os
import sys

from gunicorn.app.wsgiapp import run


def main():
    """Start the HTTP API using Gunicorn.

    ``PORT``, ``GUNICORN_WORKERS`` and ``GUNICORN_THREADS`` override the
    defaults (8000, 4 and 2). Access and error logs go to stdout/stderr.
    """
    sys.argv = [
        "gunicorn",
        "companion_notifications.wsgi:application",
        "--bind",
        f"0.0.0.0:{os.getenv('PORT', '8000')}",
        "--workers",
        os.getenv("GUNICORN_WORKERS", "4"),
        "--threads",
        os.getenv("GUNICORN_THREADS", "2"),
        "--timeout",
        "30",
        "--access-logfile",
        "-",
        "--error-logfile",
        "-",
    ]
    run()


if __name__ == "__main__":
    main()
