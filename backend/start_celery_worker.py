#!/usr/bin/env python3
"""Start a Celery worker consuming the import queue."""

import sys

from ecuratif.core.logging import configure_logging
from ecuratif.workers.celery_app import celery_app

if __name__ == "__main__":
    configure_logging()
    celery_app.worker_main(
        [
            "worker",
            "--loglevel=info",
            "--queues=imports",
            "--pool=solo",
            "--without-mingle",
            "--without-gossip",
        ]
        + sys.argv[1:]
    )
