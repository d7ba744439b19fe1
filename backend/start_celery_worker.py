#!/usr/bin/env python3
"""Start the webhook delivery worker."""

import sys
import warnings

# containers run the worker as root
warnings.filterwarnings("ignore", category=UserWarning, message=".*superuser privileges.*")
warnings.filterwarnings("ignore", category=RuntimeWarning, message=".*superuser privileges.*")

from dairycart.core.logging import configure_logging  # noqa: E402
from dairycart.workers.celery_app import celery_app  # noqa: E402

if __name__ == "__main__":
    configure_logging()
    celery_app.worker_main(
        [
            "worker",
            "--loglevel=info",
            "--queues=webhooks",
            "--pool=solo",
            "--without-mingle",
            "--without-gossip",
        ]
        + sys.argv[1:]
    )
