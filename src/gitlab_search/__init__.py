"""Search file contents across all repositories of your GitLab groups."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
