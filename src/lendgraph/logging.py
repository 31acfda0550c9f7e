"""
Package logger shared by the projection engine, the database layer and the CLI.

The level defaults to INFO and can be set with the `LENDGRAPH_LOG_LEVEL` environment variable.
"""

import logging
import os

logger = logging.getLogger("lendgraph")
logger.propagate = False
logger.setLevel(os.environ.get("LENDGRAPH_LOG_LEVEL", "INFO").upper())

_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
logger.addHandler(_handler)
