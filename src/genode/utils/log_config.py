import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVEL_ENV = "GENODE_LOG_LEVEL"


def setup_logging(level=None, format_string=LOG_FORMAT, stream=sys.stdout):
    """Attach a stdout handler to the ``genode`` logger.

    The level is taken from *level*, else from the ``GENODE_LOG_LEVEL``
    environment variable, else INFO.  Calling the function again only updates
    the level and format of the existing handler.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()

    pkg_logger = logging.getLogger("genode")
    pkg_logger.setLevel(level)

    handler = next((h for h in pkg_logger.handlers if getattr(h, "_genode", False)), None)
    if handler is None:
        handler = logging.StreamHandler(stream)
        handler._genode = True
        pkg_logger.addHandler(handler)
    handler.setFormatter(logging.Formatter(format_string))
    return pkg_logger


# Setup logging when this module is imported
logger = setup_logging()
