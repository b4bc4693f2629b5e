import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'

def setup_logging(log_dir: Optional[Path] = None, debug: bool = False) -> logging.Logger:
    """Configures the ``mjo`` logger.

    Logs go to ``<log_dir>/mjo.log`` when a directory is given, otherwise to stderr.
    Repeated calls replace the previously installed handler.
    """
    logger = logging.getLogger("mjo")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_dir / "mjo.log")
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
