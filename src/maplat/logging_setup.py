"""Root logger configuration for command-line entry points.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
application decides where records go by calling ``configure_logging()``.
"""

import logging
from pathlib import Path
from typing import Optional, Union

__all__ = ['configure_logging', 'LOG_FORMAT', 'DATE_FORMAT']

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configure_logging(level: str = "INFO",
                      log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Install console (and optional file) handlers on the root logger.

    Existing root handlers are removed, so calling this twice does not
    duplicate output.

    Parameters
    ----------
    level : str
        Level name, e.g. ``"DEBUG"``.
    log_file : str or Path, optional
        Also write records to this file; parent directories are created.

    Returns
    -------
    logging.Logger
        The root logger.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    return root
