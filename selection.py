import os
import logging

from options import OPTION_FILE_RE

logger = logging.getLogger("selection")

SELECTION_FILENAME = "generated.html"


class OptionNotFound(LookupError):
    pass


def resolve_option(static_dir: str, reference: str) -> str:
    """Map a client reference (e.g. /static/generated2.html) to the option file on disk.

    Only the basename is honoured, and only generated option files resolve.
    """
    name = os.path.basename(reference or "")
    if not OPTION_FILE_RE.match(name):
        raise OptionNotFound(reference)
    path = os.path.join(static_dir, name)
    if not os.path.isfile(path):
        raise OptionNotFound(reference)
    return path


def read_option(static_dir: str, reference: str) -> str:
    with open(resolve_option(static_dir, reference), "r", encoding="utf-8") as f:
        return f.read()


def select_option(static_dir: str, reference: str) -> str:
    code = read_option(static_dir, reference)
    with open(os.path.join(static_dir, SELECTION_FILENAME), "w", encoding="utf-8") as f:
        f.write(code)
    logger.info("Selected %s as current option", os.path.basename(reference))
    return code
