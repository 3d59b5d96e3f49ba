import os
import re
import glob
import logging
from typing import List

from ai_client import OPTION_MARKER, OPTION_COUNT

logger = logging.getLogger("options")

FENCE_RE = re.compile(r"```(html)?", re.IGNORECASE)
OPTION_FILE_RE = re.compile(r"^generated(\d+)\.html$")
STATIC_PREFIX = "/static"


def option_filename(index: int) -> str:
    return f"generated{index}.html"


def clean_option(option: str) -> str:
    # Fences are only stripped when the option opens with one
    if option.startswith("```"):
        return FENCE_RE.sub("", option).strip()
    return option


def split_options(text: str, marker: str = OPTION_MARKER, limit: int = OPTION_COUNT) -> List[str]:
    """Split raw model output into at most `limit` non-empty, cleaned documents."""
    if not text:
        return []
    segments = [s.strip() for s in text.split(marker)]
    segments = [s for s in segments if s][:limit]
    return [clean_option(s) for s in segments]


def clear_options(static_dir: str) -> None:
    for path in glob.glob(os.path.join(static_dir, "generated*.html")):
        if OPTION_FILE_RE.match(os.path.basename(path)):
            os.remove(path)
            logger.info("Removed previous option %s", path)


def write_options(options: List[str], static_dir: str) -> List[str]:
    """Persist options as generated1.html..generatedN.html and return their public paths.

    The previous option set is removed first so a smaller response never leaves
    stale options from an earlier generation behind.
    """
    os.makedirs(static_dir, exist_ok=True)
    clear_options(static_dir)
    files = []
    for i, option in enumerate(options, start=1):
        filename = option_filename(i)
        with open(os.path.join(static_dir, filename), "w", encoding="utf-8") as f:
            f.write(option)
        logger.info("Wrote option %s (%d chars)", filename, len(option))
        files.append(f"{STATIC_PREFIX}/{filename}")
    return files
