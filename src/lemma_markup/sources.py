"""Reading and writing notation files line by line."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterable, Iterator
from contextlib import suppress
from pathlib import Path

from lemma_markup.exceptions import (
    SourceIOError,
    SourceNotFoundError,
    SourcePermissionError,
)

logger = logging.getLogger(__name__)

Line = tuple[str, int, str]


def read_lines(path: str | Path, *, encoding: str = "utf-8") -> Iterator[Line]:
    """Yield ``(text, line_number, source)`` for every line of a file."""
    source = str(path)
    try:
        with open(path, "r", encoding=encoding) as f:
            count = 0
            for count, line in enumerate(f, start=1):
                yield line.rstrip("\r\n"), count, source
            logger.debug("Read %d line(s) from %s", count, source)
    except FileNotFoundError as e:
        raise SourceNotFoundError(f"File not found: {source}", source) from e
    except PermissionError as e:
        raise SourcePermissionError(f"Permission denied: {source}", source) from e
    except (OSError, UnicodeDecodeError) as e:
        raise SourceIOError(f"Error reading file {source}: {e}", source) from e


def write_lines(
    path: str | Path,
    lines: Iterable[str],
    *,
    encoding: str = "utf-8",
) -> None:
    """Write one line per item, replacing ``path`` atomically."""
    path = Path(path)
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding=encoding) as f:
                for line in lines:
                    f.write(line)
                    f.write("\n")
            os.replace(tmp_path, path)
        except BaseException:
            with suppress(FileNotFoundError):
                os.unlink(tmp_path)
            raise
    except FileNotFoundError as e:
        raise SourceNotFoundError(
            f"Directory not found: {path.parent}", str(path)
        ) from e
    except PermissionError as e:
        raise SourcePermissionError(
            f"Permission denied: Cannot write to {path}", str(path)
        ) from e
    except (OSError, UnicodeEncodeError) as e:
        raise SourceIOError(f"Error writing to file {path}: {e}", str(path)) from e

    logger.debug("Wrote %s", path)
