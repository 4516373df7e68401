"""
Process output draining.

A StandardOutputReader is submitted to the shared output pool right after the
command process starts. It reads the process's combined stdout/stderr stream
line by line until end of data and hands the accumulated text back through
the task's Future.
"""

import logging
import os
from typing import IO, Optional

logger = logging.getLogger(__name__)


class StandardOutputReader:
    """
    Callable that drains a text stream and returns everything it read.

    Each line is stored without its original terminator and followed by
    ``line_separator``. A read error ends the read and is logged; the text
    read up to that point is still returned. The stream is closed on every
    exit path.
    """

    def __init__(self, stream: IO[str], line_separator: str = os.linesep):
        """
        Args:
            stream: Text stream to drain, usually ``Popen.stdout``
            line_separator: Appended after every line read
        """
        self.stream = stream
        self.line_separator = line_separator

    def __call__(self) -> Optional[str]:
        """
        Read the stream to the end.

        Returns:
            The accumulated output, or None if the stream produced no data
        """
        chunks = []

        try:
            for line in iter(self.stream.readline, ""):
                chunks.append(line.rstrip("\r\n"))
                chunks.append(self.line_separator)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading from stream: {self.stream}", exc_info=e)
        finally:
            try:
                self.stream.close()
            except OSError as e:
                logger.error(f"Error closing stream: {self.stream}", exc_info=e)

        return "".join(chunks) if chunks else None
