"""Line-oriented helper: one hostname in, one verdict out."""

import logging
from typing import BinaryIO, TextIO

from .client import MasterClient

logger = logging.getLogger(__name__)

ALLOWED = "OK"
BLOCKED = "ERR"


def run_helper(client: MasterClient, stdin: BinaryIO, stdout: TextIO) -> int:
    """
    Answer hostnames read from stdin until end of input.

    Each line is sent to the master and answered with OK (allowed) or
    ERR (blocked) on stdout, flushed immediately so the caller can read
    the verdict before writing the next hostname. Lines are decoded as
    UTF-8 with invalid bytes replaced, so a garbled hostname still gets
    a verdict instead of ending the loop.

    Args:
        client: Connected master client
        stdin: Binary stream of hostnames, one per line (text streams work too)
        stdout: Stream receiving the verdicts

    Returns:
        Number of hostnames answered

    Raises:
        TransportError: If the master cannot be reached
    """
    answered = 0
    for line in stdin:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        host = line.rstrip("\r\n")
        ok = client.validate(host)
        stdout.write(f"{ALLOWED if ok else BLOCKED}\n")
        stdout.flush()
        answered += 1
    logger.debug(f"End of input after {answered} host(s)")
    return answered
