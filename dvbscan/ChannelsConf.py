"""
channels.conf Reader and Writer

A channels.conf holds one channel per line (see Channel) with optional
group separators in between. A separator starts with ':' and may carry the
number of the group's first channel:

    :Public
    Das Erste HD;ARD:11494:HC23M5O35P0S1:S19.2E:22000:5101=27:...
    :@100 Radio
    ...

Channels are numbered consecutively from 1; '@n' moves the counter forward
to n.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Optional, Tuple, Union

from .Channel import Channel


logger = logging.getLogger(__name__)

# Undecodable bytes (e.g. Latin-1 names) survive a read/write cycle
ENCODING = 'utf-8'
ENCODING_ERRORS = 'surrogateescape'

CHANNEL_GROUP_RE = re.compile(r'^:(@(?P<number>\d+)\s*)?(?P<name>.*)$')


@dataclass
class ChannelGroup:
    """Group separator line."""
    name: str
    number: Optional[int] = None

    def to_line(self) -> str:
        if not self.number:
            return f":{self.name}"
        if not self.name:
            return f":@{self.number}"
        return f":@{self.number} {self.name}"


Entry = Union[Channel, ChannelGroup]


def iter_entries(lines: Iterable[str], strict: bool = True) -> Iterator[Entry]:
    """
    Parse channels.conf lines into channels and group separators.

    Args:
        lines: Lines of a channels.conf
        strict: Raise on malformed lines instead of logging and skipping them

    Yields:
        Channel or ChannelGroup per non-empty line

    Raises:
        ValueError: On a malformed line if strict
    """
    for number, line in enumerate(lines, 1):
        line = line.rstrip('\r\n')
        if not line.strip() or line.startswith('#'):
            continue

        if line.startswith(':'):
            m = CHANNEL_GROUP_RE.match(line)
            n = m.group('number')
            yield ChannelGroup(name=m.group('name').strip(), number=int(n) if n else None)
            continue

        try:
            yield Channel.from_line(line)
        except ValueError as e:
            if strict:
                raise ValueError(f"line {number}: {e}") from None
            logger.warning("line %d: %s, skipped", number, e)


def read_entries(path: Union[str, Path], strict: bool = True) -> List[Entry]:
    """Read all channels and group separators of a channels.conf file."""
    with open(path, encoding=ENCODING, errors=ENCODING_ERRORS) as f:
        entries = list(iter_entries(f, strict=strict))
    logger.info("read %d entries from %s", len(entries), path)
    return entries


def read_channels(path: Union[str, Path], strict: bool = True) -> List[Channel]:
    """Read the channels of a channels.conf file, dropping group separators."""
    return [e for e in read_entries(path, strict=strict) if isinstance(e, Channel)]


def number_channels(entries: Iterable[Entry]) -> List[Tuple[int, Channel]]:
    """
    Assign channel numbers the way VDR does.

    Returns:
        (number, channel) pairs in file order
    """
    numbered = []
    counter = 1
    for entry in entries:
        if isinstance(entry, ChannelGroup):
            if entry.number:
                counter = max(entry.number, counter)
            continue
        numbered.append((counter, entry))
        counter += 1
    return numbered


def entry_line(entry: Entry) -> str:
    """channels.conf line of an entry, keeping a channel's subtitle PIDs."""
    if isinstance(entry, Channel):
        return entry.to_line(subtitles=True)
    return entry.to_line()


def write_entries(f: BinaryIO, entries: Iterable[Entry]) -> int:
    """
    Write entries to a binary stream, one line each.

    Bytes that were not valid UTF-8 on reading are written back unchanged.

    Returns:
        Number of channel lines written
    """
    count = 0
    for entry in entries:
        f.write((entry_line(entry) + '\n').encode(ENCODING, ENCODING_ERRORS))
        if isinstance(entry, Channel):
            count += 1
    return count


def write_channels(path: Union[str, Path], entries: Iterable[Entry]) -> int:
    """
    Write channels and group separators to a channels.conf file.

    Returns:
        Number of channel lines written
    """
    with open(path, 'wb') as f:
        count = write_entries(f, entries)
    logger.info("wrote %d channels to %s", count, path)
    return count
