# run_log.py

import logging
from datetime import datetime, tzinfo
from typing import Iterator, List

from utils import format_timestamp

logger = logging.getLogger(__name__)


class LogEntry:
    __slots__ = ("timestamp", "level", "message", "_formatted")

    def __init__(self, timestamp: str, level: str, message: str):
        self.timestamp = timestamp
        self.level = level
        self.message = message
        self._formatted = f"{timestamp} --- {level}: {message}"

    @property
    def formatted(self) -> str:
        return self._formatted

    def __repr__(self):
        return f"LogEntry({self._formatted!r})"


class RunLog:
    """
    Ordered record of what happened while handling one webhook request.

    Entries are only ever appended. The whole log is mailed as the
    deployment report once the request is done, and every entry is also
    mirrored to the service logger.
    """

    def __init__(self, date_format: str, tz: tzinfo):
        self.date_format = date_format
        self.tz = tz
        self._entries: List[LogEntry] = []

    def append(self, message: str, level: str = "INFO") -> LogEntry:
        level = level.upper()
        timestamp = format_timestamp(datetime.now(self.tz), self.date_format)
        entry = LogEntry(timestamp, level, message)
        self._entries.append(entry)

        level_no = logging.getLevelName(level)
        if not isinstance(level_no, int):
            level_no = logging.INFO
        logger.log(level_no, message)
        return entry

    def lines(self) -> List[str]:
        return [entry.formatted for entry in self._entries]

    def count(self, text: str) -> int:
        """Number of entries whose message contains text."""
        return sum(1 for entry in self._entries if text in entry.message)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

    def __len__(self):
        return len(self._entries)
