import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List, NamedTuple, Optional

from healthdash.errors import StorageError
from healthdash.models import TIMESTAMP_FORMAT

logger = logging.getLogger(__name__)

_LINE = re.compile(r"Reminder: (?P<text>.*), DateTime: (?P<ts>[^,]*), User: (?P<user>\S+)\s*")


class Reminder(NamedTuple):
    text: str
    timestamp: str
    username: str


class ReminderLog:
    """Append-only reminder log shared by every user (``reminders.txt``)."""

    def __init__(self, path):
        self.path = Path(path)

    def add(self, username: str, text: str, at: Optional[datetime] = None) -> Reminder:
        text = text.strip()
        if not text:
            raise ValueError("Empty reminder")
        if "\n" in text or "\r" in text:
            raise ValueError("Reminder must be a single line")
        ts = (at or datetime.now()).strftime(TIMESTAMP_FORMAT)
        reminder = Reminder(text, ts, username)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(f"Reminder: {text}, DateTime: {ts}, User: {username}\n")
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        return reminder

    def for_user(self, username: str) -> List[Reminder]:
        if not self.path.exists():
            return []
        out = []
        try:
            with self.path.open("r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    m = _LINE.fullmatch(line.rstrip("\r\n"))
                    if m is None:
                        logger.debug("skipping malformed reminder line: %r", line)
                        continue
                    if m.group("user") == username:
                        out.append(Reminder(m.group("text"), m.group("ts"), m.group("user")))
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        return out
