"""
Per-user, per-category record files.

Each (username, category) pair owns ``<username>_<Category>.txt`` in the
store's base directory: one encoded record per line, oldest first. A
record is addressed only by its 1-based line position, and deleting a line
shifts every later position down by one.
"""
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Iterator, Tuple

from healthdash import codec
from healthdash.errors import (
    InvalidUsernameError,
    NotFoundError,
    ParseError,
    PositionNotFoundError,
    StorageError,
)
from healthdash.models import Category

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


def check_username(username: str) -> str:
    if not username or username != username.strip():
        raise InvalidUsernameError(f"Invalid username: {username!r}")
    if any(c.isspace() for c in username) or "/" in username or "\\" in username:
        raise InvalidUsernameError(f"Username may not contain whitespace or path separators: {username!r}")
    if username in (".", ".."):
        raise InvalidUsernameError(f"Invalid username: {username!r}")
    return username


class RecordStore:
    def __init__(self, base_dir):
        self.base_dir = Path(base_dir)

    def path_for(self, username: str, category: Category) -> Path:
        check_username(username)
        return self.base_dir / f"{username}_{category.value}.txt"

    def exists(self, username: str, category: Category) -> bool:
        return self.path_for(username, category).is_file()

    def create(self, username: str) -> None:
        """Create an empty record file for every category (signup)."""
        self._ensure_dir()
        for category in Category:
            path = self.path_for(username, category)
            try:
                path.touch(exist_ok=True)
            except OSError as e:
                raise StorageError(f"Cannot create {path}: {e}") from e

    def append(self, username: str, category: Category, record) -> None:
        if record.category != category:
            raise ValueError(f"{record.category.value} record cannot be stored as {category.value}")
        line = codec.encode(record)
        path = self.path_for(username, category)
        self._ensure_dir()
        try:
            with path.open("a", encoding=ENCODING, newline="") as f:
                if self._missing_terminator(path):
                    f.write("\n")
                f.write(line + "\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise StorageError(f"Cannot append to {path}: {e}") from e
        logger.debug("appended to %s: %s", path.name, line)

    def list_all(self, username: str, category: Category) -> Iterator[Tuple[int, str]]:
        """
        Yield ``(position, line)`` pairs in file order, without terminators.

        The file is checked up front, so a missing file raises NotFoundError
        here rather than on first iteration. Each call re-reads the file.
        """
        path = self._existing(username, category)
        return self._iter_lines(path)

    def read_records(self, username: str, category: Category):
        """Yield ``(position, record)`` for every line that decodes."""
        for position, line in self.list_all(username, category):
            try:
                yield position, codec.decode(line, category)
            except ParseError as e:
                logger.debug("skipping line %d of %s: %s", position, category.value, e)

    def delete_all(self, username: str, category: Category) -> None:
        path = self.path_for(username, category)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError(f"No {category.value} records for {username}") from None
        except OSError as e:
            raise StorageError(f"Cannot remove {path}: {e}") from e
        logger.debug("removed %s", path)

    def delete_at(self, username: str, category: Category, position: int) -> str:
        """
        Remove the line at ``position`` and return it (without terminator).

        The surviving lines are streamed into a temp file next to the
        original, which then replaces it in one rename. Until that rename the
        original is never touched; the temp file is removed on every path
        that does not commit.
        """
        path = self._existing(username, category)
        if position < 1:
            raise PositionNotFoundError(position, path)

        removed = None
        committed = False
        try:
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        except OSError as e:
            raise StorageError(f"Cannot create temp file for {path}: {e}") from e
        tmp = Path(tmp_name)
        try:
            # surrogateescape keeps undecodable bytes of foreign lines intact
            with open(fd, "w", encoding=ENCODING, errors="surrogateescape", newline="") as out, \
                    path.open("r", encoding=ENCODING, errors="surrogateescape", newline="") as src:
                for current, line in enumerate(src, start=1):
                    if current == position:
                        removed = line
                    else:
                        out.write(line)
                out.flush()
                os.fsync(out.fileno())
            if removed is None:
                raise PositionNotFoundError(position, path)
            # mkstemp creates 0600; keep the record file's own mode
            os.chmod(tmp, stat.S_IMODE(path.stat().st_mode))
            os.replace(tmp, path)
            committed = True
        except OSError as e:
            raise StorageError(f"Cannot rewrite {path}: {e}") from e
        finally:
            if not committed:
                tmp.unlink(missing_ok=True)

        logger.debug("deleted line %d of %s", position, path.name)
        return removed.rstrip("\r\n")

    # --- helpers ---

    def _ensure_dir(self) -> None:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create {self.base_dir}: {e}") from e

    def _existing(self, username: str, category: Category) -> Path:
        path = self.path_for(username, category)
        if not path.is_file():
            raise NotFoundError(f"No {category.value} records for {username}")
        return path

    @staticmethod
    def _missing_terminator(path: Path) -> bool:
        # a hand-edited file may end without a newline
        if path.stat().st_size == 0:
            return False
        with path.open("rb") as f:
            f.seek(-1, os.SEEK_END)
            return f.read(1) not in (b"\n", b"\r")

    @staticmethod
    def _iter_lines(path: Path) -> Iterator[Tuple[int, str]]:
        with path.open("r", encoding=ENCODING, errors="replace", newline="") as f:
            for position, line in enumerate(f, start=1):
                yield position, line.rstrip("\r\n")
