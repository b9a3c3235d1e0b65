"""
Username/password store backed by ``users.txt``.

One ``<username> <hash>`` pair per line; hashes are passlib pbkdf2_sha256
strings, which never contain whitespace.
"""
import logging
import os
from pathlib import Path

from passlib.context import CryptContext

from healthdash.errors import StorageError
from healthdash.storage.recordstore import RecordStore, check_username

logger = logging.getLogger(__name__)

password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(plain: str) -> str:
    return password_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return password_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # unknown or malformed hash in users.txt
        return False


class AccountStore:
    def __init__(self, users_file, records: RecordStore):
        self.users_file = Path(users_file)
        self.records = records

    def _read(self) -> dict:
        users = {}
        if not self.users_file.exists():
            return users
        try:
            with self.users_file.open("r", encoding="utf-8") as f:
                for line in f:
                    parts = line.split()
                    if len(parts) != 2:
                        continue
                    users.setdefault(parts[0], parts[1])
        except OSError as e:
            raise StorageError(f"Cannot read {self.users_file}: {e}") from e
        return users

    def exists(self, username: str) -> bool:
        return username in self._read()

    def create(self, username: str, password: str) -> bool:
        check_username(username)
        if not password:
            logger.debug("signup rejected for %s: empty password", username)
            return False
        if self.exists(username):
            logger.debug("signup rejected for %s: username taken", username)
            return False
        try:
            self.users_file.parent.mkdir(parents=True, exist_ok=True)
            with self.users_file.open("a", encoding="utf-8") as f:
                f.write(f"{username} {hash_password(password)}\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise StorageError(f"Cannot write {self.users_file}: {e}") from e
        self.records.create(username)
        return True

    def authenticate(self, username: str, password: str) -> bool:
        token = self._read().get(username)
        if token is None:
            return False
        return verify_password(password, token)
