"""
Configuration for healthdash.

Defaults live in ``~/.healthdash``; each setting can be overridden through
the environment, and the CLI can override again with flags.

Environment variables:
    HEALTHDASH_HOME: directory holding record files, users.txt and reminders.txt
    HEALTHDASH_EXPORT_DIR: directory receiving sleep_data.csv / weight_data.csv
    HEALTHDASH_GNUPLOT: gnuplot executable used for graphs
"""
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

DATA_DIR = Path.home() / ".healthdash"
USERS_FILE = "users.txt"
REMINDERS_FILE = "reminders.txt"
GNUPLOT = "gnuplot"


class Settings(BaseModel):
    data_dir: Path = DATA_DIR
    # None means the process working directory, where exports always went
    export_dir: Optional[Path] = None
    gnuplot: str = GNUPLOT

    @property
    def users_file(self) -> Path:
        return self.data_dir / USERS_FILE

    @property
    def reminders_file(self) -> Path:
        return self.data_dir / REMINDERS_FILE

    def resolved_export_dir(self) -> Path:
        return self.export_dir if self.export_dir is not None else Path.cwd()


def load_settings(data_dir=None, export_dir=None) -> Settings:
    """Build settings from explicit arguments, then the environment, then defaults."""
    values = {}
    home = data_dir or os.getenv("HEALTHDASH_HOME")
    if home:
        values["data_dir"] = Path(home).expanduser()
    exports = export_dir or os.getenv("HEALTHDASH_EXPORT_DIR")
    if exports:
        values["export_dir"] = Path(exports).expanduser()
    gnuplot = os.getenv("HEALTHDASH_GNUPLOT")
    if gnuplot:
        values["gnuplot"] = gnuplot
    return Settings(**values)
