"""gnuplot adapter for exported CSV files."""
import logging
import shutil
import subprocess
from pathlib import Path

from healthdash.config import GNUPLOT

logger = logging.getLogger(__name__)


def gnuplot_script(csv_path: Path, title: str) -> str:
    return (
        "set datafile separator ','; "
        "set xdata time; set timefmt '%Y-%m-%d %H:%M:%S'; "
        "set format x \"%Y-%m-%d\\n%H:%M\"; "
        f"set title 'Health Data - {title}'; "
        "set xlabel 'DateTime'; set ylabel 'Value'; "
        "set key autotitle columnhead; "
        f"plot '{csv_path}' using 1:2 with linespoints title '{title}'"
    )


def plot_csv(csv_path, title: str = None, gnuplot: str = GNUPLOT) -> bool:
    """
    Plot a two-column (timestamp, value) CSV with gnuplot.

    Returns False when gnuplot is unavailable or fails; plotting is optional
    and never raises for those cases.
    """
    csv_path = Path(csv_path)
    exe = shutil.which(gnuplot)
    if exe is None:
        logger.warning("gnuplot not found on PATH (%s); skipping graph", gnuplot)
        return False

    cmd = [exe, "-persist", "-e", gnuplot_script(csv_path, title or csv_path.name)]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        logger.warning("could not run gnuplot: %s", e)
        return False
    if result.returncode != 0:
        logger.warning("gnuplot exited with %d: %s", result.returncode, result.stderr.strip())
        return False
    return True
