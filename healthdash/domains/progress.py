from typing import Callable, NamedTuple

from healthdash import export as exporter
from healthdash.models import Category
from healthdash.render import plot_csv
from healthdash.storage.recordstore import RecordStore


class GraphResult(NamedTuple):
    export: exporter.ExportResult
    plotted: bool


def graph(store: RecordStore, username: str, category: Category, export_dir,
          plotter: Callable = plot_csv) -> GraphResult:
    """Export a category to CSV, then hand the file to the plotter.

    A plotter that returns False (gnuplot missing, say) does not undo the
    export.
    """
    result = exporter.export(store, username, category, export_dir)
    plotted = bool(plotter(result.path, title=f"{username} {category.value}"))
    return GraphResult(result, plotted)
