# -*- coding: utf-8 -*-
"""Line charts for ROC and precision/recall series."""

from __future__ import annotations

import logging

from matplotlib.figure import Figure

logger = logging.getLogger(__name__)


def draw_series(series, filename, caption: str, *, size=(800, 600)):
    """
    Draw ``(x, y)`` points as a red line on the unit square and save it.

    Points with a ``nan`` coordinate leave a gap in the line.  The figure is
    rendered off-screen, independently of the active pyplot backend.

    Returns
    -------
    str
        ``filename``.
    """
    dpi = 100
    fig = Figure(figsize=(size[0] / dpi, size[1] / dpi), dpi=dpi)
    ax = fig.subplots()
    if series:
        xs, ys = zip(*series)
        ax.plot(xs, ys, color="red")
    ax.set_xlim(0.0, 1.0)
    ax.set_ylim(0.0, 1.0)
    ax.set_title(caption)
    ax.grid(False)
    fig.savefig(filename)
    logger.info("Wrote %s", filename)
    return str(filename)
