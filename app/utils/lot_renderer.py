# app/utils/lot_renderer.py
"""Plain-text layouts of the lot and queue, shared by the console and /lot/layout."""

from typing import List
from app.services.lot import Lot
from app.services.wait_queue import WaitQueue

CELL_WIDTH = 12
TRUNCATED = "…"


def _fit(label: str, width: int) -> str:
    if len(label) <= width:
        return label
    return label[:width - 1] + TRUNCATED


def render_lot(lot: Lot) -> str:
    """
    Grid view: vehicle id per occupied slot, '---' for free ones.
    Ids wider than a cell are cut and end in TRUNCATED; the detailed layout
    always shows them in full.
    """
    border = "+" + "+".join("-" * CELL_WIDTH for _ in range(lot.cols)) + "+"
    lines = [f"Parking Layout ({lot.rows}x{lot.cols}) - '---' = free, {TRUNCATED} = id cut short", border]
    for row in range(lot.rows):
        cells = []
        for col in range(lot.cols):
            s = lot.slot(row, col)
            label = s.vehicle_id if s.occupied else "---"
            cells.append(f" {_fit(label, CELL_WIDTH - 1):<{CELL_WIDTH - 1}}")
        lines.append("|" + "|".join(cells) + "|")
        lines.append(border)
    return "\n".join(lines)


def render_lot_detailed(lot: Lot) -> str:
    """One line per row, each slot with its index and entry time."""
    lines = ["Parking slots with indices (row,col) and status:"]
    for row in range(lot.rows):
        cells: List[str] = []
        for col in range(lot.cols):
            s = lot.slot(row, col)
            if s.occupied:
                cells.append(f"[{row},{col}] OCC({s.vehicle_id} @{s.entry_time:%Y-%m-%d %H:%M})")
            else:
                cells.append(f"[{row},{col}] FREE")
        lines.append("  ".join(cells))
    return "\n".join(lines)


def render_queue(queue: WaitQueue) -> str:
    if queue.is_empty:
        return "Waiting queue is empty."
    lines = ["Waiting queue (front -> rear):"]
    lines += [f"{i}. {vehicle_id}" for i, vehicle_id in enumerate(queue.peek_all(), start=1)]
    return "\n".join(lines)
