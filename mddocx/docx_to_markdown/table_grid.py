"""Place HTML table cells into a rectangular grid.

Cells are laid out honoring colspan/rowspan: a row-spanning cell repeats its
text in every row it covers (up to the last row), extra columns of a
column-spanning cell stay empty. A table that collapsed into a single
column is reflowed into a roughly square grid when its row count allows it.
Tables with a ``th`` header row kept their structure and are never reflowed.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

MAX_SPAN = 1000
MIN_REFLOW_ROWS = 4
MAX_REFLOW_COLUMNS = 12


@dataclass
class GridCell:
    """Source cell before placement.

    Attributes:
        text: Cell content (already transcoded to inline Markdown)
        colspan: Columns covered
        rowspan: Rows covered
        header: True for ``th`` cells
    """
    text: str
    colspan: int = 1
    rowspan: int = 1
    header: bool = False


@dataclass
class TableGrid:
    """Rectangular table ready for pipe-table output."""
    rows: List[List[str]]
    has_header: bool = False

    @property
    def column_count(self) -> int:
        return len(self.rows[0]) if self.rows else 0


def parse_span(value: Optional[str]) -> int:
    """Parse a colspan/rowspan attribute, clamped to 1..MAX_SPAN."""
    try:
        span = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return max(1, min(MAX_SPAN, span))


def build_grid(rows: List[List[GridCell]]) -> TableGrid:
    """Lay out cells honoring spans.

    Args:
        rows: Cells of each ``tr`` in document order

    Returns:
        TableGrid padded to the widest row
    """
    placed: Dict[Tuple[int, int], str] = {}
    width = 0
    has_header = False

    for r, cells in enumerate(rows):
        c = 0
        for cell in cells:
            while (r, c) in placed:
                c += 1
            if r == 0 and cell.header:
                has_header = True
            for dr in range(min(cell.rowspan, len(rows) - r)):
                placed[(r + dr, c)] = cell.text
                for dc in range(1, cell.colspan):
                    placed[(r + dr, c + dc)] = ''
            c += cell.colspan
        width = max(width, c)

    grid = [[placed.get((r, c), '') for c in range(width)] for r in range(len(rows))]
    return TableGrid(rows=grid, has_header=has_header)


def reflow_single_column(grid: TableGrid) -> TableGrid:
    """Reflow a headerless one-column grid of at least four rows into rows x cols.

    The column count is the divisor of the row count (2..12) closest to its
    square root. Grids that do not qualify are returned unchanged.
    """
    if grid.has_header or grid.column_count != 1 or len(grid.rows) < MIN_REFLOW_ROWS:
        return grid

    flat = [row[0] for row in grid.rows]
    total = len(flat)
    divisors = [d for d in range(2, min(MAX_REFLOW_COLUMNS, total) + 1) if total % d == 0]
    if not divisors:
        return grid

    target = round(math.sqrt(total))
    columns = min(divisors, key=lambda d: abs(d - target))
    reflowed = [flat[i:i + columns] for i in range(0, total, columns)]
    return TableGrid(rows=reflowed, has_header=grid.has_header)


def to_pipe_table(grid: TableGrid) -> str:
    """Render the grid as a GFM pipe table; the first row is the header."""
    if not grid.rows or not grid.column_count:
        return ''

    def line(cells: List[str]) -> str:
        return '| ' + ' | '.join(cells) + ' |'

    lines = [line(grid.rows[0]), line(['---'] * grid.column_count)]
    lines.extend(line(row) for row in grid.rows[1:])
    return '\n'.join(lines)
