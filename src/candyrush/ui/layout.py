from typing import Optional, Tuple

from candyrush.constants import BOARD_MAX_HEIGHT_PCT, BOARD_MAX_WIDTH_PCT, BOTTOM_MARGIN, HUD_HEIGHT


def grid_to_world(row: float, col: float, cell_spacing: float = 0.0) -> Tuple[float, float]:
    """Map a board cell to presentation coordinates in board units (1 unit per cell)."""
    step = 1.0 + cell_spacing
    return col * step, row * step


def compute_board_geometry(window_width: int, window_height: int, rows: int, cols: int):
    """Return (tile_size, start_x, start_y) for a board centred horizontally above the bottom margin.

    Shared by the renderer and the pointer mapping so clicks land on the tiles that are drawn.
    """
    max_board_w = window_width * BOARD_MAX_WIDTH_PCT
    max_board_h = (window_height - BOTTOM_MARGIN - HUD_HEIGHT) * BOARD_MAX_HEIGHT_PCT
    tile_size = int(min(max_board_w / cols, max_board_h / rows))
    if tile_size < 20:
        tile_size = 20
    total_width = cols * tile_size
    start_x = (window_width - total_width) / 2
    start_y = BOTTOM_MARGIN
    return tile_size, start_x, start_y


def pixel_to_cell(
    x: float, y: float, window_width: int, window_height: int, rows: int, cols: int
) -> Optional[Tuple[int, int]]:
    tile_size, start_x, start_y = compute_board_geometry(window_width, window_height, rows, cols)
    if x < start_x or x >= start_x + cols * tile_size:
        return None
    if y < start_y or y >= start_y + rows * tile_size:
        return None
    col = int((x - start_x) // tile_size)
    row = int((y - start_y) // tile_size)
    if 0 <= row < rows and 0 <= col < cols:
        return row, col
    return None
