"""Rendering helpers for visualising the Tic Tac Toe board."""

from __future__ import annotations

import html
import io
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from ..controller import Phase, RenderFrame
from ..state import CellValue


@dataclass(slots=True)
class TicTacToeRenderTheme:
    """Container describing the visual configuration of the board."""

    background: str = "#f4f1ea"
    panel: str = "#fffdf7"
    grid_line: str = "#3f2f1d"
    primary_text: str = "#3f2f1d"
    player_a: str = "#d62828"
    player_b: str = "#1d4e89"
    empty_mark: str = "·"


class TicTacToeRenderer:
    """Render both textual fallbacks and Pillow images for a board frame."""

    IMAGE_SIZE = (600, 720)
    GRID_MARGIN = 60
    GRID_TOP = 150
    REGULAR_FONTS = (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    )
    BOLD_FONTS = (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    )

    def __init__(self, theme: TicTacToeRenderTheme | None = None) -> None:
        self.theme = theme or TicTacToeRenderTheme()
        self._font_cache: dict[tuple[int, bool], ImageFont.ImageFont] = {}

    def cell_label(self, value: CellValue) -> str:
        return value.symbol or self.theme.empty_mark

    def render_grid_text(self, frame: RenderFrame) -> str:
        """Return the board as monospace rows, e.g. ``X · O``."""

        rows = (" ".join(self.cell_label(cell) for cell in row) for row in frame.grid)
        return "<pre>" + "\n".join(rows) + "</pre>"

    def render_status(self, frame: RenderFrame) -> str:
        """Return an HTML status line describing the frame."""

        if frame.phase is Phase.FINISHED and frame.outcome:
            if frame.outcome.is_draw:
                return "🤝 It's a draw!"
            return f"🏆 <b>{html.escape(frame.outcome.winner_name or '')}</b> wins!"
        name_a, name_b = (html.escape(name) for name in frame.player_names)
        if frame.phase is Phase.SETUP:
            return (
                f"❌ <b>{name_a}</b> vs ⭕ <b>{name_b}</b>\n"
                f"First move: <b>{html.escape(frame.current_player_name)}</b>"
            )
        return f"<b>{html.escape(frame.current_player_name)}</b>'s turn"

    def render_board_image(self, frame: RenderFrame) -> io.BytesIO:
        """Render the board as a PNG stored in an in-memory buffer."""

        image = Image.new("RGB", self.IMAGE_SIZE, color=self.theme.background)
        draw = ImageDraw.Draw(image)
        self._draw_background(draw)
        self._draw_title(draw, frame)
        self._draw_grid(draw, len(frame.grid))
        self._draw_tokens(draw, frame)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer

    def _grid_box(self) -> tuple[int, int, int]:
        width, _ = self.IMAGE_SIZE
        side = width - 2 * self.GRID_MARGIN
        return self.GRID_MARGIN, self.GRID_TOP, side

    def _draw_background(self, draw: ImageDraw.ImageDraw) -> None:
        width, height = self.IMAGE_SIZE
        margin = 20
        draw.rounded_rectangle(
            (margin, margin, width - margin, height - margin),
            radius=36,
            fill=self.theme.panel,
            outline="#d8c7a0",
            width=4,
        )

    def _draw_title(self, draw: ImageDraw.ImageDraw, frame: RenderFrame) -> None:
        width, _ = self.IMAGE_SIZE
        if frame.phase is Phase.FINISHED and frame.outcome:
            title = frame.outcome.message()
        else:
            title = f"{frame.current_player_name}'s turn"
        font = self._get_font(40, bold=True)
        title_width = draw.textlength(title, font=font)
        draw.text(((width - title_width) / 2, 60), title, fill=self.theme.primary_text, font=font)

    def _draw_grid(self, draw: ImageDraw.ImageDraw, size: int) -> None:
        left, top, side = self._grid_box()
        step = side / size
        for idx in range(1, size):
            offset = idx * step
            draw.line((left + offset, top, left + offset, top + side), fill=self.theme.grid_line, width=6)
            draw.line((left, top + offset, left + side, top + offset), fill=self.theme.grid_line, width=6)

    def _draw_tokens(self, draw: ImageDraw.ImageDraw, frame: RenderFrame) -> None:
        left, top, side = self._grid_box()
        size = len(frame.grid)
        step = side / size
        pad = step * 0.2
        for row_index, row in enumerate(frame.grid):
            for column_index, cell in enumerate(row):
                x0 = left + column_index * step + pad
                y0 = top + row_index * step + pad
                x1 = x0 + step - 2 * pad
                y1 = y0 + step - 2 * pad
                if cell is CellValue.PLAYER_A:
                    draw.line((x0, y0, x1, y1), fill=self.theme.player_a, width=12)
                    draw.line((x0, y1, x1, y0), fill=self.theme.player_a, width=12)
                elif cell is CellValue.PLAYER_B:
                    draw.ellipse((x0, y0, x1, y1), outline=self.theme.player_b, width=12)

    def _get_font(self, size: int, *, bold: bool = False) -> ImageFont.ImageFont:
        key = (size, bold)
        cached = self._font_cache.get(key)
        if cached:
            return cached
        candidates = self.BOLD_FONTS if bold else self.REGULAR_FONTS
        for path in candidates:
            try:
                font = ImageFont.truetype(path, size=size)
                self._font_cache[key] = font
                return font
            except OSError:
                continue
        fallback = ImageFont.load_default()
        self._font_cache[key] = fallback
        return fallback
