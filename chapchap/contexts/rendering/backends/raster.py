"""
Raster backend: paints the whole document onto one tall Pillow image, slices
it at page boundaries and embeds each slice as a full-page image, so the PDF
keeps the physical page size regardless of DPI.
"""

import io
import os
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv
from PIL import Image, ImageDraw, ImageFont, ImageOps
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from chapchap.contexts.rendering.backends.base import RenderBackend, RenderOutput, register_backend
from chapchap.contexts.rendering.exceptions import RenderBackendError
from chapchap.contexts.rendering.geometry import LayoutResult, Shape, TextLine, TextStyle
from chapchap.contexts.rendering.images import read_image_bytes
from chapchap.contexts.rendering.logger import _log_debug

load_dotenv()

RENDER_DPI = int(os.getenv("RENDER_DPI", "150"))
RASTER_IMAGE_FORMAT = os.getenv("RASTER_IMAGE_FORMAT", "PNG").upper()
RASTER_FONT_PATH = os.getenv("RASTER_FONT_PATH") or None
RASTER_BOLD_FONT_PATH = os.getenv("RASTER_BOLD_FONT_PATH") or None

# Cap-height ratio used to place text when the font has no baseline anchor
BASELINE_RATIO = 0.8


@register_backend("raster")
class RasterBackend(RenderBackend):
    """
    Image-per-page PDF output.

    Args:
        dpi: Pixels per inch of the painted pages
        image_format: "PNG" or "JPEG" for the embedded slices
        font_path: TrueType font for regular text (Pillow's default font when None)
        bold_font_path: TrueType font for bold text (font_path when None)
    """

    def __init__(
        self,
        dpi: int = RENDER_DPI,
        image_format: str = RASTER_IMAGE_FORMAT,
        font_path: Optional[str] = RASTER_FONT_PATH,
        bold_font_path: Optional[str] = RASTER_BOLD_FONT_PATH,
    ):
        if image_format not in ("PNG", "JPEG"):
            raise RenderBackendError(f"Unsupported raster image format '{image_format}'", backend="raster")
        self.dpi = dpi
        self.scale = dpi / 72.0
        self.image_format = image_format
        self.font_path = font_path
        self.bold_font_path = bold_font_path or font_path
        self._fonts: Dict[Tuple[str, int], ImageFont.ImageFont] = {}

    def _px(self, points: float) -> int:
        return int(round(points * self.scale))

    def _font(self, style: TextStyle):
        size = max(1, self._px(style.size))
        key = (style.font, size)
        if key not in self._fonts:
            path = self.bold_font_path if "Bold" in style.font else self.font_path
            try:
                if path:
                    self._fonts[key] = ImageFont.truetype(path, size)
                else:
                    self._fonts[key] = ImageFont.load_default(size=size)
            except OSError as e:
                raise RenderBackendError(f"Could not load font {path}", backend=self.name, original_error=e) from e
        return self._fonts[key]

    def render(self, layout: LayoutResult) -> RenderOutput:
        frame = layout.frame
        page_w, page_h = self._px(frame.width), self._px(frame.height)
        page_count = len(layout.pages)

        sheet = Image.new("RGB", (page_w, page_h * page_count), "white")
        draw = ImageDraw.Draw(sheet)
        _log_debug(f"Painting {page_count} page(s) at {self.dpi} dpi ({page_w}x{page_h} px each)")

        order = []
        for page in layout.pages:
            offset = page.index * frame.height
            for shape in frame.page_shapes:
                self._paint_shape(sheet, draw, shape, 0, offset)

            for placed in page.blocks:
                left, top = self.block_origin(frame, placed)
                for shape in placed.block.shapes:
                    self._paint_shape(sheet, draw, shape, left, offset + top)
                for line in placed.block.lines:
                    self._paint_text(draw, layout, line, left, offset + top)
                order.append(placed.block.index)

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(frame.width, frame.height), invariant=1)
        if layout.title:
            pdf.setTitle(layout.title)
        for index in range(page_count):
            page_image = sheet.crop((0, index * page_h, page_w, (index + 1) * page_h))
            encoded = io.BytesIO()
            page_image.save(encoded, format=self.image_format)
            encoded.seek(0)
            pdf.drawImage(ImageReader(encoded), 0, 0, width=frame.width, height=frame.height)
            pdf.showPage()
        pdf.save()

        return RenderOutput(pdf_bytes=buffer.getvalue(), page_count=page_count, block_order=order)

    def _paint_text(self, draw: ImageDraw.ImageDraw, layout: LayoutResult, line: TextLine,
                    left: float, top: float) -> None:
        style = layout.styles[line.style]
        font = self._font(style)
        x = self._px(left + line.dx)
        if isinstance(font, ImageFont.FreeTypeFont):
            draw.text((x, self._px(top + line.dy)), line.text, font=font, fill=style.color, anchor="ls")
        else:
            y = self._px(top + line.dy - style.size * BASELINE_RATIO)
            draw.text((x, y), line.text, font=font, fill=style.color)

    def _paint_shape(self, sheet: Image.Image, draw: ImageDraw.ImageDraw, shape: Shape,
                     left: float, top: float) -> None:
        x0 = self._px(left + shape.dx)
        y0 = self._px(top + shape.dy)
        x1 = max(x0, self._px(left + shape.dx + shape.width) - 1)
        y1 = max(y0, self._px(top + shape.dy + shape.height) - 1)

        if shape.kind in ("rule", "rect"):
            draw.rectangle([x0, y0, x1, y1], fill=shape.color)
        elif shape.kind == "box":
            draw.rectangle([x0, y0, x1, y1], outline=shape.color, width=max(1, self._px(1.5)))
        elif shape.kind == "image":
            try:
                image = Image.open(io.BytesIO(read_image_bytes(shape.source))).convert("RGBA")
            except (ValueError, OSError) as e:
                raise RenderBackendError("Could not paint image", backend=self.name, original_error=e) from e
            box_w, box_h = x1 - x0 + 1, y1 - y0 + 1
            image = ImageOps.contain(image, (box_w, box_h))
            position = (x0 + (box_w - image.width) // 2, y0 + (box_h - image.height) // 2)
            sheet.paste(image, position, image)
        else:
            raise RenderBackendError(f"Unknown shape kind '{shape.kind}'", backend=self.name)
