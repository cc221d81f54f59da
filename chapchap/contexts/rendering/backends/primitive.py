"""
Primitive backend: draws text runs, rules, rectangles and images directly
with the reportlab canvas, using the standard PDF fonts the layout was
measured with.
"""

import io

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from chapchap.contexts.rendering.backends.base import RenderBackend, RenderOutput, register_backend
from chapchap.contexts.rendering.exceptions import RenderBackendError
from chapchap.contexts.rendering.geometry import LayoutResult, Shape, TextLine
from chapchap.contexts.rendering.images import read_image_bytes

BOX_LINE_WIDTH = 1.5


@register_backend("primitive")
class PrimitiveBackend(RenderBackend):
    """
    Vector PDF output. Text stays selectable, which is what lets the layout
    diagnostics read the document back.
    """

    def render(self, layout: LayoutResult) -> RenderOutput:
        frame = layout.frame
        buffer = io.BytesIO()
        # invariant=1 drops timestamps and ids so equal layouts give equal bytes
        pdf = canvas.Canvas(buffer, pagesize=(frame.width, frame.height), invariant=1)
        if layout.title:
            pdf.setTitle(layout.title)

        order = []
        for page in layout.pages:
            for shape in frame.page_shapes:
                self._draw_shape(pdf, shape, 0, 0, frame.height)

            for placed in page.blocks:
                left, top = self.block_origin(frame, placed)
                for shape in placed.block.shapes:
                    self._draw_shape(pdf, shape, left, top, frame.height)
                for line in placed.block.lines:
                    self._draw_text(pdf, layout, line, left, top, frame.height, placed.block.index)
                order.append(placed.block.index)

            pdf.showPage()

        pdf.save()
        return RenderOutput(pdf_bytes=buffer.getvalue(), page_count=len(layout.pages), block_order=order)

    def _draw_text(self, pdf, layout: LayoutResult, line: TextLine, left: float, top: float,
                   page_height: float, block_index: int) -> None:
        try:
            line.text.encode("cp1252")
        except UnicodeEncodeError as e:
            raise RenderBackendError(
                f"Unsupported glyph {line.text[e.start:e.end]!r} in block {block_index}",
                backend=self.name,
                original_error=e,
            ) from e

        style = layout.styles[line.style]
        pdf.setFont(style.font, style.size)
        pdf.setFillColor(HexColor(style.color))
        pdf.drawString(left + line.dx, page_height - (top + line.dy), line.text)

    def _draw_shape(self, pdf, shape: Shape, left: float, top: float, page_height: float) -> None:
        x = left + shape.dx
        y = page_height - (top + shape.dy + shape.height)

        if shape.kind in ("rule", "rect"):
            pdf.setFillColor(HexColor(shape.color))
            pdf.rect(x, y, shape.width, shape.height, stroke=0, fill=1)
        elif shape.kind == "box":
            pdf.setStrokeColor(HexColor(shape.color))
            pdf.setLineWidth(BOX_LINE_WIDTH)
            pdf.rect(x, y, shape.width, shape.height, stroke=1, fill=0)
        elif shape.kind == "image":
            try:
                image = ImageReader(io.BytesIO(read_image_bytes(shape.source)))
                pdf.drawImage(
                    image, x, y, width=shape.width, height=shape.height,
                    preserveAspectRatio=True, anchor="c", mask="auto",
                )
            except (ValueError, OSError) as e:
                raise RenderBackendError("Could not draw image", backend=self.name, original_error=e) from e
        else:
            raise RenderBackendError(f"Unknown shape kind '{shape.kind}'", backend=self.name)
