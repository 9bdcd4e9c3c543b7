"""
Rasterize card markup with PyMuPDF.

The markup is laid out on a single card-sized page and rendered to a Pillow
image. Only the first page is kept; content that overflows the card is cut.
"""

# Standard Library
import io
import logging

# PIP3 modules
import fitz
import PIL.Image

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config
import business_card_sheets.errors


RenderError = bcs.errors.RenderError

CARD_WIDTH_MM = bcs.config.CARD_WIDTH_MM
CARD_HEIGHT_MM = bcs.config.CARD_HEIGHT_MM
MARKUP_RENDER_DPI = bcs.config.MARKUP_RENDER_DPI
POINTS_PER_INCH = bcs.config.POINTS_PER_INCH

logger = logging.getLogger(__name__)


#============================================
def render_markup_pdf(
	markup: str,
	width_mm: float = CARD_WIDTH_MM,
	height_mm: float = CARD_HEIGHT_MM,
) -> bytes:
	"""
	Lay out markup on one card-sized PDF page.

	Args:
		markup: Card markup.
		width_mm: Page width in mm.
		height_mm: Page height in mm.

	Returns:
		PDF bytes.
	"""
	mediabox = fitz.Rect(
		0.0,
		0.0,
		bcs.config.mm_to_points(width_mm),
		bcs.config.mm_to_points(height_mm),
	)
	buffer = io.BytesIO()
	story = fitz.Story(html=markup)
	writer = fitz.DocumentWriter(buffer)
	device = writer.begin_page(mediabox)
	more, _filled = story.place(mediabox)
	story.draw(device)
	writer.end_page()
	writer.close()
	if more:
		logger.debug("Card markup overflows the card, extra content dropped")
	return buffer.getvalue()


#============================================
def render_markup_image(
	markup: str,
	width_mm: float = CARD_WIDTH_MM,
	height_mm: float = CARD_HEIGHT_MM,
	dpi: int = MARKUP_RENDER_DPI,
) -> PIL.Image.Image:
	"""
	Render card markup to an RGB image.

	Args:
		markup: Card markup.
		width_mm: Card width in mm.
		height_mm: Card height in mm.
		dpi: Output resolution.

	Returns:
		Pillow image.
	"""
	try:
		pdf_bytes = render_markup_pdf(markup, width_mm, height_mm)
		document = fitz.open(stream=pdf_bytes, filetype="pdf")
	except (RuntimeError, ValueError) as exc:
		raise RenderError(f"Card markup could not be laid out: {exc}") from exc
	try:
		page = document[0]
		scale = dpi / POINTS_PER_INCH
		pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
		image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	finally:
		document.close()
	return image
