"""
PDF post-processing: page counts, calibration pages, and output names.
"""

# Standard Library
import datetime
import io
import re

# PIP3 modules
import pypdf
import reportlab.pdfgen.canvas

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config
import business_card_sheets.errors
import business_card_sheets.layout


SheetConfig = bcs.config.SheetConfig

CALIBRATION_COLOR = bcs.config.CALIBRATION_COLOR
OUTLINE_COLOR = bcs.config.OUTLINE_COLOR
DEFAULT_FONT_REGULAR = bcs.config.DEFAULT_FONT_REGULAR
POINTS_PER_INCH = bcs.config.POINTS_PER_INCH

FILENAME_TOKEN_PATTERN = re.compile(r"[^a-z0-9]+")

mm = bcs.config.mm_to_points


#============================================
def draw_card_outlines(
	pdf: reportlab.pdfgen.canvas.Canvas,
	config: SheetConfig,
	color: tuple[float, float, float] = OUTLINE_COLOR,
) -> None:
	"""
	Draw card outlines on the current page.

	Args:
		pdf: ReportLab canvas.
		config: Sheet configuration.
		color: RGB stroke color.
	"""
	pdf.saveState()
	pdf.setLineWidth(0.3)
	pdf.setStrokeColorRGB(*color)
	for position in bcs.layout.compute_sheet_positions(config):
		x0, y0, x1, y1 = bcs.layout.card_box_points(position, config)
		pdf.rect(x0, y0, x1 - x0, y1 - y0, stroke=1, fill=0)
	pdf.restoreState()


#============================================
def draw_calibration_page(pdf: reportlab.pdfgen.canvas.Canvas, config: SheetConfig) -> None:
	"""
	Draw every card slot, corner crosshairs, and a 1 inch ruler mark.

	Args:
		pdf: ReportLab canvas.
		config: Sheet configuration.
	"""
	draw_card_outlines(pdf, config, CALIBRATION_COLOR)

	positions = bcs.layout.compute_sheet_positions(config)
	corner_numbers = {1, config.columns, config.cards_per_sheet - config.columns + 1, config.cards_per_sheet}
	pdf.setLineWidth(0.6)
	pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
	pdf.setFont(DEFAULT_FONT_REGULAR, 8)
	for position in positions:
		if position.card_number not in corner_numbers:
			continue
		x0, y0, x1, y1 = bcs.layout.card_box_points(position, config)
		center_x = (x0 + x1) / 2.0
		center_y = (y0 + y1) / 2.0
		size = 6.0
		pdf.line(center_x - size, center_y, center_x + size, center_y)
		pdf.line(center_x, center_y - size, center_x, center_y + size)
		pdf.drawString(x0 + 3.0, y1 - 10.0, str(position.card_number))

	ruler_x = mm(config.left_margin)
	ruler_y = mm(config.page_height - config.top_margin) + 10.0
	pdf.line(ruler_x, ruler_y, ruler_x + POINTS_PER_INCH, ruler_y)
	pdf.drawString(ruler_x, ruler_y + 4.0, "1 in")


#============================================
def build_calibration_page(config: SheetConfig | None = None) -> pypdf.PageObject:
	"""
	Build a calibration page for print registration checks.

	Args:
		config: Sheet configuration.

	Returns:
		PDF page object.
	"""
	if config is None:
		config = bcs.config.default_sheet_config()
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(mm(config.page_width), mm(config.page_height)),
	)
	draw_calibration_page(pdf, config)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def add_calibration_page(pdf_bytes: bytes, config: SheetConfig | None = None) -> bytes:
	"""
	Prepend a calibration page to a card document.

	Args:
		pdf_bytes: Card document.
		config: Sheet configuration.

	Returns:
		PDF bytes with the calibration page first.
	"""
	if not pdf_bytes:
		raise bcs.errors.DocumentError("Cannot add a calibration page to an empty document")
	reader = pypdf.PdfReader(io.BytesIO(pdf_bytes))
	writer = pypdf.PdfWriter()
	writer.add_page(build_calibration_page(config))
	for page in reader.pages:
		writer.add_page(page)
	output = io.BytesIO()
	writer.write(output)
	return output.getvalue()


#============================================
def count_pages(pdf_bytes: bytes) -> int:
	"""
	Count the pages of a PDF document.

	Args:
		pdf_bytes: PDF bytes.

	Returns:
		Page count.
	"""
	if not pdf_bytes:
		return 0
	reader = pypdf.PdfReader(io.BytesIO(pdf_bytes))
	return len(reader.pages)


#============================================
def sanitize_filename(company_name: str, today: datetime.date | None = None) -> str:
	"""
	Build the download filename for a card document.

	Args:
		company_name: Company name from the contact record.
		today: Date stamp, defaults to the current date.

	Returns:
		Name like "business-cards-acme-corp-2024-05-01.pdf".
	"""
	if today is None:
		today = datetime.date.today()
	token = FILENAME_TOKEN_PATTERN.sub("-", company_name.lower()).strip("-")
	if not token:
		token = "card"
	return f"business-cards-{token}-{today.isoformat()}.pdf"
