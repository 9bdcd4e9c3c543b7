"""
Zone-based card rendering onto a ReportLab canvas.

Designs describe zones in millimetres from the card's top-left corner. The
canvas works in points from the page's bottom-left corner, so every zone is
converted at draw time against the page height.
"""

# Standard Library
import logging

# PIP3 modules
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config
import business_card_sheets.errors
import business_card_sheets.images
import business_card_sheets.inject
import business_card_sheets.models


CardDesign = bcs.models.CardDesign
ContactRecord = bcs.models.ContactRecord
Zone = bcs.models.Zone
ZoneStyle = bcs.models.ZoneStyle
ContactBlockSpec = bcs.models.ContactBlockSpec
ImageCache = bcs.images.ImageCache
LogoLoadError = bcs.errors.LogoLoadError

PAGE_HEIGHT_MM = bcs.config.PAGE_HEIGHT_MM
DEFAULT_FONT_REGULAR = bcs.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = bcs.config.DEFAULT_FONT_BOLD
DEFAULT_FONT_ITALIC = bcs.config.DEFAULT_FONT_ITALIC
DEFAULT_FONT_BOLD_ITALIC = bcs.config.DEFAULT_FONT_BOLD_ITALIC
DEFAULT_TEXT_SIZE = bcs.config.DEFAULT_TEXT_SIZE
DEFAULT_CONTACT_TEXT_SIZE = bcs.config.DEFAULT_CONTACT_TEXT_SIZE
DEFAULT_LINE_HEIGHT = bcs.config.DEFAULT_LINE_HEIGHT
DEFAULT_TEXT_COLOR = bcs.config.DEFAULT_TEXT_COLOR
BASELINE_FACTOR = bcs.config.BASELINE_FACTOR
LOGO_SCALE = bcs.config.LOGO_SCALE
PLACEHOLDER_BORDER_COLOR = bcs.config.PLACEHOLDER_BORDER_COLOR
PLACEHOLDER_TEXT_COLOR = bcs.config.PLACEHOLDER_TEXT_COLOR
PLACEHOLDER_TEXT_SIZE = bcs.config.PLACEHOLDER_TEXT_SIZE
PLACEHOLDER_LINE_WIDTH = bcs.config.PLACEHOLDER_LINE_WIDTH
MIN_TEXT_SIZE = 5.0
ELLIPSIS = "..."

# zone type -> record field for single-line text zones
TEXT_ZONE_FIELDS = {
	"company-name": "company_name",
	"personal-info": "name",
	"title-info": "title",
	"custom-text": "",
}
CONTACT_FIELD_ORDER = ("phones", "emails", "websites", "addresses", "social_media")

mm = bcs.config.mm_to_points

logger = logging.getLogger(__name__)


#============================================
def parse_hex_color(value: str) -> tuple[float, float, float]:
	"""
	Parse a hex color string into RGB floats.

	Args:
		value: Color string like "#AABBCC" or "#ABC".

	Returns:
		Tuple of (r, g, b) in 0.0-1.0 range; black when unparseable.
	"""
	if not value or not value.startswith("#"):
		return (0.0, 0.0, 0.0)
	digits = value[1:]
	if len(digits) == 3:
		digits = "".join(char * 2 for char in digits)
	if len(digits) != 6:
		return (0.0, 0.0, 0.0)
	try:
		red = int(digits[0:2], 16) / 255.0
		green = int(digits[2:4], 16) / 255.0
		blue = int(digits[4:6], 16) / 255.0
	except ValueError:
		return (0.0, 0.0, 0.0)
	return (red, green, blue)


#============================================
def map_font_name(weight: str, style: str) -> str:
	"""
	Map zone font weight and style to a PDF base font.

	Args:
		weight: "bold", "normal", or a numeric weight string.
		style: "italic" or "normal".

	Returns:
		ReportLab font name.
	"""
	weight_value = weight.strip().lower()
	is_bold = weight_value == "bold" or (weight_value.isdigit() and int(weight_value) >= 600)
	italic = style.strip().lower() == "italic"
	if italic and is_bold:
		return DEFAULT_FONT_BOLD_ITALIC
	if italic:
		return DEFAULT_FONT_ITALIC
	if is_bold:
		return DEFAULT_FONT_BOLD
	return DEFAULT_FONT_REGULAR


#============================================
def clip_text(text: str, font_name: str, font_size: float, max_width: float) -> str:
	"""
	Clip text so it fits max_width, ending in an ellipsis when cut.

	Args:
		text: Text to clip.
		font_name: ReportLab font name.
		font_size: Font size in points.
		max_width: Available width in points.

	Returns:
		Text that fits, possibly empty.
	"""
	string_width = reportlab.pdfbase.pdfmetrics.stringWidth
	if string_width(text, font_name, font_size) <= max_width:
		return text
	clipped = text
	while clipped and string_width(clipped + ELLIPSIS, font_name, font_size) > max_width:
		clipped = clipped[:-1]
	if not clipped:
		return ""
	return clipped.rstrip() + ELLIPSIS


#============================================
def wrap_text(text: str, font_name: str, font_size: float, max_width: float) -> list[str]:
	"""
	Wrap text on word boundaries to fit max_width.

	Words longer than the width are clipped.

	Args:
		text: Text to wrap.
		font_name: ReportLab font name.
		font_size: Font size in points.
		max_width: Available width in points.

	Returns:
		Wrapped lines.
	"""
	string_width = reportlab.pdfbase.pdfmetrics.stringWidth
	lines: list[str] = []
	current = ""
	for word in text.split():
		candidate = word if not current else f"{current} {word}"
		if string_width(candidate, font_name, font_size) <= max_width:
			current = candidate
			continue
		if current:
			lines.append(current)
		current = clip_text(word, font_name, font_size, max_width)
	if current:
		lines.append(current)
	return lines


#============================================
def line_x(box_x: float, box_width: float, line_width: float, alignment: str) -> float:
	"""
	Compute the x position of a line within a box.

	Args:
		box_x: Box left in points.
		box_width: Box width in points.
		line_width: Line width in points.
		alignment: "left", "center", or "right".

	Returns:
		Line x in points.
	"""
	normalized = alignment.strip().lower()
	if normalized == "center":
		return box_x + (box_width - line_width) / 2.0
	if normalized == "right":
		return box_x + box_width - line_width
	return box_x


#============================================
def apply_text_style(
	pdf: reportlab.pdfgen.canvas.Canvas,
	style: ZoneStyle,
	default_size: float,
) -> tuple[str, float]:
	"""
	Set font and fill color on the canvas from a zone style.

	Args:
		pdf: ReportLab canvas.
		style: Zone style.
		default_size: Font size when the style has none.

	Returns:
		Tuple of (font_name, font_size).
	"""
	font_name = map_font_name(style.font_weight, style.font_style)
	font_size = float(style.font_size) if style.font_size else default_size
	pdf.setFont(font_name, font_size)
	color = parse_hex_color(style.color or DEFAULT_TEXT_COLOR)
	pdf.setFillColorRGB(color[0], color[1], color[2])
	return (font_name, font_size)


#============================================
def draw_card_background(
	pdf: reportlab.pdfgen.canvas.Canvas,
	design: CardDesign,
	origin_x: float,
	origin_y: float,
	page_height: float = PAGE_HEIGHT_MM,
) -> None:
	"""
	Fill the card background and draw its border.

	Args:
		pdf: ReportLab canvas.
		design: Card design.
		origin_x: Card left in mm from the page's left edge.
		origin_y: Card top in mm from the page's top edge.
		page_height: Page height in mm.
	"""
	width = design.metadata.width_mm
	height = design.metadata.height_mm
	x = mm(origin_x)
	y = mm(page_height - origin_y - height)
	if design.background_color:
		color = parse_hex_color(design.background_color)
		pdf.setFillColorRGB(color[0], color[1], color[2])
		pdf.rect(x, y, mm(width), mm(height), stroke=0, fill=1)
	if design.border_color and design.border_width > 0:
		color = parse_hex_color(design.border_color)
		pdf.setStrokeColorRGB(color[0], color[1], color[2])
		pdf.setLineWidth(design.border_width)
		pdf.rect(x, y, mm(width), mm(height), stroke=1, fill=0)


#============================================
def draw_logo_placeholder(
	pdf: reportlab.pdfgen.canvas.Canvas,
	box: tuple[float, float, float, float],
) -> None:
	"""
	Draw a labeled placeholder box where the logo would go.

	Args:
		pdf: ReportLab canvas.
		box: Zone box (x, y, width, height) in points, bottom-left origin.
	"""
	x, y, width, height = box
	border = parse_hex_color(PLACEHOLDER_BORDER_COLOR)
	pdf.setStrokeColorRGB(border[0], border[1], border[2])
	pdf.setLineWidth(PLACEHOLDER_LINE_WIDTH)
	pdf.rect(x, y, width, height, stroke=1, fill=0)
	text_color = parse_hex_color(PLACEHOLDER_TEXT_COLOR)
	pdf.setFillColorRGB(text_color[0], text_color[1], text_color[2])
	pdf.setFont(DEFAULT_FONT_REGULAR, PLACEHOLDER_TEXT_SIZE)
	pdf.drawCentredString(x + width / 2.0, y + height / 2.0 - PLACEHOLDER_TEXT_SIZE * 0.35, "LOGO")


#============================================
def draw_logo_zone(
	pdf: reportlab.pdfgen.canvas.Canvas,
	record: ContactRecord,
	box: tuple[float, float, float, float],
	image_cache: ImageCache | None = None,
) -> bool:
	"""
	Draw the record's logo centered at 90% of the zone box.

	Falls back to a placeholder box when there is no logo or it cannot be
	decoded.

	Args:
		pdf: ReportLab canvas.
		record: Contact record.
		box: Zone box (x, y, width, height) in points, bottom-left origin.
		image_cache: Optional logo cache.

	Returns:
		True if the logo image was drawn, False if the placeholder was.
	"""
	try:
		image = bcs.images.load_logo_image(record.logo, image_cache)
	except LogoLoadError as exc:
		logger.warning("Logo unavailable, drawing placeholder: %s", exc)
		image = None
	if image is None:
		draw_logo_placeholder(pdf, box)
		return False

	x, y, width, height = box
	render_width = width * LOGO_SCALE
	render_height = height * LOGO_SCALE
	image_x = x + (width - render_width) / 2.0
	image_y = y + (height - render_height) / 2.0
	pdf.drawImage(
		reportlab.lib.utils.ImageReader(image),
		image_x,
		image_y,
		width=render_width,
		height=render_height,
		mask="auto",
		preserveAspectRatio=True,
		anchor="c",
	)
	return True


#============================================
def draw_text_zone(
	pdf: reportlab.pdfgen.canvas.Canvas,
	zone: Zone,
	text: str,
	box: tuple[float, float, float, float],
) -> None:
	"""
	Draw a single line of text in a zone, clipped to the zone width.

	Args:
		pdf: ReportLab canvas.
		zone: Text zone.
		text: Bound text.
		box: Zone box (x, y, width, height) in points, bottom-left origin.
	"""
	if not text:
		logger.debug("No text for zone %s", zone.zone_id)
		return
	x, y, width, height = box
	font_name, font_size = apply_text_style(pdf, zone.style, DEFAULT_TEXT_SIZE)
	line = clip_text(text, font_name, font_size, width)
	if not line:
		return
	line_width = pdf.stringWidth(line, font_name, font_size)
	baseline = y + height - font_size * BASELINE_FACTOR
	pdf.drawString(line_x(x, width, line_width, zone.alignment), baseline, line)


#============================================
def build_contact_lines(record: ContactRecord, block: ContactBlockSpec) -> list[str]:
	"""
	Build the text lines of a contact block.

	Fields are emitted phones, emails, websites (then addresses and social
	media) and each entry is prefixed by its label when it has one.

	Args:
		record: Contact record.
		block: Contact block settings.

	Returns:
		Contact lines; entries are joined by the separator when it is not a
		newline.
	"""
	entries: list[str] = []
	for field in CONTACT_FIELD_ORDER:
		if field not in block.fields and not (field == "social_media" and "social" in block.fields):
			continue
		for entry in record.populated(field):
			value = bcs.inject.format_value(field, entry.value)
			if entry.label:
				entries.append(f"{entry.label}: {value}")
			else:
				entries.append(value)
	if not entries:
		return []
	if block.separator == "\n":
		return entries
	return [block.separator.join(entries)]


#============================================
def draw_contact_block(
	pdf: reportlab.pdfgen.canvas.Canvas,
	zone: Zone,
	record: ContactRecord,
	box: tuple[float, float, float, float],
) -> int:
	"""
	Draw the contact block, dropping lines that do not fit.

	Args:
		pdf: ReportLab canvas.
		zone: Contact block zone.
		record: Contact record.
		box: Zone box (x, y, width, height) in points, bottom-left origin.

	Returns:
		Number of lines drawn.
	"""
	block = zone.contact_block or bcs.models.ContactBlockSpec()
	lines = build_contact_lines(record, block)
	if not lines:
		return 0
	x, y, width, height = box
	font_name, font_size = apply_text_style(pdf, zone.style, DEFAULT_CONTACT_TEXT_SIZE)

	overflow = block.overflow.strip().lower()
	if overflow == "wrap":
		wrapped: list[str] = []
		for line in lines:
			wrapped.extend(wrap_text(line, font_name, font_size, width))
		lines = wrapped
	elif overflow == "scale":
		widest = max(pdf.stringWidth(line, font_name, font_size) for line in lines)
		if widest > width > 0:
			font_size = max(MIN_TEXT_SIZE, font_size * width / widest)
			pdf.setFont(font_name, font_size)
		lines = [clip_text(line, font_name, font_size, width) for line in lines]
	else:
		lines = [clip_text(line, font_name, font_size, width) for line in lines]

	if block.max_lines is not None:
		lines = lines[:max(0, int(block.max_lines))]

	line_height = font_size * (zone.style.line_height or DEFAULT_LINE_HEIGHT)
	top = y + height
	drawn = 0
	offset = 0.0
	for line in lines:
		# lines past the bottom of the zone are not drawn
		if offset + font_size > height:
			break
		if line:
			line_width = pdf.stringWidth(line, font_name, font_size)
			baseline = top - offset - font_size * BASELINE_FACTOR
			pdf.drawString(line_x(x, width, line_width, zone.alignment), baseline, line)
			drawn += 1
		offset += line_height
	return drawn


#============================================
def zone_text(zone: Zone, record: ContactRecord) -> str:
	"""
	Resolve the text bound to a text zone.

	Args:
		zone: Text zone.
		record: Contact record.

	Returns:
		Text to draw, "" when the field is empty.
	"""
	if zone.field:
		return record.text_value(zone.field)
	if zone.zone_type == "custom-text":
		return zone.text
	field = TEXT_ZONE_FIELDS.get(zone.zone_type, "")
	if not field:
		return ""
	return record.text_value(field)


#============================================
def render_zone(
	pdf: reportlab.pdfgen.canvas.Canvas,
	zone: Zone,
	record: ContactRecord,
	origin_x: float,
	origin_y: float,
	page_height: float = PAGE_HEIGHT_MM,
	image_cache: ImageCache | None = None,
) -> None:
	"""
	Draw one zone of a card.

	Args:
		pdf: ReportLab canvas.
		zone: Zone to draw.
		record: Contact record.
		origin_x: Card left in mm.
		origin_y: Card top in mm.
		page_height: Page height in mm.
		image_cache: Optional logo cache.
	"""
	box = (
		mm(origin_x + zone.x),
		mm(page_height - origin_y - zone.y - zone.height),
		mm(zone.width),
		mm(zone.height),
	)
	if zone.zone_type == "logo":
		draw_logo_zone(pdf, record, box, image_cache)
		return
	if zone.zone_type == "contact-block":
		draw_contact_block(pdf, zone, record, box)
		return
	if zone.zone_type in TEXT_ZONE_FIELDS:
		draw_text_zone(pdf, zone, zone_text(zone, record), box)
		return
	logger.warning("Unknown zone type '%s' in zone %s", zone.zone_type, zone.zone_id)


#============================================
def render_card(
	pdf: reportlab.pdfgen.canvas.Canvas,
	design: CardDesign,
	record: ContactRecord,
	origin_x: float,
	origin_y: float,
	page_height: float = PAGE_HEIGHT_MM,
	image_cache: ImageCache | None = None,
) -> None:
	"""
	Draw a zone design card with its top-left corner at (origin_x, origin_y).

	Zones are drawn in declaration order, so later zones paint over earlier
	ones.

	Args:
		pdf: ReportLab canvas.
		design: Zone design.
		record: Contact record.
		origin_x: Card left in mm from the page's left edge.
		origin_y: Card top in mm from the page's top edge.
		page_height: Page height in mm.
		image_cache: Optional logo cache.
	"""
	if design.zones is None:
		raise bcs.errors.RenderError(f"Design {design.design_id} has no zones")
	pdf.saveState()
	try:
		draw_card_background(pdf, design, origin_x, origin_y, page_height)
		for zone in design.zones:
			render_zone(pdf, zone, record, origin_x, origin_y, page_height, image_cache)
	finally:
		pdf.restoreState()
