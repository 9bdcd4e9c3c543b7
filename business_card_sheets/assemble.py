"""
Sheet assembly: render a job of cards across Avery 8371 sheets.

Cards are drawn one at a time onto a single shared ReportLab canvas. A card
whose position is off the page or whose rendering raises is skipped and
logged; the rest of the job continues.
"""

# Standard Library
import io
import logging
from typing import Callable

# PIP3 modules
import PIL.Image
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.catalog
import business_card_sheets.config
import business_card_sheets.document
import business_card_sheets.errors
import business_card_sheets.images
import business_card_sheets.inject
import business_card_sheets.layout
import business_card_sheets.markup
import business_card_sheets.models
import business_card_sheets.render


CardDesign = bcs.models.CardDesign
CardPosition = bcs.models.CardPosition
ContactRecord = bcs.models.ContactRecord
SheetConfig = bcs.config.SheetConfig
AssemblyResult = bcs.config.AssemblyResult
ImageCache = bcs.images.ImageCache
DesignCatalog = bcs.catalog.DesignCatalog

CardDrawer = Callable[[reportlab.pdfgen.canvas.Canvas, CardPosition], None]

MIN_CARD_COUNT = bcs.config.MIN_CARD_COUNT
MAX_CARD_COUNT = bcs.config.MAX_CARD_COUNT

mm = bcs.config.mm_to_points

logger = logging.getLogger(__name__)


#============================================
def clamp_card_count(
	card_count: int,
	minimum: int = MIN_CARD_COUNT,
	maximum: int = MAX_CARD_COUNT,
) -> int:
	"""
	Clamp a requested card count into [minimum, maximum], logging when it
	changes.

	Args:
		card_count: Requested count.
		minimum: Lowest allowed count.
		maximum: Highest allowed count.

	Returns:
		Clamped count.
	"""
	clamped = max(minimum, min(maximum, int(card_count)))
	if clamped != card_count:
		logger.warning("Card count %s adjusted to %d (allowed %d-%d)", card_count, clamped, minimum, maximum)
	return clamped


#============================================
def resolve_design(design: CardDesign | str, catalog: DesignCatalog | None = None) -> CardDesign:
	"""
	Look up a design by id, or pass a design through.

	Args:
		design: Design or design id.
		catalog: Catalog to search, defaults to the built-in catalog.

	Returns:
		CardDesign.
	"""
	if isinstance(design, CardDesign):
		return design
	if catalog is None:
		catalog = bcs.catalog.builtin_catalog()
	found = catalog.get(design) if design else None
	if found is None:
		raise bcs.errors.DesignNotFoundError(f"Business card design not found: {design}")
	return found


#============================================
def place_card_image(
	pdf: reportlab.pdfgen.canvas.Canvas,
	image: reportlab.lib.utils.ImageReader,
	position: CardPosition,
	config: SheetConfig,
) -> None:
	"""
	Draw a card raster filling the card box at position.

	Args:
		pdf: ReportLab canvas.
		image: Card image.
		position: Card position in mm.
		config: Sheet configuration.
	"""
	x0, y0, x1, y1 = bcs.layout.card_box_points(position, config)
	pdf.drawImage(image, x0, y0, width=x1 - x0, height=y1 - y0, mask=None)


#============================================
def build_card_drawer(
	design: CardDesign,
	record: ContactRecord,
	config: SheetConfig,
	image_cache: ImageCache | None = None,
) -> CardDrawer:
	"""
	Build the per-card draw function for a design.

	Zone designs are drawn with the zone renderer. Markup designs are
	injected and rasterized; the raster is reused for later cards.

	Args:
		design: Card design.
		record: Contact record.
		config: Sheet configuration.
		image_cache: Optional logo cache.

	Returns:
		Callable drawing one card at a position.
	"""
	if not design.is_markup:
		def draw_zone_card(pdf: reportlab.pdfgen.canvas.Canvas, position: CardPosition) -> None:
			bcs.render.render_card(
				pdf,
				design,
				record,
				position.x,
				position.y,
				config.page_height,
				image_cache,
			)
		return draw_zone_card

	rendered: list[reportlab.lib.utils.ImageReader] = []

	def draw_markup_card(pdf: reportlab.pdfgen.canvas.Canvas, position: CardPosition) -> None:
		if not rendered:
			markup = bcs.inject.generate_injected_markup(design, record)
			image = bcs.markup.render_markup_image(markup, config.card_width, config.card_height)
			rendered.append(reportlab.lib.utils.ImageReader(image))
		place_card_image(pdf, rendered[0], position, config)
	return draw_markup_card


#============================================
def image_card_drawer(image: PIL.Image.Image, config: SheetConfig) -> CardDrawer:
	"""
	Build a draw function that repeats one raster at every position.

	Args:
		image: Card image.
		config: Sheet configuration.

	Returns:
		Callable drawing the image at a position.
	"""
	reader = reportlab.lib.utils.ImageReader(image)

	def draw_image_card(pdf: reportlab.pdfgen.canvas.Canvas, position: CardPosition) -> None:
		place_card_image(pdf, reader, position, config)
	return draw_image_card


#============================================
def assemble_cards(
	draw_card: CardDrawer,
	card_count: int,
	config: SheetConfig | None = None,
	title: str = "Business cards",
) -> tuple[bytes, AssemblyResult]:
	"""
	Lay out card_count cards over as many sheets as needed.

	Args:
		draw_card: Draws one card at a position.
		card_count: Total cards in the job.
		config: Sheet configuration.
		title: PDF document title.

	Returns:
		Tuple of (PDF bytes, AssemblyResult).
	"""
	if config is None:
		config = bcs.config.default_sheet_config()
	if card_count < 1:
		raise bcs.errors.InputError(f"Card count must be at least 1, got {card_count}")

	per_sheet = config.cards_per_sheet
	sheets = bcs.layout.sheet_count(card_count, per_sheet)
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(mm(config.page_width), mm(config.page_height)),
	)
	pdf.setTitle(title)

	placed: list[int] = []
	skipped: list[int] = []
	logger.info("Rendering %d cards on %d sheet(s)", card_count, sheets)
	current_sheet = -1
	for card_index, (sheet_index, position) in enumerate(bcs.layout.positions_for_job(card_count, config)):
		card_number = card_index + 1
		if sheet_index != current_sheet:
			if current_sheet >= 0:
				pdf.showPage()
			current_sheet = sheet_index
			if config.draw_outlines:
				bcs.document.draw_card_outlines(pdf, config)
		if not bcs.layout.validate_position(position, config):
			logger.warning("Skipping card %d: position off the page", card_number)
			skipped.append(card_number)
			continue
		# each card is drawn into its own form and only placed once it completes
		form_name = f"card{card_number}"
		pdf.beginForm(form_name)
		pdf.saveState()
		try:
			draw_card(pdf, position)
		except Exception:
			logger.warning("Skipping card %d: render failed", card_number, exc_info=True)
			skipped.append(card_number)
			continue
		finally:
			pdf.restoreState()
			pdf.endForm()
		pdf.doForm(form_name)
		placed.append(card_number)
	pdf.save()

	data = buffer.getvalue()
	if not data or not placed:
		logger.error("No cards rendered for a %d card job", card_count)
		raise bcs.errors.DocumentError("Generated PDF is empty: no cards could be rendered")

	result = AssemblyResult(
		requested_cards=card_count,
		placed_cards=placed,
		skipped_cards=skipped,
		pages=sheets,
		cards_per_sheet=per_sheet,
	)
	logger.info("Placed %d of %d cards", result.placed_count, card_count)
	return (data, result)


#============================================
def assemble_document(
	design: CardDesign | str,
	record: ContactRecord | None,
	card_count: int = bcs.config.DEFAULT_CARD_COUNT,
	config: SheetConfig | None = None,
	catalog: DesignCatalog | None = None,
	image_cache: ImageCache | None = None,
) -> tuple[bytes, AssemblyResult]:
	"""
	Render a design for a contact record across one or more sheets.

	Args:
		design: Design or design id.
		record: Contact record.
		card_count: Total cards, ten per sheet.
		config: Sheet configuration.
		catalog: Catalog used to resolve a design id.
		image_cache: Optional logo cache.

	Returns:
		Tuple of (PDF bytes, AssemblyResult).
	"""
	resolved = resolve_design(design, catalog)
	if record is None:
		raise bcs.errors.MissingContactError("No contact record supplied")
	if config is None:
		config = bcs.config.default_sheet_config()
	draw_card = build_card_drawer(resolved, record, config, image_cache)
	title = f"Business cards - {record.company_name}".strip(" -")
	return assemble_cards(draw_card, card_count, config, title)


#============================================
def generate_document(
	design: CardDesign | str,
	record: ContactRecord | None,
	card_count: int = bcs.config.DEFAULT_CARD_COUNT,
	config: SheetConfig | None = None,
	catalog: DesignCatalog | None = None,
	image_cache: ImageCache | None = None,
) -> bytes:
	"""
	Render a design for a contact record and return the PDF bytes.

	A job of N cards spans ceil(N / 10) sheets.

	Args:
		design: Design or design id.
		record: Contact record.
		card_count: Total cards.
		config: Sheet configuration.
		catalog: Catalog used to resolve a design id.
		image_cache: Optional logo cache.

	Returns:
		PDF bytes.
	"""
	data, _result = assemble_document(design, record, card_count, config, catalog, image_cache)
	return data


#============================================
def generate_single_sheet(
	design: CardDesign | str,
	record: ContactRecord | None,
	card_count: int = bcs.config.DEFAULT_CARD_COUNT,
	config: SheetConfig | None = None,
	catalog: DesignCatalog | None = None,
	image_cache: ImageCache | None = None,
) -> bytes:
	"""
	Render at most one sheet; card_count is clamped into [1, 10].

	Args:
		design: Design or design id.
		record: Contact record.
		card_count: Requested cards, clamped.
		config: Sheet configuration.
		catalog: Catalog used to resolve a design id.
		image_cache: Optional logo cache.

	Returns:
		PDF bytes.
	"""
	clamped = clamp_card_count(card_count)
	return generate_document(design, record, clamped, config, catalog, image_cache)


#============================================
def generate_preview(
	design: CardDesign | str,
	record: ContactRecord,
	catalog: DesignCatalog | None = None,
	image_cache: ImageCache | None = None,
) -> bytes:
	"""
	Render a single card on a card-sized page.

	Args:
		design: Design or design id.
		record: Contact record.
		catalog: Catalog used to resolve a design id.
		image_cache: Optional logo cache.

	Returns:
		PDF bytes.
	"""
	resolved = resolve_design(design, catalog)
	width = resolved.metadata.width_mm
	height = resolved.metadata.height_mm
	preview_config = bcs.config.default_sheet_config()
	preview_config.page_width = width
	preview_config.page_height = height
	preview_config.card_width = width
	preview_config.card_height = height
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(mm(width), mm(height)))
	draw_card = build_card_drawer(resolved, record, preview_config, image_cache)
	position = bcs.layout.require_valid_position(CardPosition(x=0.0, y=0.0, card_number=1), preview_config)
	draw_card(pdf, position)
	pdf.save()
	return buffer.getvalue()
