"""
Card slot geometry for the Avery 8371 business card sheet.

Positions are millimetres from the top-left corner of the page. The grid is
filled row-major: row 0 holds cards 1 and 2, row 1 holds cards 3 and 4.
"""

# Standard Library
import logging

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config
import business_card_sheets.errors
import business_card_sheets.models


SheetConfig = bcs.config.SheetConfig
CardPosition = bcs.models.CardPosition
PositionError = bcs.errors.PositionError

logger = logging.getLogger(__name__)


#============================================
def compute_sheet_positions(config: SheetConfig | None = None) -> list[CardPosition]:
	"""
	Compute the card positions for one sheet.

	Column nudges shift the left column by -left_nudge and the right column by
	+right_nudge to correct print registration. Nudged positions are not
	clamped; callers run validate_position before placing.

	Args:
		config: Sheet configuration, defaults to Avery 8371.

	Returns:
		Ordered list of CardPosition, card_number starting at 1.
	"""
	if config is None:
		config = bcs.config.default_sheet_config()
	positions: list[CardPosition] = []
	for row in range(config.rows):
		for col in range(config.columns):
			card_number = row * config.columns + col + 1
			x = config.left_margin + col * (config.card_width + config.h_gap)
			y = config.top_margin + row * (config.card_height + config.v_gap)
			if col == 0:
				x -= config.left_nudge
			elif col == config.columns - 1:
				x += config.right_nudge
			positions.append(CardPosition(x=x, y=y, card_number=card_number))
	return positions


#============================================
def validate_position(position: CardPosition, config: SheetConfig | None = None) -> bool:
	"""
	Check that a card placed at position lies fully on the page.

	Args:
		position: Card position in mm.
		config: Sheet configuration, defaults to Avery 8371.

	Returns:
		True if the card fits within the page bounds.
	"""
	if config is None:
		config = bcs.config.default_sheet_config()
	is_valid = (
		position.x >= 0.0
		and position.y >= 0.0
		and position.x + config.card_width <= config.page_width
		and position.y + config.card_height <= config.page_height
	)
	if not is_valid:
		logger.warning(
			"Card %d position (%.2f, %.2f) exceeds page %.1f x %.1f mm (card ends at %.2f, %.2f)",
			position.card_number,
			position.x,
			position.y,
			config.page_width,
			config.page_height,
			position.x + config.card_width,
			position.y + config.card_height,
		)
	return is_valid


#============================================
def require_valid_position(position: CardPosition, config: SheetConfig | None = None) -> CardPosition:
	"""
	Return position unchanged, or raise PositionError if it is off the page.

	Args:
		position: Card position in mm.
		config: Sheet configuration.

	Returns:
		The same position.
	"""
	if not validate_position(position, config):
		raise PositionError(f"Card {position.card_number} position is outside the page")
	return position


#============================================
def sheet_count(card_count: int, cards_per_sheet: int = bcs.config.CARDS_PER_SHEET) -> int:
	"""
	Number of sheets needed for card_count cards.

	Args:
		card_count: Total cards in the job.
		cards_per_sheet: Capacity of one sheet.

	Returns:
		Sheet count, 0 for an empty job.
	"""
	if card_count <= 0:
		return 0
	return (card_count + cards_per_sheet - 1) // cards_per_sheet


#============================================
def positions_for_job(
	card_count: int,
	config: SheetConfig | None = None,
) -> list[tuple[int, CardPosition]]:
	"""
	List (sheet_index, position) pairs for every card in a job.

	Each sheet restarts at position 1, so card 11 lands on sheet 1 at the same
	place as card 1 on sheet 0.

	Args:
		card_count: Total cards in the job.
		config: Sheet configuration.

	Returns:
		List of (sheet_index, CardPosition) in job order.
	"""
	if config is None:
		config = bcs.config.default_sheet_config()
	per_sheet = config.cards_per_sheet
	placements: list[tuple[int, CardPosition]] = []
	for sheet_index in range(sheet_count(card_count, per_sheet)):
		# recomputed per sheet, geometry depends on nothing but the config
		positions = compute_sheet_positions(config)
		start = sheet_index * per_sheet
		end = min(start + per_sheet, card_count)
		for card_index in range(start, end):
			placements.append((sheet_index, positions[card_index % per_sheet]))
	return placements


#============================================
def card_box_points(position: CardPosition, config: SheetConfig) -> tuple[float, float, float, float]:
	"""
	Convert a card position to a canvas box in points (bottom-left origin).

	Args:
		position: Card position in mm from the top-left.
		config: Sheet configuration.

	Returns:
		Tuple of (x0, y0, x1, y1) in points.
	"""
	x0 = bcs.config.mm_to_points(position.x)
	x1 = bcs.config.mm_to_points(position.x + config.card_width)
	y1 = bcs.config.mm_to_points(config.page_height - position.y)
	y0 = bcs.config.mm_to_points(config.page_height - position.y - config.card_height)
	return (x0, y0, x1, y1)
