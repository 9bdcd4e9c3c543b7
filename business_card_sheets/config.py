"""
Shared configuration and constants.
"""

import dataclasses


POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4

# Avery 8371 business card sheet, US Letter portrait
CARD_WIDTH_MM = 88.9
CARD_HEIGHT_MM = 50.8
PAGE_WIDTH_MM = 215.9
PAGE_HEIGHT_MM = 279.4
COLUMNS = 2
ROWS = 5
CARDS_PER_SHEET = COLUMNS * ROWS

DEFAULT_TOP_MARGIN_MM = 12.7
DEFAULT_LEFT_MARGIN_MM = 12.7
DEFAULT_H_GAP_MM = 12.7
DEFAULT_V_GAP_MM = 1.6
DEFAULT_LEFT_NUDGE_MM = 0.0
DEFAULT_RIGHT_NUDGE_MM = 0.0

MIN_CARD_COUNT = 1
MAX_CARD_COUNT = CARDS_PER_SHEET
DEFAULT_CARD_COUNT = CARDS_PER_SHEET
MAX_JOB_CARDS = 500

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
DEFAULT_FONT_ITALIC = "Helvetica-Oblique"
DEFAULT_FONT_BOLD_ITALIC = "Helvetica-BoldOblique"
DEFAULT_TEXT_SIZE = 10.0
DEFAULT_CONTACT_TEXT_SIZE = 8.0
DEFAULT_LINE_HEIGHT = 1.8
DEFAULT_TEXT_COLOR = "#000000"
BASELINE_FACTOR = 0.7
LOGO_SCALE = 0.9
PLACEHOLDER_BORDER_COLOR = "#CCCCCC"
PLACEHOLDER_TEXT_COLOR = "#999999"
PLACEHOLDER_TEXT_SIZE = 8.0
PLACEHOLDER_LINE_WIDTH = 0.5
OUTLINE_COLOR = (0.7, 0.7, 0.7)
CALIBRATION_COLOR = (0.6, 0.6, 0.6)

# raster sizes for markup cards and captured previews (3.5in x 2in at 96 DPI)
CARD_WIDTH_PX = 336
CARD_HEIGHT_PX = 192
CAPTURE_PIXEL_RATIO = 3
CAPTURE_SETTLE_SECONDS = 0.1
MARKUP_RENDER_DPI = 288
PREVIEW_SELECTOR = ".business-card-preview"

LOGO_FETCH_TIMEOUT = 10.0
DEFAULT_CACHE_CAPACITY = 32
DEFAULT_CACHE_TTL_SECONDS = 600.0

SLOT_CLASS_PREFIX = "bc-contact-"
LOGO_PLACEHOLDER_CLASS = "logo-placeholder"


@dataclasses.dataclass
class SheetConfig:
	card_width: float
	card_height: float
	page_width: float
	page_height: float
	columns: int
	rows: int
	left_margin: float
	top_margin: float
	h_gap: float
	v_gap: float
	left_nudge: float
	right_nudge: float
	draw_outlines: bool

	@property
	def cards_per_sheet(self) -> int:
		return self.columns * self.rows


@dataclasses.dataclass
class CacheConfig:
	capacity: int
	ttl_seconds: float


@dataclasses.dataclass
class CaptureConfig:
	card_width_px: int
	card_height_px: int
	pixel_ratio: int
	settle_seconds: float
	background: str

	@property
	def output_size(self) -> tuple[int, int]:
		"""
		Card raster size in pixels at the capture pixel ratio.
		"""
		return (self.card_width_px * self.pixel_ratio, self.card_height_px * self.pixel_ratio)


@dataclasses.dataclass
class AssemblyResult:
	requested_cards: int
	placed_cards: list[int]
	skipped_cards: list[int]
	pages: int
	cards_per_sheet: int

	@property
	def placed_count(self) -> int:
		return len(self.placed_cards)


#============================================
def default_sheet_config(draw_outlines: bool = False) -> SheetConfig:
	"""
	Build the Avery 8371 sheet configuration.

	Args:
		draw_outlines: Whether to draw light card outlines on each sheet.

	Returns:
		SheetConfig.
	"""
	return SheetConfig(
		card_width=CARD_WIDTH_MM,
		card_height=CARD_HEIGHT_MM,
		page_width=PAGE_WIDTH_MM,
		page_height=PAGE_HEIGHT_MM,
		columns=COLUMNS,
		rows=ROWS,
		left_margin=DEFAULT_LEFT_MARGIN_MM,
		top_margin=DEFAULT_TOP_MARGIN_MM,
		h_gap=DEFAULT_H_GAP_MM,
		v_gap=DEFAULT_V_GAP_MM,
		left_nudge=DEFAULT_LEFT_NUDGE_MM,
		right_nudge=DEFAULT_RIGHT_NUDGE_MM,
		draw_outlines=draw_outlines,
	)


#============================================
def default_cache_config() -> CacheConfig:
	"""
	Build the default logo cache configuration.

	Returns:
		CacheConfig.
	"""
	return CacheConfig(
		capacity=DEFAULT_CACHE_CAPACITY,
		ttl_seconds=DEFAULT_CACHE_TTL_SECONDS,
	)


#============================================
def default_capture_config() -> CaptureConfig:
	"""
	Build the default preview capture configuration.

	Returns:
		CaptureConfig.
	"""
	return CaptureConfig(
		card_width_px=CARD_WIDTH_PX,
		card_height_px=CARD_HEIGHT_PX,
		pixel_ratio=CAPTURE_PIXEL_RATIO,
		settle_seconds=CAPTURE_SETTLE_SECONDS,
		background="#FFFFFF",
	)


#============================================
def mm_to_points(value: float) -> float:
	"""
	Convert millimetres to points.

	Args:
		value: Millimetre value.

	Returns:
		Points value.
	"""
	return value / MM_PER_INCH * POINTS_PER_INCH
