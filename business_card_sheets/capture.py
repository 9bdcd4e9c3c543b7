"""
Capture a rendered card preview as one raster and repeat it across a sheet.

The preview lives in a PreviewPage: markup holding an element picked out by a
simple selector. Any display-only transform on that element is removed while
the capture runs and always put back afterwards.
"""

# Standard Library
import base64
import dataclasses
import io
import logging
import re
import time
from typing import Callable

# PIP3 modules
import PIL.Image

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.assemble
import business_card_sheets.config
import business_card_sheets.errors
import business_card_sheets.images
import business_card_sheets.markup
import business_card_sheets.slots


CaptureConfig = bcs.config.CaptureConfig
SheetConfig = bcs.config.SheetConfig
CaptureError = bcs.errors.CaptureError

CaptureFn = Callable[[str, int, int], PIL.Image.Image]

PREVIEW_SELECTOR = bcs.config.PREVIEW_SELECTOR
MM_PER_INCH = bcs.config.MM_PER_INCH
CSS_PIXELS_PER_INCH = 96.0

STYLE_ATTR_PATTERN = re.compile(r"(\sstyle\s*=\s*)(\"[^\"]*\"|'[^']*')", re.IGNORECASE)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class PreviewElement:
	tag: str
	start: int
	open_end: int
	end: int
	attributes: dict[str, str]


#============================================
def parse_style(style: str) -> list[tuple[str, str]]:
	"""
	Split an inline style into (property, value) pairs, keeping order.

	Args:
		style: Inline style text.

	Returns:
		List of lowercase property names and their values.
	"""
	pairs: list[tuple[str, str]] = []
	for declaration in style.split(";"):
		name, sep, value = declaration.partition(":")
		if not sep or not name.strip():
			continue
		pairs.append((name.strip().lower(), value.strip()))
	return pairs


#============================================
def format_style(pairs: list[tuple[str, str]]) -> str:
	return "; ".join(f"{name}: {value}" for name, value in pairs)


class PreviewPage:
	"""
	Markup document holding an on-screen card preview.
	"""

	def __init__(self, markup: str):
		self.markup = markup

	def find(self, selector: str) -> PreviewElement | None:
		"""
		Find the first element matching a ".class" or "#id" selector.
		"""
		if selector.startswith("."):
			attribute, wanted = ("class", selector[1:])
		elif selector.startswith("#"):
			attribute, wanted = ("id", selector[1:])
		else:
			raise CaptureError(f"Unsupported preview selector: {selector}")
		for match in bcs.slots.TAG_PATTERN.finditer(self.markup):
			if match.group(1):
				continue
			attributes = bcs.slots.parse_attributes(match.group(3))
			value = attributes.get(attribute, "")
			found = wanted in value.split() if attribute == "class" else value == wanted
			if not found:
				continue
			tag = match.group(2).lower()
			open_end = match.end()
			end = open_end
			if not match.group(4) and tag not in bcs.slots.VOID_TAGS:
				end = bcs.slots.find_element_end(self.markup, tag, open_end)
			return PreviewElement(tag, match.start(), open_end, end, attributes)
		return None

	def get_style(self, selector: str, name: str) -> str | None:
		element = self._require(selector)
		for prop, value in parse_style(element.attributes.get("style", "")):
			if prop == name:
				return value
		return None

	def set_style(self, selector: str, name: str, value: str | None) -> None:
		"""
		Set or remove (value None) one inline style property on an element.
		"""
		element = self._require(selector)
		pairs = [pair for pair in parse_style(element.attributes.get("style", "")) if pair[0] != name]
		if value is not None:
			pairs.append((name, value))
		style = format_style(pairs).replace('"', "'")
		opening = self.markup[element.start:element.open_end]
		if STYLE_ATTR_PATTERN.search(opening):
			opening = STYLE_ATTR_PATTERN.sub(lambda m: f'{m.group(1)}"{style}"', opening, count=1)
		else:
			close = "/>" if opening.endswith("/>") else ">"
			opening = f'{opening[:-len(close)]} style="{style}"{close}'
		self.markup = self.markup[:element.start] + opening + self.markup[element.open_end:]

	def outer_markup(self, selector: str) -> str:
		element = self._require(selector)
		return self.markup[element.start:element.end]

	def _require(self, selector: str) -> PreviewElement:
		element = self.find(selector)
		if element is None:
			raise CaptureError(f"Preview element not found: {selector}")
		return element


#============================================
def page_for_markup(markup: str, config: CaptureConfig | None = None) -> PreviewPage:
	"""
	Wrap injected card markup in a card-sized preview container.

	Args:
		markup: Injected card markup.
		config: Capture configuration.

	Returns:
		PreviewPage whose preview element holds the markup.
	"""
	if not markup or not markup.strip():
		raise CaptureError("No card markup provided")
	if config is None:
		config = bcs.config.default_capture_config()
	wrapper = (
		f'<div class="{PREVIEW_SELECTOR.lstrip(".")}" '
		f'style="width: {config.card_width_px}px; height: {config.card_height_px}px; '
		f'overflow: hidden; background-color: {config.background}">'
		f"{markup}</div>"
	)
	return PreviewPage(wrapper)


#============================================
def render_element(markup: str, width_px: int, height_px: int) -> PIL.Image.Image:
	"""
	Default capture: rasterize element markup with PyMuPDF.

	Args:
		markup: Element markup.
		width_px: Target raster width.
		height_px: Target raster height.

	Returns:
		Pillow image close to the requested size.
	"""
	config = bcs.config.default_capture_config()
	width_mm = config.card_width_px / CSS_PIXELS_PER_INCH * MM_PER_INCH
	height_mm = config.card_height_px / CSS_PIXELS_PER_INCH * MM_PER_INCH
	dpi = CSS_PIXELS_PER_INCH * width_px / config.card_width_px
	return bcs.markup.render_markup_image(markup, width_mm, height_mm, dpi=dpi)


#============================================
def capture_preview(
	page: PreviewPage,
	selector: str = PREVIEW_SELECTOR,
	config: CaptureConfig | None = None,
	capture_fn: CaptureFn | None = None,
	sleep: Callable[[float], None] = time.sleep,
) -> PIL.Image.Image:
	"""
	Capture the preview element as a card raster.

	The element's transform is removed for the capture and restored
	afterwards, also when the capture fails. The raster is letterboxed onto
	the background at the card size times the pixel ratio.

	Args:
		page: Page holding the preview.
		selector: Preview element selector.
		config: Capture configuration.
		capture_fn: Rasterizer taking (markup, width_px, height_px).
		sleep: Layout settle wait.

	Returns:
		RGB image of exactly config.output_size.
	"""
	if config is None:
		config = bcs.config.default_capture_config()
	if capture_fn is None:
		capture_fn = render_element
	width, height = config.output_size

	original_transform = page.get_style(selector, "transform")
	if original_transform is not None:
		logger.debug("Removing preview transform '%s' for capture", original_transform)
		page.set_style(selector, "transform", None)
	try:
		sleep(config.settle_seconds)
		image = capture_fn(page.outer_markup(selector), width, height)
	except CaptureError:
		raise
	except Exception as exc:
		raise CaptureError(f"Preview capture failed: {exc}") from exc
	finally:
		if original_transform is not None:
			page.set_style(selector, "transform", original_transform)

	if image is None or image.width == 0 or image.height == 0:
		raise CaptureError("Preview capture produced an empty image")
	return bcs.images.letterbox_image(image, width, height, config.background)


#============================================
def capture_and_place(
	page: PreviewPage,
	card_count: int = bcs.config.DEFAULT_CARD_COUNT,
	selector: str = PREVIEW_SELECTOR,
	config: CaptureConfig | None = None,
	sheet_config: SheetConfig | None = None,
	capture_fn: CaptureFn | None = None,
	sleep: Callable[[float], None] = time.sleep,
) -> tuple[bytes, bcs.config.AssemblyResult]:
	"""
	Capture the preview once and place it at every card position of a sheet.

	card_count is clamped into [1, 10].

	Args:
		page: Page holding the preview.
		card_count: Requested cards.
		selector: Preview element selector.
		config: Capture configuration.
		sheet_config: Sheet configuration.
		capture_fn: Rasterizer taking (markup, width_px, height_px).
		sleep: Layout settle wait.

	Returns:
		Tuple of (PDF bytes, AssemblyResult).
	"""
	if sheet_config is None:
		sheet_config = bcs.config.default_sheet_config()
	count = bcs.assemble.clamp_card_count(card_count)
	image = capture_preview(page, selector, config, capture_fn, sleep)
	draw_card = bcs.assemble.image_card_drawer(image, sheet_config)
	return bcs.assemble.assemble_cards(draw_card, count, sheet_config)


#============================================
def generate_from_markup(
	markup: str,
	card_count: int = bcs.config.DEFAULT_CARD_COUNT,
	config: CaptureConfig | None = None,
	capture_fn: CaptureFn | None = None,
) -> bytes:
	"""
	Build a sheet from injected card markup by way of a preview capture.

	Args:
		markup: Injected card markup.
		card_count: Requested cards, clamped into [1, 10].
		config: Capture configuration.
		capture_fn: Rasterizer taking (markup, width_px, height_px).

	Returns:
		PDF bytes.
	"""
	page = page_for_markup(markup, config)
	data, _result = capture_and_place(page, card_count, config=config, capture_fn=capture_fn)
	return data


#============================================
def preview_data_uri(
	page: PreviewPage,
	selector: str = PREVIEW_SELECTOR,
	config: CaptureConfig | None = None,
	capture_fn: CaptureFn | None = None,
) -> str:
	"""
	Capture the preview and return it as a PNG data URI.
	"""
	image = capture_preview(page, selector, config, capture_fn)
	buffer = io.BytesIO()
	image.save(buffer, format="PNG")
	encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
	return f"data:image/png;base64,{encoded}"
