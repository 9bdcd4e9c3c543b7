"""
Logo image loading, caching, and raster normalization.
"""

# Standard Library
import base64
import binascii
import collections
import hashlib
import io
import logging
import pathlib
import time
from typing import Callable

# PIP3 modules
import PIL.Image
import requests

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config
import business_card_sheets.errors
import business_card_sheets.models


CacheConfig = bcs.config.CacheConfig
LogoRef = bcs.models.LogoRef
LogoLoadError = bcs.errors.LogoLoadError

LOGO_FETCH_TIMEOUT = bcs.config.LOGO_FETCH_TIMEOUT

logger = logging.getLogger(__name__)


class ImageCache:
	"""
	Bounded least-recently-used cache of decoded logo images with expiry.

	Entries older than ttl_seconds are dropped on lookup. When the cache is
	full the least recently used entry is evicted.
	"""

	def __init__(self, config: CacheConfig | None = None, clock: Callable[[], float] = time.monotonic):
		if config is None:
			config = bcs.config.default_cache_config()
		self.capacity = max(0, config.capacity)
		self.ttl_seconds = config.ttl_seconds
		self._clock = clock
		self._entries: collections.OrderedDict[str, tuple[float, PIL.Image.Image]] = collections.OrderedDict()

	def __len__(self) -> int:
		return len(self._entries)

	def __contains__(self, key: str) -> bool:
		return self.get(key) is not None

	def get(self, key: str) -> PIL.Image.Image | None:
		entry = self._entries.get(key)
		if entry is None:
			return None
		stored_at, image = entry
		if self.ttl_seconds > 0 and self._clock() - stored_at > self.ttl_seconds:
			del self._entries[key]
			return None
		self._entries.move_to_end(key)
		return image

	def put(self, key: str, image: PIL.Image.Image) -> None:
		if self.capacity == 0:
			return
		self._entries[key] = (self._clock(), image)
		self._entries.move_to_end(key)
		while len(self._entries) > self.capacity:
			evicted, _entry = self._entries.popitem(last=False)
			logger.debug("Evicted logo %s from cache", evicted)

	def clear(self) -> None:
		self._entries.clear()


#============================================
def logo_cache_key(logo: LogoRef) -> str:
	"""
	Build a cache key for a logo reference.

	Args:
		logo: Logo reference.

	Returns:
		Logo id when present, else a digest of the image data.
	"""
	if logo.logo_id:
		return f"id:{logo.logo_id}"
	digest = hashlib.sha256(logo.data_uri.encode("utf-8")).hexdigest()
	return f"sha256:{digest}"


#============================================
def decode_data_uri(data_uri: str) -> bytes:
	"""
	Decode the payload of a base64 image data URI.

	Args:
		data_uri: String like "data:image/png;base64,....".

	Returns:
		Raw image bytes.
	"""
	if not data_uri.startswith("data:image/"):
		raise LogoLoadError("Logo data is not an image data URI")
	header, _sep, payload = data_uri.partition(",")
	if not payload:
		raise LogoLoadError("Logo data URI has no payload")
	if ";base64" not in header:
		raise LogoLoadError("Logo data URI is not base64 encoded")
	try:
		return base64.b64decode(payload, validate=False)
	except (binascii.Error, ValueError) as exc:
		raise LogoLoadError(f"Logo data URI payload is not valid base64: {exc}") from exc


#============================================
def fetch_logo_bytes(source: str, timeout: float = LOGO_FETCH_TIMEOUT) -> bytes:
	"""
	Read logo bytes from a data URI, an http(s) URL, or a file path.

	Args:
		source: Logo source string.
		timeout: Seconds before a remote fetch is abandoned.

	Returns:
		Raw image bytes.
	"""
	if source.startswith("data:"):
		return decode_data_uri(source)
	if source.startswith(("http://", "https://")):
		try:
			response = requests.get(source, timeout=timeout)
			response.raise_for_status()
		except requests.RequestException as exc:
			raise LogoLoadError(f"Logo fetch failed for {source}: {exc}") from exc
		return response.content
	path = pathlib.Path(source)
	if not path.is_file():
		raise LogoLoadError(f"Logo file not found: {source}")
	return path.read_bytes()


#============================================
def decode_image(data: bytes) -> PIL.Image.Image:
	"""
	Decode image bytes into a loaded RGBA or RGB Pillow image.

	Args:
		data: Raw image bytes.

	Returns:
		Pillow image.
	"""
	try:
		image = PIL.Image.open(io.BytesIO(data))
		image.load()
	except (PIL.UnidentifiedImageError, OSError, ValueError) as exc:
		raise LogoLoadError(f"Logo image could not be decoded: {exc}") from exc
	if image.mode not in ("RGB", "RGBA"):
		image = image.convert("RGBA")
	return image


#============================================
def load_logo_image(
	logo: LogoRef,
	cache: ImageCache | None = None,
	timeout: float = LOGO_FETCH_TIMEOUT,
) -> PIL.Image.Image | None:
	"""
	Load the logo for a contact record.

	Args:
		logo: Logo reference.
		cache: Optional image cache.
		timeout: Remote fetch timeout in seconds.

	Returns:
		Pillow image, or None when the record carries no logo data.
	"""
	if not logo.data_uri:
		return None
	key = logo_cache_key(logo)
	if cache is not None:
		cached = cache.get(key)
		if cached is not None:
			return cached
	image = decode_image(fetch_logo_bytes(logo.data_uri, timeout))
	if cache is not None:
		cache.put(key, image)
	return image


#============================================
def letterbox_image(
	image: PIL.Image.Image,
	width: int,
	height: int,
	background: str = "#FFFFFF",
) -> PIL.Image.Image:
	"""
	Fit an image into an exact pixel size, keeping aspect ratio.

	The image is scaled to fit and centered on a solid background; any
	transparency is flattened onto the background.

	Args:
		image: Source image.
		width: Target width in pixels.
		height: Target height in pixels.
		background: Fill color.

	Returns:
		RGB image of exactly width x height.
	"""
	if width <= 0 or height <= 0:
		raise ValueError("Target size must be positive")
	canvas = PIL.Image.new("RGB", (width, height), background)
	if image.width <= 0 or image.height <= 0:
		return canvas
	scale = min(width / image.width, height / image.height)
	scaled_width = max(1, int(round(image.width * scale)))
	scaled_height = max(1, int(round(image.height * scale)))
	resized = image.convert("RGBA").resize((scaled_width, scaled_height), PIL.Image.LANCZOS)
	offset_x = (width - scaled_width) // 2
	offset_y = (height - scaled_height) // 2
	canvas.paste(resized, (offset_x, offset_y), resized)
	return canvas
