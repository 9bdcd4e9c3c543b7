"""
Data model for contact records, card designs, and sheet positions.
"""

# Standard Library
import dataclasses
import re
from typing import Any

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config
import business_card_sheets.errors


InputError = bcs.errors.InputError

CARD_WIDTH_MM = bcs.config.CARD_WIDTH_MM
CARD_HEIGHT_MM = bcs.config.CARD_HEIGHT_MM
MM_PER_INCH = bcs.config.MM_PER_INCH

LIST_FIELDS = ("phones", "emails", "websites", "addresses", "social_media")
TEXT_FIELDS = (
	"company_name",
	"name",
	"title",
	"subtitle",
	"slogan",
	"descriptor",
	"year_established",
)
ZONE_TYPES = ("logo", "company-name", "personal-info", "title-info", "contact-block", "custom-text")
OVERFLOW_POLICIES = ("wrap", "truncate", "scale")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclasses.dataclass(frozen=True)
class ContactField:
	value: str
	label: str = ""
	is_primary: bool = False

	@property
	def is_blank(self) -> bool:
		return not self.value or not self.value.strip()


@dataclasses.dataclass(frozen=True)
class LogoRef:
	logo_id: str = ""
	data_uri: str = ""


@dataclasses.dataclass(frozen=True)
class ContactRecord:
	company_name: str
	name: str
	title: str = ""
	subtitle: str = ""
	slogan: str = ""
	descriptor: str = ""
	year_established: str = ""
	logo: LogoRef = dataclasses.field(default_factory=LogoRef)
	phones: tuple[ContactField, ...] = ()
	emails: tuple[ContactField, ...] = ()
	websites: tuple[ContactField, ...] = ()
	addresses: tuple[ContactField, ...] = ()
	social_media: tuple[ContactField, ...] = ()

	def populated(self, kind: str) -> list[ContactField]:
		"""
		Return the non-blank entries of a list field, in order.

		Args:
			kind: List field name, e.g. "phones".

		Returns:
			List of ContactField entries.
		"""
		entries = getattr(self, kind)
		return [entry for entry in entries if not entry.is_blank]

	def text_value(self, field_name: str) -> str:
		"""
		Return a stripped text field value, or "" when absent.
		"""
		value = getattr(self, field_name, "") or ""
		return value.strip()


@dataclasses.dataclass(frozen=True)
class ZoneStyle:
	font_size: float | None = None
	font_weight: str = "normal"
	font_style: str = "normal"
	color: str = ""
	line_height: float | None = None


@dataclasses.dataclass(frozen=True)
class ContactBlockSpec:
	fields: tuple[str, ...] = ("phones", "emails", "websites")
	separator: str = "\n"
	max_lines: int | None = None
	overflow: str = "truncate"


@dataclasses.dataclass(frozen=True)
class Zone:
	zone_id: str
	zone_type: str
	x: float
	y: float
	width: float
	height: float
	alignment: str = "left"
	style: ZoneStyle = dataclasses.field(default_factory=ZoneStyle)
	contact_block: ContactBlockSpec | None = None
	field: str = ""
	text: str = ""


@dataclasses.dataclass(frozen=True)
class DesignMetadata:
	width_mm: float = CARD_WIDTH_MM
	height_mm: float = CARD_HEIGHT_MM
	colors: tuple[str, ...] = ()
	fonts: tuple[str, ...] = ()
	features: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class CardDesign:
	design_id: str
	name: str
	theme: str
	markup: str | None = None
	zones: tuple[Zone, ...] | None = None
	metadata: DesignMetadata = dataclasses.field(default_factory=DesignMetadata)
	style: str = "contact-focused"
	background_color: str = ""
	border_color: str = ""
	border_width: float = 0.0

	@property
	def is_markup(self) -> bool:
		return self.markup is not None


@dataclasses.dataclass(frozen=True)
class CardPosition:
	x: float
	y: float
	card_number: int


#============================================
def parse_dimension_mm(value: Any, default_value: float) -> float:
	"""
	Parse a dimension like "3.5in", "88.9mm", "336px" or a number into mm.

	Args:
		value: Dimension value; bare numbers are millimetres.
		default_value: Fallback when value is empty.

	Returns:
		Millimetre value.
	"""
	if value is None:
		return default_value
	if isinstance(value, (int, float)):
		return float(value)
	text = str(value).strip().lower()
	if not text:
		return default_value
	if text.endswith("in"):
		return float(text[:-2]) * MM_PER_INCH
	if text.endswith("px"):
		return float(text[:-2]) / 96.0 * MM_PER_INCH
	if text.endswith("mm"):
		return float(text[:-2])
	return float(text)


#============================================
def _text(data: dict, *keys: str) -> str:
	for key in keys:
		value = data.get(key)
		if value is None:
			continue
		if not isinstance(value, str):
			value = str(value)
		return value
	return ""


#============================================
def contact_field_from_dict(data: Any) -> ContactField:
	"""
	Build a ContactField from request data.

	Plain strings are accepted as bare values. Social media entries may use
	"platform"/"handle"/"url" in place of "label"/"value".

	Args:
		data: Dict or string.

	Returns:
		ContactField.
	"""
	if isinstance(data, str):
		return ContactField(value=data)
	if not isinstance(data, dict):
		raise InputError(f"Contact entry must be an object, got {type(data).__name__}")
	value = _text(data, "value", "handle", "url")
	label = _text(data, "label", "platform", "type")
	is_primary = bool(data.get("isPrimary", data.get("is_primary", False)))
	return ContactField(value=value, label=label, is_primary=is_primary)


#============================================
def contact_record_from_dict(data: Any) -> ContactRecord:
	"""
	Build a ContactRecord from camelCase request data.

	Args:
		data: Request dict.

	Returns:
		ContactRecord.
	"""
	if not isinstance(data, dict):
		raise InputError("Contact record must be an object")

	logo_data = data.get("logo") or {}
	if not isinstance(logo_data, dict):
		raise InputError("Contact record logo must be an object")
	logo = LogoRef(
		logo_id=_text(logo_data, "logoId", "logo_id", "id"),
		data_uri=_text(logo_data, "logoDataUri", "data_uri", "dataUri"),
	)

	lists: dict[str, tuple[ContactField, ...]] = {}
	key_aliases = {
		"phones": ("phones",),
		"emails": ("emails",),
		"websites": ("websites",),
		"addresses": ("addresses",),
		"social_media": ("socialMedia", "social_media", "social"),
	}
	for field_name, aliases in key_aliases.items():
		raw_entries: Any = []
		for alias in aliases:
			if alias in data and data[alias] is not None:
				raw_entries = data[alias]
				break
		if not isinstance(raw_entries, list):
			raise InputError(f"Contact field '{aliases[0]}' must be a list")
		lists[field_name] = tuple(contact_field_from_dict(entry) for entry in raw_entries)

	return ContactRecord(
		company_name=_text(data, "companyName", "company_name", "company"),
		name=_text(data, "name"),
		title=_text(data, "title"),
		subtitle=_text(data, "subtitle"),
		slogan=_text(data, "slogan"),
		descriptor=_text(data, "descriptor"),
		year_established=_text(data, "yearEstablished", "year_established"),
		logo=logo,
		phones=lists["phones"],
		emails=lists["emails"],
		websites=lists["websites"],
		addresses=lists["addresses"],
		social_media=lists["social_media"],
	)


#============================================
def validate_contact_record(record: ContactRecord) -> tuple[bool, list[str]]:
	"""
	Check that a contact record has enough data to print a card.

	Args:
		record: Contact record.

	Returns:
		Tuple of (is_valid, error messages).
	"""
	errors: list[str] = []
	if not record.text_value("name"):
		errors.append("Name is required")
	if not record.text_value("company_name"):
		errors.append("Company name is required")
	has_contact = any(record.populated(kind) for kind in ("phones", "emails", "websites"))
	if not has_contact:
		errors.append("At least one contact method (phone, email, or website) is required")
	for index, email in enumerate(record.emails, start=1):
		if email.is_blank:
			continue
		if not EMAIL_PATTERN.match(email.value.strip()):
			errors.append(f"Email {index} is not in a valid format")
	return (not errors, errors)


#============================================
def zone_from_dict(data: dict) -> Zone:
	"""
	Build a Zone from catalog data.

	Args:
		data: Zone dict using the catalog's camelCase keys.

	Returns:
		Zone.
	"""
	position = data.get("position") or {}
	size = data.get("dimensions") or data.get("size") or {}
	styles = data.get("styles") or {}
	style = ZoneStyle(
		font_size=styles.get("fontSize"),
		font_weight=str(styles.get("fontWeight", "normal")),
		font_style=str(styles.get("fontStyle", "normal")),
		color=str(styles.get("color", "")),
		line_height=styles.get("lineHeight"),
	)
	contact_block = None
	block_data = data.get("contactBlock")
	if block_data is not None:
		contact_block = ContactBlockSpec(
			fields=tuple(block_data.get("fields", ("phones", "emails", "websites"))),
			separator=str(block_data.get("separator", "\n")),
			max_lines=block_data.get("maxLines"),
			overflow=str(block_data.get("overflow", "truncate")),
		)
	field_mapping = data.get("fieldMapping") or {}
	return Zone(
		zone_id=str(data.get("id", "")),
		zone_type=str(data.get("type", "")),
		x=float(position.get("x", 0.0)),
		y=float(position.get("y", 0.0)),
		width=float(size.get("width", 0.0)),
		height=float(size.get("height", 0.0)),
		alignment=str(data.get("alignment", "left")),
		style=style,
		contact_block=contact_block,
		field=str(data.get("field", field_mapping.get("primary", ""))),
		text=str(data.get("text", "")),
	)


#============================================
def design_from_dict(data: dict) -> CardDesign:
	"""
	Build a CardDesign from catalog data.

	Markup designs carry "jsx" or "markup"; zone designs carry "zones".

	Args:
		data: Design dict.

	Returns:
		CardDesign.
	"""
	metadata_data = data.get("metadata") or {}
	dimensions = metadata_data.get("dimensions") or {}
	metadata = DesignMetadata(
		width_mm=parse_dimension_mm(dimensions.get("width"), CARD_WIDTH_MM),
		height_mm=parse_dimension_mm(dimensions.get("height"), CARD_HEIGHT_MM),
		colors=tuple(metadata_data.get("colors", ())),
		fonts=tuple(metadata_data.get("fonts", ())),
		features=tuple(metadata_data.get("features", ())),
	)
	markup = data.get("markup", data.get("jsx"))
	zones = None
	if data.get("zones") is not None:
		zones = tuple(zone_from_dict(zone) for zone in data["zones"])
	global_styles = data.get("globalStyles") or {}
	return CardDesign(
		design_id=str(data.get("id", data.get("catalogId", ""))),
		name=str(data.get("name", "")),
		theme=str(data.get("theme", "")),
		markup=markup,
		zones=zones,
		metadata=metadata,
		style=str(data.get("style", "contact-focused")),
		background_color=str(global_styles.get("backgroundColor", "")),
		border_color=str(global_styles.get("borderColor", "")),
		border_width=float(global_styles.get("borderWidth", 0.0) or 0.0),
	)
