"""
Typed slots in pre-authored card markup.

Markup is scanned by tag structure rather than parsed into a tree. Each element
whose class list carries a recognized bc-contact-<kind> token becomes a Slot
with the character spans needed to replace its text or remove the element.
"""

# Standard Library
import dataclasses
import re
import unicodedata

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config


SLOT_CLASS_PREFIX = bcs.config.SLOT_CLASS_PREFIX

# slot kinds
SLOT_TEXT = "text"
SLOT_HIDEABLE = "hideable"
SLOT_CONTACT_LIST = "contact-list"

# slot class suffix -> (record field, slot kind)
SLOT_FIELDS = {
	"name": ("name", SLOT_TEXT),
	"company": ("company_name", SLOT_TEXT),
	"title": ("title", SLOT_HIDEABLE),
	"subtitle": ("subtitle", SLOT_HIDEABLE),
	"slogan": ("slogan", SLOT_HIDEABLE),
	"descriptor": ("descriptor", SLOT_HIDEABLE),
	"established": ("year_established", SLOT_HIDEABLE),
	"year-established": ("year_established", SLOT_HIDEABLE),
	"phone": ("phones", SLOT_CONTACT_LIST),
	"email": ("emails", SLOT_CONTACT_LIST),
	"website": ("websites", SLOT_CONTACT_LIST),
	"address": ("addresses", SLOT_CONTACT_LIST),
	"social": ("social_media", SLOT_CONTACT_LIST),
}

PREFIX_BRACKET = "bracket"
PREFIX_EMOJI = "emoji"
PREFIX_LABEL = "label"
PREFIX_DECLARED = "declared"

TAG_PATTERN = re.compile(r"<(/?)([A-Za-z][A-Za-z0-9-]*)((?:\s[^<>]*?)?)(/?)>")
ATTR_PATTERN = re.compile(r"([A-Za-z_:][A-Za-z0-9_:.-]*)\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s\"'>]+))")
BRACKET_PREFIX_PATTERN = re.compile(r"^(\[[A-Z]+\]\s*)")
LABEL_PREFIX_PATTERN = re.compile(r"^([A-Za-z]+:)\s*")
VOID_TAGS = {"img", "br", "hr", "input", "meta", "link", "source", "wbr"}
EMOJI_JOINERS = {"\ufe0f", "\ufe0e", "\u200d", "\u20e3"}


@dataclasses.dataclass(frozen=True)
class Slot:
	slot_class: str
	field: str
	kind: str
	tag: str
	start: int
	open_end: int
	text_start: int
	text_end: int
	end: int
	placeholder: str
	attributes: dict[str, str] = dataclasses.field(default_factory=dict)
	prefix: str | None = None

	@property
	def tagged(self) -> bool:
		"""
		True when the slot asks for a specific list entry by attribute.
		"""
		if self.field == "phones":
			return bool(self.attributes.get("data-type", "").strip())
		if self.field == "emails" and "data-primary" in self.attributes:
			return self.attributes["data-primary"].strip().lower() not in ("false", "0", "no")
		return False

	@property
	def platform(self) -> str:
		return self.attributes.get("data-platform", "").strip()

	@property
	def has_text(self) -> bool:
		return self.text_end > self.text_start


#============================================
def parse_attributes(text: str) -> dict[str, str]:
	"""
	Parse tag attributes into a dict with lowercase names.

	Args:
		text: Attribute text of an opening tag.

	Returns:
		Dict of attribute values; valueless attributes map to "".
	"""
	attributes: dict[str, str] = {}
	for match in ATTR_PATTERN.finditer(text):
		name = match.group(1).lower()
		value = match.group(2)
		if value is None:
			value = match.group(3)
		if value is None:
			value = match.group(4) or ""
		attributes[name] = value
	# bare flags like data-primary
	for token in re.findall(r"(?:^|\s)([A-Za-z_:][A-Za-z0-9_:.-]*)(?=\s|$)", ATTR_PATTERN.sub(" ", text)):
		attributes.setdefault(token.lower(), "")
	return attributes


#============================================
def find_element_end(markup: str, tag: str, open_end: int) -> int:
	"""
	Find the end index of an element, counting nested tags of the same name.

	Args:
		markup: Markup string.
		tag: Lowercase tag name of the element.
		open_end: Index just after the element's opening tag.

	Returns:
		Index just after the matching closing tag, or open_end when unmatched.
	"""
	depth = 1
	for match in TAG_PATTERN.finditer(markup, open_end):
		if match.group(2).lower() != tag:
			continue
		if match.group(4):
			continue
		if match.group(1):
			depth -= 1
			if depth == 0:
				return match.end()
		else:
			depth += 1
	return open_end


#============================================
def find_text_span(markup: str, open_end: int, end: int) -> tuple[int, int]:
	"""
	Locate the placeholder text run inside a slot element.

	The first text run wins when it has content. Otherwise the last non-blank
	run that is a direct child of the element is used, so icon elements ahead
	of the text stay where they are.

	Args:
		markup: Card markup.
		open_end: Index just past the opening tag.
		end: Index just past the closing tag.

	Returns:
		Tuple of (start, end) indexes of the placeholder text.
	"""
	if end <= open_end:
		return (open_end, open_end)
	close_start = markup.rfind("</", open_end, end)
	runs: list[tuple[int, int]] = []
	depth = 0
	cursor = open_end
	for match in TAG_PATTERN.finditer(markup, open_end, close_start):
		if depth == 0:
			runs.append((cursor, match.start()))
		if match.group(1):
			depth = max(depth - 1, 0)
		elif not match.group(4) and match.group(2).lower() not in VOID_TAGS:
			depth += 1
		cursor = match.end()
	if depth == 0:
		runs.append((cursor, close_start))
	first_start, first_end = runs[0]
	if markup[first_start:first_end].strip():
		return runs[0]
	for run_start, run_end in reversed(runs):
		if markup[run_start:run_end].strip():
			return (run_start, run_end)
	return runs[0]


#============================================
def slot_suffix(class_value: str) -> str | None:
	"""
	Return the recognized slot suffix in a class attribute, if any.

	Args:
		class_value: Raw class attribute value.

	Returns:
		Suffix such as "phone", or None.
	"""
	for token in class_value.split():
		if not token.startswith(SLOT_CLASS_PREFIX):
			continue
		suffix = token[len(SLOT_CLASS_PREFIX):]
		if suffix in SLOT_FIELDS:
			return suffix
	return None


#============================================
def scan_slots(markup: str) -> list[Slot]:
	"""
	Scan markup for recognized slot elements, in document order.

	Args:
		markup: Card markup.

	Returns:
		List of Slot entries.
	"""
	slots: list[Slot] = []
	for match in TAG_PATTERN.finditer(markup):
		if match.group(1):
			continue
		attributes = parse_attributes(match.group(3))
		suffix = slot_suffix(attributes.get("class", ""))
		if suffix is None:
			continue
		tag = match.group(2).lower()
		open_end = match.end()
		if match.group(4) or tag in VOID_TAGS:
			end = open_end
		else:
			end = find_element_end(markup, tag, open_end)
		text_start, text_end = find_text_span(markup, open_end, end)
		field, kind = SLOT_FIELDS[suffix]
		prefix = attributes.get("data-prefix")
		slots.append(
			Slot(
				slot_class=SLOT_CLASS_PREFIX + suffix,
				field=field,
				kind=kind,
				tag=tag,
				start=match.start(),
				open_end=open_end,
				text_start=text_start,
				text_end=text_end,
				end=end,
				placeholder=markup[text_start:text_end],
				attributes=attributes,
				prefix=prefix,
			)
		)
	return slots


#============================================
def is_emoji_char(char: str) -> bool:
	"""
	Check whether a character belongs to an emoji or pictographic symbol run.

	Args:
		char: Single character.

	Returns:
		True for symbols, emoji modifiers and joiners.
	"""
	if char in EMOJI_JOINERS:
		return True
	category = unicodedata.category(char)
	return category in ("So", "Sk") or 0x1F300 <= ord(char) <= 0x1FAFF


#============================================
def detect_prefix(text: str) -> tuple[str, str | None]:
	"""
	Detect a decorative prefix baked into placeholder text.

	Rules are tried in order and the first match wins: a bracketed upper-case
	label like "[MOBILE]", a leading run of emoji or symbols, then a
	"Word:" label.

	Args:
		text: Placeholder text without surrounding whitespace.

	Returns:
		Tuple of (prefix to reattach, rule name or None).
	"""
	match = BRACKET_PREFIX_PATTERN.match(text)
	if match:
		return (match.group(1), PREFIX_BRACKET)

	index = 0
	has_symbol = False
	while index < len(text) and is_emoji_char(text[index]):
		if text[index] not in EMOJI_JOINERS:
			has_symbol = True
		index += 1
	if has_symbol:
		while index < len(text) and text[index].isspace():
			index += 1
		return (text[:index], PREFIX_EMOJI)

	match = LABEL_PREFIX_PATTERN.match(text)
	if match:
		return (match.group(1) + " ", PREFIX_LABEL)
	return ("", None)
