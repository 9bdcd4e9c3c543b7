"""
Contact data injection into pre-authored card markup.

Injection is best-effort: a field that fails to inject is logged and left as
authored, and the rest of the card is still filled.
"""

# Standard Library
import dataclasses
import html
import logging
import re

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config
import business_card_sheets.models
import business_card_sheets.slots


ContactRecord = bcs.models.ContactRecord
ContactField = bcs.models.ContactField
CardDesign = bcs.models.CardDesign
Slot = bcs.slots.Slot

SLOT_TEXT = bcs.slots.SLOT_TEXT
SLOT_HIDEABLE = bcs.slots.SLOT_HIDEABLE
SLOT_CONTACT_LIST = bcs.slots.SLOT_CONTACT_LIST
LOGO_PLACEHOLDER_CLASS = bcs.config.LOGO_PLACEHOLDER_CLASS

logger = logging.getLogger(__name__)

NON_DIGIT_PATTERN = re.compile(r"\D")
SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

# edit actions
EDIT_REPLACE = "replace"
EDIT_REMOVE = "remove"


@dataclasses.dataclass(frozen=True)
class Edit:
	action: str
	start: int
	end: int
	text: str = ""


#============================================
def format_phone_number(phone: str) -> str:
	"""
	Format a phone number by its digit count.

	10 digits become "(XXX) XXX-XXXX", 11 digits with a leading 1 become
	"+1 (XXX) XXX-XXXX", 7 digits become "XXX-XXXX". Anything else is returned
	unchanged.

	Args:
		phone: Raw phone value.

	Returns:
		Formatted phone number.
	"""
	if not phone or not phone.strip():
		return ""
	digits = NON_DIGIT_PATTERN.sub("", phone)
	if len(digits) == 10:
		return f"({digits[0:3]}) {digits[3:6]}-{digits[6:10]}"
	if len(digits) == 11 and digits[0] == "1":
		return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:11]}"
	if len(digits) == 7:
		return f"{digits[0:3]}-{digits[3:7]}"
	return phone


#============================================
def format_website(url: str) -> str:
	"""
	Strip the scheme and trailing slash from a website.

	Args:
		url: Raw website value.

	Returns:
		Display form of the website.
	"""
	value = SCHEME_PATTERN.sub("", url.strip())
	return value.rstrip("/")


#============================================
def format_value(field: str, value: str) -> str:
	"""
	Format a contact value for display by field.

	Args:
		field: Record field name.
		value: Raw value.

	Returns:
		Display value.
	"""
	if field == "phones":
		return format_phone_number(value)
	if field == "websites":
		return format_website(value)
	return value.strip()


#============================================
def compose_slot_text(slot: Slot, value: str) -> str:
	"""
	Build the replacement text for a slot, keeping its decorative prefix.

	A prefix declared on the slot wins; otherwise the prefix baked into the
	placeholder is detected. Whitespace around the placeholder is preserved and
	the value is escaped for markup. A detected prefix that the value already
	starts with is not added again, so a second pass leaves the slot as is.

	Args:
		slot: Slot being filled.
		value: Formatted value.

	Returns:
		Replacement text for the slot's text span.
	"""
	placeholder = slot.placeholder
	core = placeholder.strip()
	leading = placeholder[:len(placeholder) - len(placeholder.lstrip())]
	trailing = placeholder[len(placeholder.rstrip()):]
	text = html.escape(value, quote=False)
	if slot.prefix is not None:
		prefix = slot.prefix
	else:
		prefix, _rule = bcs.slots.detect_prefix(core)
		# a value shaped like a prefix carries its own head
		if prefix and text.startswith(prefix.strip()):
			prefix = ""
	return f"{leading}{prefix}{text}{trailing}"


#============================================
def plan_fill(slot: Slot, value: str) -> Edit | None:
	"""
	Plan the replacement of a slot's placeholder text with a value.

	Args:
		slot: Slot being filled.
		value: Formatted value.

	Returns:
		Edit, or None when the slot has no placeholder text to replace.
	"""
	if not slot.has_text:
		logger.warning("Slot %s has no placeholder text to replace", slot.slot_class)
		return None
	text = compose_slot_text(slot, value)
	return Edit(EDIT_REPLACE, slot.text_start, slot.text_end, text)


#============================================
def bind_list_slots(slots: list[Slot], entries: list[ContactField]) -> dict[int, ContactField]:
	"""
	Bind list slots of one field to contact entries.

	Tagged slots (phone data-type, email data-primary) take a matching unused
	entry first. Remaining slots are then filled in document order from the
	unused entries in list order.

	Args:
		slots: Slots of one list field, in document order.
		entries: Non-blank entries of that field, in order.

	Returns:
		Dict of slot index (into slots) to bound entry.
	"""
	bindings: dict[int, ContactField] = {}
	used: set[int] = set()
	for slot_index, slot in enumerate(slots):
		if not slot.tagged:
			continue
		for entry_index, entry in enumerate(entries):
			if entry_index in used:
				continue
			if slot.field == "phones":
				matched = entry.label.strip().lower() == slot.attributes["data-type"].strip().lower()
			else:
				matched = entry.is_primary
			if matched:
				bindings[slot_index] = entry
				used.add(entry_index)
				break
	remaining = [index for index in range(len(entries)) if index not in used]
	for slot_index in range(len(slots)):
		if slot_index in bindings:
			continue
		if not remaining:
			break
		entry_index = remaining.pop(0)
		bindings[slot_index] = entries[entry_index]
	return bindings


#============================================
def plan_text_slot(slot: Slot, record: ContactRecord) -> Edit | None:
	"""
	Plan the edit for a single-value slot.

	Args:
		slot: TEXT or HIDEABLE slot.
		record: Contact record.

	Returns:
		Edit, or None to leave the slot as authored.
	"""
	value = record.text_value(slot.field)
	if not value:
		if slot.kind == SLOT_TEXT:
			logger.debug("Required field %s is empty, leaving %s as authored", slot.field, slot.slot_class)
			return None
		return Edit(EDIT_REMOVE, slot.start, slot.end)
	return plan_fill(slot, format_value(slot.field, value))


#============================================
def plan_social_slots(slots: list[Slot], record: ContactRecord) -> list[Edit | None]:
	"""
	Plan edits for social slots, bound by platform label.

	Args:
		slots: Social slots in document order.
		record: Contact record.

	Returns:
		One edit (or None) per slot.
	"""
	entries = record.populated("social_media")
	edits: list[Edit | None] = []
	for slot in slots:
		platform = slot.platform.lower()
		match = None
		for entry in entries:
			if platform and entry.label.strip().lower() == platform:
				match = entry
				break
		if match is None:
			logger.warning("No social media entry for platform '%s', leaving slot as authored", slot.platform)
			edits.append(None)
			continue
		edits.append(plan_fill(slot, match.value.strip()))
	return edits


#============================================
def drop_nested_edits(edits: list[Edit]) -> list[Edit]:
	"""
	Drop edits that fall inside a removed element.

	Args:
		edits: Planned edits.

	Returns:
		Non-overlapping edits.
	"""
	removals = [edit for edit in edits if edit.action == EDIT_REMOVE]
	kept: list[Edit] = []
	for edit in edits:
		nested = False
		for removal in removals:
			if removal is edit:
				continue
			if removal.start <= edit.start and edit.end <= removal.end:
				nested = True
				break
		if not nested:
			kept.append(edit)
	return kept


#============================================
def apply_edits(markup: str, edits: list[Edit]) -> str:
	"""
	Apply non-overlapping edits to markup.

	Args:
		markup: Original markup.
		edits: Edits with spans into the original markup.

	Returns:
		Edited markup.
	"""
	result = markup
	for edit in sorted(edits, key=lambda item: item.start, reverse=True):
		replacement = edit.text if edit.action == EDIT_REPLACE else ""
		result = result[:edit.start] + replacement + result[edit.end:]
	return result


#============================================
def inject_contact_info(markup: str, record: ContactRecord) -> str:
	"""
	Fill the recognized slots in card markup with contact data.

	Single-value slots are replaced or, when the record has no value, removed
	(name and company are left as authored instead). List slots bind to the
	record's non-blank entries and extra slots are removed. Social slots bind
	by platform and are left as authored when unmatched.

	Args:
		markup: Card markup.
		record: Contact record.

	Returns:
		Markup with contact data injected.
	"""
	slots = bcs.slots.scan_slots(markup)
	if not slots:
		logger.debug("No contact slots found in markup")
		return markup

	edits: list[Edit] = []

	for slot in slots:
		if slot.kind == SLOT_CONTACT_LIST:
			continue
		try:
			edit = plan_text_slot(slot, record)
		except Exception:
			logger.warning("Failed to inject %s, keeping placeholder", slot.slot_class, exc_info=True)
			continue
		if edit is not None:
			edits.append(edit)

	by_field: dict[str, list[Slot]] = {}
	for slot in slots:
		if slot.kind == SLOT_CONTACT_LIST:
			by_field.setdefault(slot.field, []).append(slot)

	for field, field_slots in by_field.items():
		try:
			if field == "social_media":
				planned = plan_social_slots(field_slots, record)
			else:
				bindings = bind_list_slots(field_slots, record.populated(field))
				planned = []
				for slot_index, slot in enumerate(field_slots):
					entry = bindings.get(slot_index)
					if entry is None:
						planned.append(Edit(EDIT_REMOVE, slot.start, slot.end))
						continue
					planned.append(plan_fill(slot, format_value(field, entry.value)))
		except Exception:
			logger.warning("Failed to inject %s, keeping placeholders", field, exc_info=True)
			continue
		edits.extend(edit for edit in planned if edit is not None)

	return apply_edits(markup, drop_nested_edits(edits))


#============================================
def inject_logo(markup: str, data_uri: str) -> str:
	"""
	Replace the first logo placeholder's content with the logo image.

	Args:
		markup: Card markup.
		data_uri: Logo data URI ("data:image/...").

	Returns:
		Markup with the logo embedded, or unchanged when there is no
		placeholder or no usable image data.
	"""
	if not data_uri or not data_uri.startswith("data:image/"):
		return markup
	for match in bcs.slots.TAG_PATTERN.finditer(markup):
		if match.group(1):
			continue
		attributes = bcs.slots.parse_attributes(match.group(3))
		if LOGO_PLACEHOLDER_CLASS not in attributes.get("class", "").split():
			continue
		tag = match.group(2).lower()
		open_end = match.end()
		end = bcs.slots.find_element_end(markup, tag, open_end)
		if end <= open_end:
			logger.warning("Logo placeholder <%s> is not closed, skipping logo", tag)
			return markup
		close_start = markup.rfind("</", open_end, end)
		image = (
			f'<img src="{data_uri}" alt="Logo" '
			'style="width: 100%; height: 100%; object-fit: contain;"/>'
		)
		return markup[:open_end] + image + markup[close_start:]
	logger.debug("No %s element in markup", LOGO_PLACEHOLDER_CLASS)
	return markup


#============================================
def generate_injected_markup(design: CardDesign, record: ContactRecord) -> str:
	"""
	Build the fully injected markup for a markup design.

	Args:
		design: Markup design.
		record: Contact record.

	Returns:
		Markup with contact data and logo.
	"""
	if design.markup is None:
		raise ValueError(f"Design {design.design_id} has no markup")
	markup = inject_contact_info(design.markup, record)
	return inject_logo(markup, record.logo.data_uri)
