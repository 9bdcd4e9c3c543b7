import business_card_sheets.slots


slots = business_card_sheets.slots


#============================================
def test_bracket_prefix_wins_over_label() -> None:
	"""
	Ensure a bracket label is taken even when a Word: label could match later.
	"""
	prefix, rule = slots.detect_prefix("[MOBILE] Tel: (555) 000-0000")
	assert prefix == "[MOBILE] "
	assert rule == slots.PREFIX_BRACKET


#============================================
def test_emoji_prefix_detected() -> None:
	"""
	Ensure a leading emoji run and its spacing are kept as the prefix.
	"""
	prefix, rule = slots.detect_prefix("\U0001F4F1 (555) 000-0000")
	assert prefix == "\U0001F4F1 "
	assert rule == slots.PREFIX_EMOJI

	prefix, rule = slots.detect_prefix("\u2709\ufe0f jane@acme.com")
	assert prefix == "\u2709\ufe0f "
	assert rule == slots.PREFIX_EMOJI


#============================================
def test_label_prefix_detected() -> None:
	"""
	Ensure a Word: label is reattached with one space.
	"""
	prefix, rule = slots.detect_prefix("Email:jane@acme.com")
	assert prefix == "Email: "
	assert rule == slots.PREFIX_LABEL


#============================================
def test_no_prefix() -> None:
	"""
	Ensure plain values have no prefix.
	"""
	assert slots.detect_prefix("(555) 000-0000") == ("", None)
	assert slots.detect_prefix("[mobile] 555") == ("", None)


#============================================
def test_scan_slots_finds_typed_slots() -> None:
	"""
	Ensure slot classes map to fields, kinds and placeholder spans.
	"""
	markup = (
		'<div class="card">'
		'<h1 class="big bc-contact-name">John Smith</h1>'
		'<div class="bc-contact-phone" data-type="mobile">[MOBILE] 555</div>'
		'<div class="bc-contact-email" data-primary>a@b.com</div>'
		'<div class="bc-contact-social" data-platform="LinkedIn" data-prefix="in: ">x</div>'
		'<div class="contact-info">not a slot</div>'
		"</div>"
	)
	found = slots.scan_slots(markup)
	assert [slot.field for slot in found] == ["name", "phones", "emails", "social_media"]
	assert found[0].kind == slots.SLOT_TEXT
	assert found[0].placeholder == "John Smith"
	assert markup[found[0].start:found[0].end] == '<h1 class="big bc-contact-name">John Smith</h1>'
	assert found[1].kind == slots.SLOT_CONTACT_LIST
	assert found[1].tagged
	assert found[2].tagged
	assert found[3].platform == "LinkedIn"
	assert found[3].prefix == "in: "


#============================================
def test_scan_slots_handles_nested_elements() -> None:
	"""
	Ensure the element span covers nested tags of the same name.
	"""
	markup = '<div class="bc-contact-address">12 Main St<div>Suite 4</div></div><p>after</p>'
	found = slots.scan_slots(markup)
	assert len(found) == 1
	slot = found[0]
	assert slot.placeholder == "12 Main St"
	assert markup[slot.end:] == "<p>after</p>"


#============================================
def test_text_span_skips_leading_icon() -> None:
	"""
	Ensure the placeholder is the direct text after nested icon markup.
	"""
	markup = '<div class="bc-contact-phone"><i class="icon"><b>x</b></i><br> (555) 000-0000</div>'
	slot = slots.scan_slots(markup)[0]
	assert slot.placeholder == " (555) 000-0000"
	assert markup[slot.text_end:] == "</div>"
	assert slot.has_text
	empty = slots.scan_slots('<div class="bc-contact-phone"><i class="icon"></i></div>')[0]
	assert not empty.has_text


#============================================
def test_unknown_slot_suffix_ignored() -> None:
	"""
	Ensure bc-contact-* classes outside the slot contract are skipped.
	"""
	assert slots.scan_slots('<div class="bc-contact-fax">1</div>') == []


#============================================
def test_email_primary_false_is_untagged() -> None:
	"""
	Ensure data-primary="false" does not tag an email slot.
	"""
	found = slots.scan_slots('<div class="bc-contact-email" data-primary="false">a@b.com</div>')
	assert not found[0].tagged
