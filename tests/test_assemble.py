import io
import logging

import PIL.Image
import pypdf
import pytest

import card_builders

import business_card_sheets.assemble
import business_card_sheets.config
import business_card_sheets.document
import business_card_sheets.errors
import business_card_sheets.layout
import business_card_sheets.markup
import business_card_sheets.models


assemble = business_card_sheets.assemble
errors = business_card_sheets.errors
count_pages = business_card_sheets.document.count_pages


#============================================
def recording_drawer(calls: list):
	"""
	Build a card drawer that records the page number and position it was given.
	"""
	def draw_card(pdf, position) -> None:
		calls.append((pdf.getPageNumber(), position))
		pdf.rect(0, 0, 10, 10)
	return draw_card


#============================================
def test_fifteen_cards_span_two_sheets() -> None:
	"""
	Ensure a 15 card job makes two pages with cards 11-15 restarting at slot 1.
	"""
	calls = []
	data, result = assemble.assemble_cards(recording_drawer(calls), 15)
	assert count_pages(data) == 2
	assert result.pages == 2
	assert result.placed_cards == list(range(1, 16))
	assert result.skipped_cards == []
	positions = business_card_sheets.layout.compute_sheet_positions()
	assert [page for page, _position in calls] == [1] * 10 + [2] * 5
	assert [position for _page, position in calls[10:]] == positions[:5]


#============================================
def test_zone_design_document() -> None:
	"""
	Ensure a zone design renders a full sheet.
	"""
	record = card_builders.build_contact_record()
	data, result = assemble.assemble_document("modern-professional", record, 10)
	assert data.startswith(b"%PDF")
	assert count_pages(data) == 1
	assert result.placed_count == 10


#============================================
def test_generate_document_multi_sheet() -> None:
	"""
	Ensure the multi-sheet entry point does not clamp.
	"""
	record = card_builders.build_contact_record()
	data = assemble.generate_document("creative-bold", record, 25)
	assert count_pages(data) == 3


#============================================
def test_single_sheet_clamps_count(caplog) -> None:
	"""
	Ensure the single-sheet entry point clamps and warns.
	"""
	record = card_builders.build_contact_record()
	with caplog.at_level(logging.WARNING):
		data = assemble.generate_single_sheet("modern-professional", record, 25)
	assert count_pages(data) == 1
	assert "adjusted to 10" in caplog.text


#============================================
def test_clamp_card_count() -> None:
	"""
	Check clamping at both ends.
	"""
	assert assemble.clamp_card_count(0) == 1
	assert assemble.clamp_card_count(-4) == 1
	assert assemble.clamp_card_count(7) == 7
	assert assemble.clamp_card_count(11) == 10


#============================================
def test_zero_cards_rejected() -> None:
	"""
	Ensure an empty job is an input error.
	"""
	with pytest.raises(errors.InputError):
		assemble.assemble_cards(recording_drawer([]), 0)


#============================================
def test_bad_logo_still_places_all_cards() -> None:
	"""
	Ensure an undecodable logo degrades to a placeholder on every card.
	"""
	logo = business_card_sheets.models.LogoRef(data_uri="data:image/png;base64,AAAAAAAA")
	record = card_builders.build_contact_record(logo=logo)
	_data, result = assemble.assemble_document("modern-professional", record, 10)
	assert result.placed_cards == list(range(1, 11))


#============================================
def test_unknown_design() -> None:
	"""
	Ensure an unknown design id is reported as not found.
	"""
	with pytest.raises(errors.DesignNotFoundError):
		assemble.generate_document("no-such-design", card_builders.build_contact_record())


#============================================
def test_missing_contact_record() -> None:
	"""
	Ensure a missing record is rejected before rendering.
	"""
	with pytest.raises(errors.MissingContactError):
		assemble.generate_document("modern-professional", None)


#============================================
def test_off_page_cards_skipped(caplog) -> None:
	"""
	Ensure a right nudge past the page edge skips the right column only.
	"""
	config = business_card_sheets.config.default_sheet_config()
	config.right_nudge = 20.0
	calls = []
	with caplog.at_level(logging.WARNING):
		_data, result = assemble.assemble_cards(recording_drawer(calls), 10, config)
	assert result.placed_cards == [1, 3, 5, 7, 9]
	assert result.skipped_cards == [2, 4, 6, 8, 10]
	assert len(calls) == 5
	assert "position off the page" in caplog.text


#============================================
def test_failing_card_skipped() -> None:
	"""
	Ensure one failing card does not stop the rest of the job.
	"""
	def draw_card(pdf, position) -> None:
		if position.card_number == 4:
			raise errors.RenderError("broken card")
		pdf.rect(0, 0, 10, 10)

	_data, result = assemble.assemble_cards(draw_card, 10)
	assert result.skipped_cards == [4]
	assert result.placed_count == 9


#============================================
def test_failed_card_leaves_no_ink() -> None:
	"""
	Ensure a card that fails partway through draws nothing on the sheet.
	"""
	def draw_card(pdf, position) -> None:
		pdf.drawString(72, 72 * position.card_number, "HALF-CARD-INK")
		if position.card_number == 2:
			raise errors.RenderError("failed after drawing")

	data, result = assemble.assemble_cards(draw_card, 3)
	assert result.skipped_cards == [2]
	text = pypdf.PdfReader(io.BytesIO(data)).pages[0].extract_text()
	assert text.count("HALF-CARD-INK") == 2


#============================================
def test_no_cards_placed_is_document_error() -> None:
	"""
	Ensure a job where every card fails raises instead of returning a blank PDF.
	"""
	def draw_card(pdf, position) -> None:
		raise ValueError("always fails")

	with pytest.raises(errors.DocumentError):
		assemble.assemble_cards(draw_card, 3)


#============================================
def test_outlines_drawn_per_sheet(monkeypatch) -> None:
	"""
	Ensure outlines are drawn once on every sheet when enabled.
	"""
	sheets = []
	monkeypatch.setattr(
		business_card_sheets.document,
		"draw_card_outlines",
		lambda pdf, config: sheets.append(pdf.getPageNumber()),
	)
	config = business_card_sheets.config.default_sheet_config(draw_outlines=True)
	assemble.assemble_cards(recording_drawer([]), 12, config)
	assert sheets == [1, 2]


#============================================
def test_markup_design_rasterized_once(monkeypatch) -> None:
	"""
	Ensure a markup design is laid out once and placed at every position.
	"""
	rendered = []

	def fake_render(markup, width_mm, height_mm):
		rendered.append(markup)
		return PIL.Image.new("RGB", (336, 192), "#FFFFFF")

	monkeypatch.setattr(business_card_sheets.markup, "render_markup_image", fake_render)
	record = card_builders.build_contact_record()
	data, result = assemble.assemble_document("BC001", record, 4)
	assert result.placed_count == 4
	assert len(rendered) == 1
	assert "Jane Doe" in rendered[0]
	assert count_pages(data) == 1


#============================================
def test_image_card_drawer_fills_card_box() -> None:
	"""
	Ensure a captured image is placed over the whole card box.
	"""
	config = business_card_sheets.config.default_sheet_config()
	draw_card = assemble.image_card_drawer(PIL.Image.new("RGB", (60, 30)), config)
	pdf = card_builders.RecordingCanvas()
	position = business_card_sheets.layout.compute_sheet_positions(config)[0]
	draw_card(pdf, position)
	x0, y0, x1, y1 = business_card_sheets.layout.card_box_points(position, config)
	assert pdf.images == [(x0, y0, x1 - x0, y1 - y0)]


#============================================
def test_generate_preview_single_page() -> None:
	"""
	Ensure the preview is one card-sized page.
	"""
	data = assemble.generate_preview("modern-professional", card_builders.build_contact_record())
	assert count_pages(data) == 1


#============================================
def test_generate_preview_rejects_off_page_card(monkeypatch) -> None:
	"""
	Ensure a preview card that does not fit its page is an error, not a blank page.
	"""
	monkeypatch.setattr(business_card_sheets.layout, "validate_position", lambda position, config=None: False)
	with pytest.raises(errors.PositionError):
		assemble.generate_preview("modern-professional", card_builders.build_contact_record())
