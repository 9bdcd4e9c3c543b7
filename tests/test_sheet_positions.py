import pytest

import business_card_sheets.config
import business_card_sheets.errors
import business_card_sheets.layout
import business_card_sheets.models


layout = business_card_sheets.layout
config_module = business_card_sheets.config


#============================================
def test_ten_positions_all_valid() -> None:
	"""
	Ensure one sheet has ten printable positions.
	"""
	positions = layout.compute_sheet_positions()
	assert len(positions) == 10
	assert [position.card_number for position in positions] == list(range(1, 11))
	for position in positions:
		assert layout.validate_position(position)


#============================================
def test_positions_are_row_major() -> None:
	"""
	Ensure cards 1 and 2 share a row and card 3 starts the next one.
	"""
	positions = layout.compute_sheet_positions()
	assert positions[0].y == positions[1].y
	assert positions[0].x < positions[1].x
	assert positions[2].x == positions[0].x
	assert positions[2].y > positions[0].y


#============================================
def test_first_and_last_positions_match_avery_8371() -> None:
	"""
	Check the corner slots against the published margins and gaps.
	"""
	positions = layout.compute_sheet_positions()
	assert positions[0].x == pytest.approx(12.7)
	assert positions[0].y == pytest.approx(12.7)
	assert positions[1].x == pytest.approx(12.7 + 88.9 + 12.7)
	assert positions[9].y == pytest.approx(12.7 + 4 * (50.8 + 1.6))
	assert positions[9].y + 50.8 <= 279.4


#============================================
def test_positions_do_not_overlap() -> None:
	"""
	Ensure no two card boxes intersect.
	"""
	config = config_module.default_sheet_config()
	boxes = [layout.card_box_points(position, config) for position in layout.compute_sheet_positions(config)]
	for index, first in enumerate(boxes):
		for second in boxes[index + 1:]:
			overlap_x = first[0] < second[2] and second[0] < first[2]
			overlap_y = first[1] < second[3] and second[1] < first[3]
			assert not (overlap_x and overlap_y)


#============================================
def test_nudges_shift_columns() -> None:
	"""
	Ensure column nudges move the left column left and the right column right.
	"""
	config = config_module.default_sheet_config()
	config.left_nudge = 1.0
	config.right_nudge = 0.5
	positions = layout.compute_sheet_positions(config)
	assert positions[0].x == pytest.approx(11.7)
	assert positions[1].x == pytest.approx(114.3 + 0.5)
	for position in positions:
		assert layout.validate_position(position, config)


#============================================
def test_oversized_nudge_fails_validation() -> None:
	"""
	Ensure a nudge pushing cards off the page is rejected, not clamped.
	"""
	config = config_module.default_sheet_config()
	config.right_nudge = 20.0
	positions = layout.compute_sheet_positions(config)
	right_column = [position for position in positions if position.card_number % 2 == 0]
	assert all(not layout.validate_position(position, config) for position in right_column)
	assert right_column[0].x == pytest.approx(134.3)


#============================================
def test_validate_position_rejects_negative_and_overflow() -> None:
	"""
	Check the bounding box rule on hand-made positions.
	"""
	CardPosition = business_card_sheets.models.CardPosition
	assert not layout.validate_position(CardPosition(x=-0.1, y=10.0, card_number=1))
	assert not layout.validate_position(CardPosition(x=10.0, y=230.0, card_number=1))
	assert layout.validate_position(CardPosition(x=120.0, y=220.0, card_number=1))
	with pytest.raises(business_card_sheets.errors.PositionError):
		layout.require_valid_position(CardPosition(x=200.0, y=0.0, card_number=3))


#============================================
def test_positions_for_job_restart_each_sheet() -> None:
	"""
	Ensure a 15 card job puts cards 11-15 at sheet positions 1-5.
	"""
	placements = layout.positions_for_job(15)
	assert len(placements) == 15
	assert [sheet for sheet, _position in placements].count(0) == 10
	assert [sheet for sheet, _position in placements].count(1) == 5
	sheet_positions = layout.compute_sheet_positions()
	for index in range(5):
		sheet, position = placements[10 + index]
		assert sheet == 1
		assert position == sheet_positions[index]


#============================================
def test_sheet_count() -> None:
	"""
	Check sheet counts around the sheet boundary.
	"""
	assert layout.sheet_count(0) == 0
	assert layout.sheet_count(1) == 1
	assert layout.sheet_count(10) == 1
	assert layout.sheet_count(11) == 2
	assert layout.sheet_count(25) == 3
