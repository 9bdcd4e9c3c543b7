import pytest

import card_builders

import business_card_sheets.errors
import business_card_sheets.models


models = business_card_sheets.models


#============================================
def test_contact_record_from_request() -> None:
	"""
	Ensure camelCase request data maps onto the record.
	"""
	record = models.contact_record_from_dict(
		{
			"companyName": "Acme Corp",
			"name": "Jane Doe",
			"title": "Director",
			"yearEstablished": 1998,
			"logo": {"logoId": "L1", "logoDataUri": "data:image/png;base64,AAAA"},
			"phones": [{"value": "5551234567", "label": "mobile"}, "5559876543"],
			"emails": [{"value": "jane@acme.com", "isPrimary": True}],
			"socialMedia": [{"platform": "Instagram", "handle": "@acme"}],
		}
	)
	assert record.company_name == "Acme Corp"
	assert record.year_established == "1998"
	assert record.logo == models.LogoRef(logo_id="L1", data_uri="data:image/png;base64,AAAA")
	assert record.phones[0] == models.ContactField(value="5551234567", label="mobile")
	assert record.phones[1].value == "5559876543"
	assert record.emails[0].is_primary
	assert record.social_media[0] == models.ContactField(value="@acme", label="Instagram")
	assert record.websites == ()


#============================================
def test_contact_record_rejects_bad_shapes() -> None:
	"""
	Ensure non-object records and non-list fields are input errors.
	"""
	with pytest.raises(business_card_sheets.errors.InputError):
		models.contact_record_from_dict("Acme")
	with pytest.raises(business_card_sheets.errors.InputError):
		models.contact_record_from_dict({"name": "x", "phones": "5551234567"})
	with pytest.raises(business_card_sheets.errors.InputError):
		models.contact_record_from_dict({"name": "x", "emails": [42]})


#============================================
def test_validate_contact_record() -> None:
	"""
	Check required fields, contact methods and email format.
	"""
	assert models.validate_contact_record(card_builders.build_contact_record()) == (True, [])
	record = card_builders.build_contact_record(
		name=" ",
		phones=(),
		websites=(),
		emails=(models.ContactField(value="not-an-email"),),
	)
	is_valid, problems = models.validate_contact_record(record)
	assert not is_valid
	assert problems == ["Name is required", "Email 1 is not in a valid format"]
	empty = card_builders.build_contact_record(company_name="", phones=(), emails=(), websites=())
	_is_valid, problems = models.validate_contact_record(empty)
	assert problems == [
		"Company name is required",
		"At least one contact method (phone, email, or website) is required",
	]


#============================================
def test_populated_skips_blank_entries() -> None:
	record = card_builders.build_contact_record(
		phones=(models.ContactField(value=" "), models.ContactField(value="5551234567")),
	)
	assert [entry.value for entry in record.populated("phones")] == ["5551234567"]


#============================================
@pytest.mark.parametrize(
	("value", "expected"),
	[
		("3.5in", 88.9),
		("2in", 50.8),
		("88.9mm", 88.9),
		("336px", 88.9),
		(50.8, 50.8),
		("", 12.0),
		(None, 12.0),
	],
)
def test_parse_dimension_mm(value, expected: float) -> None:
	"""
	Check dimension units.
	"""
	assert models.parse_dimension_mm(value, 12.0) == pytest.approx(expected)


#============================================
def test_design_from_dict_zones() -> None:
	"""
	Ensure catalog zone data becomes typed zones.
	"""
	design = models.design_from_dict(
		{
			"id": "z1",
			"name": "Zones",
			"theme": "test",
			"globalStyles": {"borderColor": "#000000", "borderWidth": 2},
			"zones": [
				{
					"id": "contact",
					"type": "contact-block",
					"position": {"x": 5, "y": 6},
					"dimensions": {"width": 40, "height": 20},
					"styles": {"fontSize": 7, "fontWeight": "bold"},
					"contactBlock": {"fields": ["emails"], "maxLines": 2, "overflow": "wrap"},
				},
			],
		}
	)
	assert not design.is_markup
	assert design.border_width == 2.0
	zone = design.zones[0]
	assert (zone.x, zone.y, zone.width, zone.height) == (5.0, 6.0, 40.0, 20.0)
	assert zone.style.font_size == 7
	assert zone.contact_block == models.ContactBlockSpec(fields=("emails",), max_lines=2, overflow="wrap")
