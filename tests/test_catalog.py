import json
import logging

import pytest

import business_card_sheets.catalog
import business_card_sheets.errors
import business_card_sheets.models


catalog_module = business_card_sheets.catalog
models = business_card_sheets.models


#============================================
def test_builtin_catalog_is_valid() -> None:
	"""
	Ensure every shipped design passes validation.
	"""
	catalog = catalog_module.builtin_catalog()
	report = catalog_module.validate_catalog(catalog)
	assert report.checked == len(catalog) == 5
	assert report.ok, report.issues


#============================================
def test_builtin_design_kinds() -> None:
	"""
	Ensure zone and markup designs are both present.
	"""
	catalog = catalog_module.builtin_catalog()
	assert not catalog.get("modern-professional").is_markup
	assert catalog.get("BC001").is_markup
	assert catalog.get("BC001").metadata.width_mm == pytest.approx(88.9)
	assert "BC017" in catalog
	assert catalog.get("BC999") is None


#============================================
def test_search_and_theme() -> None:
	"""
	Check lookups by theme and free-text search.
	"""
	catalog = catalog_module.builtin_catalog()
	assert sorted(design.design_id for design in catalog.by_theme("professional")) == ["BC015", "modern-professional"]
	assert [design.design_id for design in catalog.search("social")] == ["BC017"]
	assert len(catalog.search("")) == 5


#============================================
def test_load_catalog_file(tmp_path, caplog) -> None:
	"""
	Ensure designs load from JSON and bad entries are skipped.
	"""
	path = tmp_path / "designs.json"
	data = {
		"designs": [
			{
				"id": "custom-1",
				"name": "Custom",
				"theme": "test",
				"jsx": '<div><div class="bc-contact-name">Name</div></div>',
			},
			"not a design",
		],
	}
	path.write_text(json.dumps(data), encoding="utf-8")
	with caplog.at_level(logging.WARNING):
		catalog = catalog_module.load_catalog_file(path, catalog_module.builtin_catalog())
	assert len(catalog) == 6
	assert catalog.get("custom-1").markup.startswith("<div>")
	assert "not an object" in caplog.text


#============================================
def test_load_catalog_file_errors(tmp_path) -> None:
	"""
	Ensure unreadable catalog files are input errors.
	"""
	with pytest.raises(business_card_sheets.errors.InputError):
		catalog_module.load_catalog_file(tmp_path / "missing.json")
	path = tmp_path / "broken.json"
	path.write_text("{not json", encoding="utf-8")
	with pytest.raises(business_card_sheets.errors.InputError):
		catalog_module.load_catalog_file(path)


#============================================
def test_check_design_reports_problems() -> None:
	"""
	Ensure zone and size problems are all reported.
	"""
	zones = (
		models.Zone(zone_id="a", zone_type="hologram", x=0, y=0, width=10, height=10),
		models.Zone(zone_id="b", zone_type="company-name", x=80, y=0, width=20, height=5),
		models.Zone(
			zone_id="c",
			zone_type="contact-block",
			x=0,
			y=10,
			width=0,
			height=10,
			contact_block=models.ContactBlockSpec(overflow="shrink"),
		),
	)
	design = models.CardDesign(
		design_id="bad",
		name="Bad",
		theme="",
		zones=zones,
		metadata=models.DesignMetadata(width_mm=50.8, height_mm=88.9),
	)
	issues = catalog_module.check_design(design)
	assert "missing theme" in issues
	assert any(issue.startswith("dimensions") for issue in issues)
	assert "zone a: unknown type 'hologram'" in issues
	assert "zone b: outside the card" in issues
	assert "zone c: empty size" in issues
	assert "zone c: unknown overflow 'shrink'" in issues


#============================================
def test_check_markup_design() -> None:
	"""
	Ensure markup without slots or platforms is flagged.
	"""
	no_slots = models.CardDesign(design_id="m1", name="M", theme="t", markup="<div>static</div>")
	assert catalog_module.check_design(no_slots) == ["markup has no contact slots"]
	social = models.CardDesign(
		design_id="m2",
		name="M",
		theme="t",
		markup='<div class="bc-contact-social">@x</div>',
	)
	assert catalog_module.check_design(social) == ["social slot without data-platform"]
	both = models.CardDesign(design_id="m3", name="M", theme="t", markup="", zones=())
	issues = catalog_module.check_design(both)
	assert "both markup and zones" in issues
	assert "empty markup" in issues


#============================================
def test_validate_catalog_logs_issues(caplog) -> None:
	"""
	Ensure a bad design is reported without raising.
	"""
	catalog = catalog_module.DesignCatalog([models.CardDesign(design_id="x", name="", theme="t")])
	with caplog.at_level(logging.WARNING):
		report = catalog_module.validate_catalog(catalog)
	assert not report.ok
	assert report.issues["x"] == ["missing name", "neither markup nor zones"]
	assert "missing name" in caplog.text
