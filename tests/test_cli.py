import json

import PIL.Image
import pytest

import business_card_sheets.cli
import business_card_sheets.document
import business_card_sheets.markup


cli = business_card_sheets.cli

CONTACT = {
	"companyName": "Acme Corp",
	"name": "Jane Doe",
	"phones": [{"value": "5551234567"}],
}


#============================================
def write_contact(tmp_path) -> str:
	path = tmp_path / "contact.json"
	path.write_text(json.dumps(CONTACT), encoding="utf-8")
	return str(path)


#============================================
def test_parse_args_defaults() -> None:
	args = cli.parse_args(["-i", "contact.json", "-o", "cards.pdf"])
	assert args.design_id == "modern-professional"
	assert args.card_count == 10
	assert not args.draw_outlines
	assert not args.calibration
	assert args.catalog_paths == []


#============================================
def test_parse_args_requires_contact_and_output() -> None:
	"""
	Ensure a render run needs both input and output paths.
	"""
	with pytest.raises(SystemExit):
		cli.parse_args(["-i", "contact.json"])
	args = cli.parse_args(["--list-designs"])
	assert args.list_designs


#============================================
def test_run_pipeline_with_calibration(tmp_path, capsys) -> None:
	"""
	Ensure a two sheet job plus calibration page is written.
	"""
	output = tmp_path / "cards.pdf"
	args = cli.parse_args(["-i", write_contact(tmp_path), "-o", str(output), "-n", "12", "-c", "-d"])
	cli.run_pipeline(args)
	assert business_card_sheets.document.count_pages(output.read_bytes()) == 3
	out = capsys.readouterr().out
	assert "Cards placed: 12" in out
	assert "Pages written: 3" in out


#============================================
def test_run_pipeline_single_sheet(tmp_path) -> None:
	output = tmp_path / "cards.pdf"
	args = cli.parse_args(["-i", write_contact(tmp_path), "-o", str(output), "-n", "30", "-s", "-t", "creative-bold"])
	cli.run_pipeline(args)
	assert business_card_sheets.document.count_pages(output.read_bytes()) == 1


#============================================
def test_capture_needs_markup_design(tmp_path) -> None:
	"""
	Ensure capture mode refuses a zone design with a readable error.
	"""
	output = tmp_path / "cards.pdf"
	with pytest.raises(SystemExit) as excinfo:
		cli.main(["-i", write_contact(tmp_path), "-o", str(output), "--capture"])
	assert "has no markup to capture" in str(excinfo.value)
	assert not output.exists()


#============================================
def test_missing_contact_file(tmp_path) -> None:
	with pytest.raises(SystemExit) as excinfo:
		cli.main(["-i", str(tmp_path / "none.json"), "-o", str(tmp_path / "cards.pdf")])
	assert "Cannot read contact file" in str(excinfo.value)


#============================================
def test_list_designs(capsys) -> None:
	cli.main(["--list-designs"])
	out = capsys.readouterr().out
	assert "modern-professional\tprofessional\tzones\tModern Professional" in out
	assert "BC001\tminimalistic\tmarkup\tMinimal Professional" in out


#============================================
def test_list_designs_by_theme_and_search(capsys) -> None:
	"""
	Ensure --theme and --search narrow the design listing.
	"""
	cli.main(["--list-designs", "--theme", "professional"])
	out = capsys.readouterr().out
	assert [line.split("\t")[0] for line in out.splitlines()] == ["modern-professional", "BC015"]
	cli.main(["--list-designs", "--search", "serif"])
	out = capsys.readouterr().out
	assert [line.split("\t")[0] for line in out.splitlines()] == ["BC017"]
	cli.main(["--list-designs", "--theme", "creative", "--search", "serif"])
	assert capsys.readouterr().out == ""


#============================================
def test_preview_png_for_markup_design(tmp_path, monkeypatch) -> None:
	"""
	Ensure --preview-png writes a letterboxed PNG capture of one card.
	"""
	captured = []

	def fake_render(markup, width_mm, height_mm, dpi=96):
		captured.append(markup)
		return PIL.Image.new("RGB", (336, 192), "#336699")

	monkeypatch.setattr(business_card_sheets.markup, "render_markup_image", fake_render)
	output = tmp_path / "card.png"
	cli.main(["-i", write_contact(tmp_path), "-o", str(output), "-t", "BC001", "--preview-png"])
	with PIL.Image.open(output) as image:
		assert image.format == "PNG"
		assert image.size == (1008, 576)
	assert "Jane Doe" in captured[0]


#============================================
def test_preview_png_needs_markup_design(tmp_path) -> None:
	output = tmp_path / "card.png"
	with pytest.raises(SystemExit) as excinfo:
		cli.main(["-i", write_contact(tmp_path), "-o", str(output), "--preview-png"])
	assert "has no markup to capture" in str(excinfo.value)
	assert not output.exists()
