"""
CLI entry points for business card sheet generation.
"""

# Standard Library
import argparse
import json
import pathlib
import time

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.assemble
import business_card_sheets.capture
import business_card_sheets.catalog
import business_card_sheets.config
import business_card_sheets.document
import business_card_sheets.errors
import business_card_sheets.images
import business_card_sheets.inject
import business_card_sheets.log
import business_card_sheets.models


SheetConfig = bcs.config.SheetConfig
DesignCatalog = bcs.catalog.DesignCatalog

DEFAULT_DESIGN_ID = "modern-professional"
DEFAULT_CARD_COUNT = bcs.config.DEFAULT_CARD_COUNT
DEFAULT_LEFT_NUDGE_MM = bcs.config.DEFAULT_LEFT_NUDGE_MM
DEFAULT_RIGHT_NUDGE_MM = bcs.config.DEFAULT_RIGHT_NUDGE_MM


#============================================
def build_config(args: argparse.Namespace) -> SheetConfig:
	"""
	Build sheet config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		SheetConfig.
	"""
	config = bcs.config.default_sheet_config(draw_outlines=args.draw_outlines)
	config.left_nudge = args.left_nudge
	config.right_nudge = args.right_nudge
	return config


#============================================
def build_catalog(args: argparse.Namespace) -> DesignCatalog:
	"""
	Build the design catalog: built-in designs plus any catalog files.

	Args:
		args: Parsed argparse namespace.

	Returns:
		DesignCatalog.
	"""
	catalog = bcs.catalog.builtin_catalog()
	for path in args.catalog_paths:
		bcs.catalog.load_catalog_file(path, catalog)
	return catalog


#============================================
def load_contact_file(path: str) -> bcs.models.ContactRecord:
	"""
	Read a contact record from a JSON file.

	Args:
		path: JSON file path.

	Returns:
		ContactRecord.
	"""
	try:
		with open(path, "r", encoding="utf-8") as handle:
			data = json.load(handle)
	except OSError as exc:
		raise bcs.errors.InputError(f"Cannot read contact file {path}: {exc}") from exc
	except json.JSONDecodeError as exc:
		raise bcs.errors.InputError(f"Contact file {path} is not valid JSON: {exc}") from exc
	return bcs.models.contact_record_from_dict(data)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render business cards onto Avery 8371 PDF sheets.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-i", "--contact", dest="contact_path", default=None, help="Contact record JSON file.")
	input_group.add_argument("-t", "--design", dest="design_id", default=DEFAULT_DESIGN_ID, help="Design id from the catalog.")
	input_group.add_argument(
		"-k",
		"--catalog",
		dest="catalog_paths",
		action="append",
		default=[],
		help="Extra design catalog JSON file (repeatable).",
	)

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output PDF path.")
	output_group.add_argument("-n", "--count", dest="card_count", type=int, default=DEFAULT_CARD_COUNT, help="Number of cards.")
	output_group.add_argument("--preview", dest="preview", action="store_true", help="Write a single card-sized preview page.")
	output_group.add_argument(
		"--preview-png",
		dest="preview_png",
		action="store_true",
		help="Write a PNG capture of one markup card instead of a PDF.",
	)

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-d", "--draw-outlines", dest="draw_outlines", action="store_true", help="Draw card outlines.")
	behavior_group.add_argument("-D", "--no-draw-outlines", dest="draw_outlines", action="store_false", help="Disable card outlines.")
	behavior_group.add_argument("-c", "--calibration", dest="calibration", action="store_true", help="Add a calibration page.")
	behavior_group.add_argument("-C", "--no-calibration", dest="calibration", action="store_false", help="Disable calibration page.")
	behavior_group.add_argument("-s", "--single-sheet", dest="single_sheet", action="store_true", help="Clamp the count to one sheet.")
	behavior_group.add_argument(
		"--capture",
		dest="capture",
		action="store_true",
		help="Capture a markup design once and repeat the image on one sheet.",
	)

	calibration_group = parser.add_argument_group("Calibration")
	calibration_group.add_argument("--left-nudge", dest="left_nudge", type=float, default=DEFAULT_LEFT_NUDGE_MM, help="Shift the left column left, in mm.")
	calibration_group.add_argument("--right-nudge", dest="right_nudge", type=float, default=DEFAULT_RIGHT_NUDGE_MM, help="Shift the right column right, in mm.")

	catalog_group = parser.add_argument_group("Catalog")
	catalog_group.add_argument("--list-designs", dest="list_designs", action="store_true", help="List design ids and exit.")
	catalog_group.add_argument("--validate-catalog", dest="validate_catalog", action="store_true", help="Validate the catalog and exit.")
	catalog_group.add_argument("--theme", dest="theme", default=None, help="Only list designs of this theme.")
	catalog_group.add_argument("--search", dest="search", default=None, help="Only list designs whose name, theme or features match.")

	logging_group = parser.add_argument_group("Logging")
	logging_group.add_argument("-v", "--verbose", dest="debug", action="store_true", help="Debug logging.")
	logging_group.add_argument("--log-dir", dest="log_dir", default=None, help="Directory for a rotating log file.")

	parser.set_defaults(
		draw_outlines=False,
		calibration=False,
		single_sheet=False,
		capture=False,
		preview=False,
		preview_png=False,
	)

	args = parser.parse_args(argv)
	if not (args.list_designs or args.validate_catalog):
		if args.contact_path is None or args.output_path is None:
			parser.error("--contact and --output are required")
	return args


#============================================
def run_catalog_commands(args: argparse.Namespace, catalog: DesignCatalog) -> None:
	"""
	List or validate the catalog.

	Args:
		args: Parsed argparse namespace.
		catalog: Design catalog.
	"""
	if args.list_designs:
		designs = catalog.search(args.search) if args.search else list(catalog)
		if args.theme:
			themed = {design.design_id for design in catalog.by_theme(args.theme)}
			designs = [design for design in designs if design.design_id in themed]
		for design in designs:
			kind = "markup" if design.is_markup else "zones"
			print(f"{design.design_id}\t{design.theme}\t{kind}\t{design.name}")
	if args.validate_catalog:
		report = bcs.catalog.validate_catalog(catalog)
		print(f"Designs checked: {report.checked}")
		for design_id, issues in report.issues.items():
			for issue in issues:
				print(f"  {design_id}: {issue}")
		print("Catalog OK" if report.ok else f"Designs with issues: {len(report.issues)}")


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Render the requested cards and write the PDF.

	Args:
		args: Parsed argparse namespace.
	"""
	bcs.log.setup_logging(args.debug, pathlib.Path(args.log_dir) if args.log_dir else None)
	catalog = build_catalog(args)
	if args.list_designs or args.validate_catalog:
		run_catalog_commands(args, catalog)
		return

	print("Business card sheet pipeline")
	print(f"Design: {args.design_id}")
	print(f"Contact file: {args.contact_path}")
	print(f"Output PDF: {args.output_path}")
	print(f"Draw outlines: {args.draw_outlines}")
	print(f"Calibration: {args.calibration}")

	start_time = time.perf_counter()
	record = load_contact_file(args.contact_path)
	design = bcs.assemble.resolve_design(args.design_id, catalog)
	config = build_config(args)
	image_cache = bcs.images.ImageCache()
	output_path = pathlib.Path(args.output_path)

	if args.preview:
		data = bcs.assemble.generate_preview(design, record, image_cache=image_cache)
		output_path.write_bytes(data)
		print(f"Preview written: {output_path}")
		return

	if args.preview_png:
		if not design.is_markup:
			raise bcs.errors.InputError(f"Design {design.design_id} has no markup to capture")
		page = bcs.capture.page_for_markup(bcs.inject.generate_injected_markup(design, record))
		data_uri = bcs.capture.preview_data_uri(page)
		output_path.write_bytes(bcs.images.decode_data_uri(data_uri))
		print(f"Preview image written: {output_path}")
		return

	card_count = args.card_count
	if args.single_sheet or args.capture:
		card_count = bcs.assemble.clamp_card_count(card_count)
	print(f"Cards requested: {card_count}")

	render_start = time.perf_counter()
	if args.capture:
		if not design.is_markup:
			raise bcs.errors.InputError(f"Design {design.design_id} has no markup to capture")
		markup = bcs.inject.generate_injected_markup(design, record)
		page = bcs.capture.page_for_markup(markup)
		data, result = bcs.capture.capture_and_place(page, card_count, sheet_config=config)
	else:
		data, result = bcs.assemble.assemble_document(
			design,
			record,
			card_count,
			config,
			image_cache=image_cache,
		)
	render_end = time.perf_counter()

	if args.calibration:
		data = bcs.document.add_calibration_page(data, config)
	output_path.write_bytes(data)

	print(f"Pages written: {bcs.document.count_pages(data)}")
	print(f"Cards placed: {result.placed_count}")
	if result.skipped_cards:
		print(f"Cards skipped: {', '.join(str(number) for number in result.skipped_cards)}")
	total_time = time.perf_counter() - start_time
	print(
		"Timing: render={:.2f}s total={:.2f}s".format(
			render_end - render_start,
			total_time,
		)
	)


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except bcs.errors.CardSheetError as exc:
		raise SystemExit(f"Error: {exc.detail}") from exc
