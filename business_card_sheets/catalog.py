"""
Design catalog: built-in designs, JSON catalog files, and validation.
"""

# Standard Library
import dataclasses
import json
import logging
import pathlib
from typing import Iterator

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.config
import business_card_sheets.errors
import business_card_sheets.models
import business_card_sheets.slots


CardDesign = bcs.models.CardDesign

CARD_WIDTH_MM = bcs.config.CARD_WIDTH_MM
CARD_HEIGHT_MM = bcs.config.CARD_HEIGHT_MM
DIMENSION_TOLERANCE_MM = 0.5

logger = logging.getLogger(__name__)


class DesignCatalog:
	"""
	Read-only lookup of card designs by id.
	"""

	def __init__(self, designs=()):
		self._designs: dict[str, CardDesign] = {}
		for design in designs:
			self.add(design)

	def __len__(self) -> int:
		return len(self._designs)

	def __contains__(self, design_id: str) -> bool:
		return design_id in self._designs

	def __iter__(self) -> Iterator[CardDesign]:
		return iter(self._designs.values())

	def add(self, design: CardDesign) -> None:
		if design.design_id in self._designs:
			logger.warning("Design %s defined twice, keeping the later one", design.design_id)
		self._designs[design.design_id] = design

	def get(self, design_id: str) -> CardDesign | None:
		return self._designs.get(design_id)

	def ids(self) -> list[str]:
		return list(self._designs)

	def by_theme(self, theme: str) -> list[CardDesign]:
		return [design for design in self._designs.values() if design.theme == theme]

	def search(self, query: str) -> list[CardDesign]:
		"""
		Find designs whose name, theme or feature tags contain query.
		"""
		term = query.strip().lower()
		if not term:
			return list(self._designs.values())
		found = []
		for design in self._designs.values():
			haystack = [design.name.lower(), design.theme.lower()]
			haystack.extend(feature.lower() for feature in design.metadata.features)
			if any(term in text for text in haystack):
				found.append(design)
		return found


@dataclasses.dataclass
class CatalogReport:
	checked: int = 0
	issues: dict[str, list[str]] = dataclasses.field(default_factory=dict)

	@property
	def ok(self) -> bool:
		return not self.issues

	def add_issue(self, design_id: str, message: str) -> None:
		self.issues.setdefault(design_id, []).append(message)


MODERN_PROFESSIONAL = {
	"id": "modern-professional",
	"name": "Modern Professional",
	"theme": "professional",
	"style": "contact-focused",
	"metadata": {
		"dimensions": {"width": 88.9, "height": 50.8},
		"colors": ["#FFFFFF", "#1F2937", "#374151", "#6B7280"],
		"fonts": ["Helvetica"],
		"features": ["logo-left", "contact-block"],
	},
	"globalStyles": {"backgroundColor": "#FFFFFF"},
	"zones": [
		{
			"id": "logo",
			"type": "logo",
			"position": {"x": 2, "y": 2},
			"dimensions": {"width": 18, "height": 15},
			"alignment": "center",
		},
		{
			"id": "company-name",
			"type": "company-name",
			"position": {"x": 22, "y": 2},
			"dimensions": {"width": 64, "height": 6},
			"styles": {"fontSize": 10, "fontWeight": "bold", "color": "#1F2937"},
		},
		{
			"id": "name",
			"type": "personal-info",
			"position": {"x": 22, "y": 10},
			"dimensions": {"width": 64, "height": 6},
			"styles": {"fontSize": 9, "fontWeight": "bold", "color": "#374151"},
		},
		{
			"id": "title",
			"type": "title-info",
			"position": {"x": 22, "y": 17},
			"dimensions": {"width": 64, "height": 5},
			"styles": {"fontSize": 8, "color": "#6B7280"},
		},
		{
			"id": "contact-block",
			"type": "contact-block",
			"position": {"x": 22, "y": 24},
			"dimensions": {"width": 64, "height": 22},
			"styles": {"fontSize": 7, "color": "#6B7280", "lineHeight": 1.8},
			"contactBlock": {
				"fields": ["phones", "emails", "websites"],
				"separator": "\n",
				"maxLines": 4,
				"overflow": "truncate",
			},
		},
	],
}

# landscape rework of the portrait "creative bold" layout
CREATIVE_BOLD = {
	"id": "creative-bold",
	"name": "Creative Bold",
	"theme": "creative",
	"style": "company-focused",
	"metadata": {
		"dimensions": {"width": 88.9, "height": 50.8},
		"colors": ["#FEFCE8", "#7C3AED", "#1F2937", "#4B5563"],
		"fonts": ["Helvetica"],
		"features": ["large-logo", "border", "centered-text"],
	},
	"globalStyles": {"backgroundColor": "#FEFCE8", "borderColor": "#7C3AED", "borderWidth": 1},
	"zones": [
		{
			"id": "logo",
			"type": "logo",
			"position": {"x": 4, "y": 8},
			"dimensions": {"width": 30, "height": 26},
			"alignment": "center",
		},
		{
			"id": "company-name",
			"type": "company-name",
			"position": {"x": 38, "y": 5},
			"dimensions": {"width": 47, "height": 8},
			"alignment": "center",
			"styles": {"fontSize": 12, "fontWeight": "bold", "color": "#7C3AED"},
		},
		{
			"id": "personal-info",
			"type": "personal-info",
			"position": {"x": 38, "y": 15},
			"dimensions": {"width": 47, "height": 6},
			"alignment": "center",
			"styles": {"fontSize": 9, "color": "#1F2937"},
		},
		{
			"id": "title",
			"type": "title-info",
			"position": {"x": 38, "y": 21},
			"dimensions": {"width": 47, "height": 5},
			"alignment": "center",
			"styles": {"fontSize": 7, "fontStyle": "italic", "color": "#4B5563"},
		},
		{
			"id": "contact-info",
			"type": "contact-block",
			"position": {"x": 38, "y": 28},
			"dimensions": {"width": 47, "height": 19},
			"alignment": "center",
			"styles": {"fontSize": 7, "color": "#4B5563", "lineHeight": 1.5},
			"contactBlock": {
				"fields": ["emails", "phones", "websites"],
				"separator": "\n",
				"maxLines": 6,
				"overflow": "wrap",
			},
		},
	],
}

MINIMAL_PROFESSIONAL = {
	"id": "BC001",
	"name": "Minimal Professional",
	"theme": "minimalistic",
	"style": "contact-focused",
	"metadata": {
		"dimensions": {"width": "3.5in", "height": "2in"},
		"colors": ["#ffffff", "#2d3748", "#718096", "#4a5568"],
		"fonts": ["Helvetica"],
		"features": ["logo-left", "contact-right", "minimal-icons"],
	},
	"markup": """
<div class="business-card" style="width: 336px; height: 192px; background-color: #ffffff; font-family: sans-serif;">
  <div class="logo-placeholder" style="width: 76px; height: 58px; float: left; margin: 24px 12px 0 24px; color: #999999; font-size: 8px;">LOGO</div>
  <div class="main-content" style="padding-top: 24px;">
    <div class="bc-contact-name" style="font-size: 14px; font-weight: bold; color: #2d3748;">John Smith</div>
    <div class="bc-contact-title" style="font-size: 10px; color: #718096;">Senior Manager</div>
    <div class="bc-contact-company" style="font-size: 12px; color: #4a5568; margin-bottom: 8px;">Acme Corporation</div>
    <div class="bc-contact-phone" data-type="mobile" style="font-size: 9px; color: #4a5568;">📱 (555) 123-4567</div>
    <div class="bc-contact-phone" style="font-size: 9px; color: #4a5568;">📞 (555) 987-6543</div>
    <div class="bc-contact-email" data-primary style="font-size: 9px; color: #4a5568;">✉ john.smith@acme.com</div>
  </div>
</div>
""",
}

CORPORATE_HEADER = {
	"id": "BC015",
	"name": "Corporate Header",
	"theme": "professional",
	"style": "company-focused",
	"metadata": {
		"dimensions": {"width": "3.5in", "height": "2in"},
		"colors": ["#1e3a8a", "#ffffff", "#374151"],
		"fonts": ["Helvetica"],
		"features": ["corporate-header", "two-column-contact", "professional"],
	},
	"markup": """
<div class="business-card" style="width: 336px; height: 192px; background-color: #ffffff; font-family: sans-serif;">
  <div class="header" style="background-color: #1e3a8a; color: #ffffff; padding: 8px 16px;">
    <div class="bc-contact-company" style="font-size: 13px; font-weight: bold;">Acme Corporation</div>
    <div class="bc-contact-slogan" style="font-size: 8px;">Building tomorrow, today</div>
  </div>
  <div class="body" style="padding: 8px 16px; color: #374151;">
    <div class="bc-contact-name" style="font-size: 12px; font-weight: bold;">Jane Doe</div>
    <div class="bc-contact-title" style="font-size: 9px;">Director of Operations</div>
    <div class="bc-contact-phone" data-type="mobile" style="font-size: 8px;">[MOBILE] (555) 000-0000</div>
    <div class="bc-contact-phone" data-type="office" style="font-size: 8px;">[OFFICE] (555) 000-0001</div>
    <div class="bc-contact-phone" style="font-size: 8px;">[FAX] (555) 000-0002</div>
    <div class="bc-contact-email" style="font-size: 8px;">[EMAIL] jane.doe@acme.com</div>
    <div class="bc-contact-website" style="font-size: 8px;">[WEB] www.acme.com</div>
  </div>
</div>
""",
}

ESTABLISHED_STUDIO = {
	"id": "BC017",
	"name": "Established Studio",
	"theme": "classic",
	"style": "contact-focused",
	"metadata": {
		"dimensions": {"width": "3.5in", "height": "2in"},
		"colors": ["#fdf6e3", "#5b4636", "#8a6d3b"],
		"fonts": ["Times"],
		"features": ["serif-typography", "center-layout", "social-handles"],
	},
	"markup": """
<div class="business-card" style="width: 336px; height: 192px; background-color: #fdf6e3; font-family: serif; text-align: center; color: #5b4636;">
  <div class="logo-placeholder" style="height: 36px; margin-top: 8px; font-size: 8px;">LOGO</div>
  <div class="bc-contact-company" style="font-size: 14px; font-weight: bold;">Oak &amp; Ember Studio</div>
  <div class="bc-contact-descriptor" style="font-size: 8px; font-style: italic;">Handmade furniture</div>
  <div class="bc-contact-established" style="font-size: 7px; color: #8a6d3b;">Est. 1998</div>
  <div class="bc-contact-name" style="font-size: 11px; margin-top: 4px;">Sam Carter</div>
  <div class="bc-contact-phone" style="font-size: 8px;">Tel: (555) 222-3333</div>
  <div class="bc-contact-email" style="font-size: 8px;">Email: hello@oakandember.com</div>
  <div class="bc-contact-address" style="font-size: 8px;">12 Workshop Lane</div>
  <div class="bc-contact-social" data-platform="instagram" data-prefix="IG " style="font-size: 8px;">IG @oakandember</div>
</div>
""",
}

BUILTIN_DESIGNS = (
	MODERN_PROFESSIONAL,
	CREATIVE_BOLD,
	MINIMAL_PROFESSIONAL,
	CORPORATE_HEADER,
	ESTABLISHED_STUDIO,
)


#============================================
def builtin_catalog() -> DesignCatalog:
	"""
	Build the catalog of designs shipped with the package.

	Returns:
		DesignCatalog.
	"""
	return DesignCatalog(bcs.models.design_from_dict(data) for data in BUILTIN_DESIGNS)


#============================================
def load_catalog_file(path: str | pathlib.Path, catalog: DesignCatalog | None = None) -> DesignCatalog:
	"""
	Load designs from a JSON file into a catalog.

	The file holds a list of design objects, or an object with a "designs"
	list. Entries that cannot be read are logged and skipped.

	Args:
		path: JSON catalog file.
		catalog: Catalog to extend; a new one is created when None.

	Returns:
		The extended catalog.
	"""
	if catalog is None:
		catalog = DesignCatalog()
	file_path = pathlib.Path(path)
	try:
		with open(file_path, "r", encoding="utf-8") as handle:
			data = json.load(handle)
	except OSError as exc:
		raise bcs.errors.InputError(f"Cannot read catalog file {file_path}: {exc}") from exc
	except json.JSONDecodeError as exc:
		raise bcs.errors.InputError(f"Catalog file {file_path} is not valid JSON: {exc}") from exc

	if isinstance(data, dict):
		data = data.get("designs", [])
	if not isinstance(data, list):
		raise bcs.errors.InputError(f"Catalog file {file_path} must hold a list of designs")

	loaded = 0
	for index, entry in enumerate(data):
		if not isinstance(entry, dict):
			logger.warning("Catalog entry %d in %s is not an object, skipped", index, file_path.name)
			continue
		try:
			design = bcs.models.design_from_dict(entry)
		except (TypeError, ValueError, AttributeError):
			logger.warning("Catalog entry %d in %s could not be read, skipped", index, file_path.name, exc_info=True)
			continue
		catalog.add(design)
		loaded += 1
	logger.info("Loaded %d design(s) from %s", loaded, file_path.name)
	return catalog


#============================================
def check_design(design: CardDesign) -> list[str]:
	"""
	List the problems found in one design.

	Args:
		design: Card design.

	Returns:
		Human-readable issue strings, empty when the design is usable.
	"""
	issues: list[str] = []
	if not design.design_id:
		issues.append("missing id")
	if not design.name:
		issues.append("missing name")
	if not design.theme:
		issues.append("missing theme")
	if design.markup is None and design.zones is None:
		issues.append("neither markup nor zones")
	if design.markup is not None and design.zones is not None:
		issues.append("both markup and zones")

	metadata = design.metadata
	if abs(metadata.width_mm - CARD_WIDTH_MM) > DIMENSION_TOLERANCE_MM or abs(metadata.height_mm - CARD_HEIGHT_MM) > DIMENSION_TOLERANCE_MM:
		issues.append(f"dimensions {metadata.width_mm:.1f}x{metadata.height_mm:.1f} mm do not match the card size")

	if design.markup is not None:
		if not design.markup.strip():
			issues.append("empty markup")
		elif not bcs.slots.scan_slots(design.markup):
			issues.append("markup has no contact slots")
		for slot in bcs.slots.scan_slots(design.markup or ""):
			if slot.field == "social_media" and not slot.platform:
				issues.append("social slot without data-platform")

	for zone in design.zones or ():
		label = zone.zone_id or zone.zone_type
		if zone.zone_type not in bcs.models.ZONE_TYPES:
			issues.append(f"zone {label}: unknown type '{zone.zone_type}'")
		if zone.width <= 0 or zone.height <= 0:
			issues.append(f"zone {label}: empty size")
		if zone.x < 0 or zone.y < 0 or zone.x + zone.width > metadata.width_mm or zone.y + zone.height > metadata.height_mm:
			issues.append(f"zone {label}: outside the card")
		block = zone.contact_block
		if block is not None and block.overflow not in bcs.models.OVERFLOW_POLICIES:
			issues.append(f"zone {label}: unknown overflow '{block.overflow}'")
	return issues


#============================================
def validate_catalog(catalog: DesignCatalog) -> CatalogReport:
	"""
	Check every design in a catalog and report the problems found.

	Problems are logged as warnings; nothing is raised.

	Args:
		catalog: Design catalog.

	Returns:
		CatalogReport.
	"""
	report = CatalogReport()
	for design in catalog:
		report.checked += 1
		for issue in check_design(design):
			logger.warning("Design %s: %s", design.design_id or "<no id>", issue)
			report.add_issue(design.design_id, issue)
	return report
