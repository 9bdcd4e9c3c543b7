"""
Request boundary for card sheet generation.

handle_generate_request() takes a decoded (or raw JSON) request body and
returns an ApiResponse that a web framework can send as-is.
"""

# Standard Library
import dataclasses
import datetime
import json
import logging
from typing import Any

# local repo modules
import business_card_sheets as bcs
import business_card_sheets.assemble
import business_card_sheets.catalog
import business_card_sheets.config
import business_card_sheets.document
import business_card_sheets.errors
import business_card_sheets.images
import business_card_sheets.models


DesignCatalog = bcs.catalog.DesignCatalog
ImageCache = bcs.images.ImageCache

DEFAULT_CARD_COUNT = bcs.config.DEFAULT_CARD_COUNT
MAX_JOB_CARDS = bcs.config.MAX_JOB_CARDS

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ApiResponse:
	status: int
	content_type: str
	body: bytes
	headers: dict[str, str] = dataclasses.field(default_factory=dict)

	@property
	def json(self) -> Any:
		return json.loads(self.body.decode("utf-8"))


#============================================
def json_response(status: int, error: str, details: str | None = None) -> ApiResponse:
	payload = {"error": error}
	if details:
		payload["details"] = details
	body = json.dumps(payload).encode("utf-8")
	return ApiResponse(
		status=status,
		content_type="application/json",
		body=body,
		headers={"Content-Type": "application/json"},
	)


#============================================
def parse_card_count(value: Any) -> int:
	"""
	Validate the requested card count.

	Args:
		value: cardCount from the request, None for the default.

	Returns:
		Card count.
	"""
	if value is None:
		return DEFAULT_CARD_COUNT
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise bcs.errors.InputError("cardCount must be a number")
	if int(value) != value:
		raise bcs.errors.InputError("cardCount must be a whole number")
	count = int(value)
	if count < 1 or count > MAX_JOB_CARDS:
		raise bcs.errors.InputError(f"cardCount must be between 1 and {MAX_JOB_CARDS}")
	return count


#============================================
def handle_generate_request(
	payload: dict | str | bytes,
	method: str = "POST",
	catalog: DesignCatalog | None = None,
	image_cache: ImageCache | None = None,
	today: datetime.date | None = None,
) -> ApiResponse:
	"""
	Generate a card document for one request.

	The body carries designId, contactRecord and an optional cardCount
	(templateId and cardData are accepted as older names).

	Args:
		payload: Request body, decoded or raw JSON.
		method: HTTP method.
		catalog: Design catalog, defaults to the built-in catalog.
		image_cache: Logo cache shared across requests.
		today: Date used in the download filename.

	Returns:
		ApiResponse with the PDF, or a JSON error.
	"""
	if method.upper() != "POST":
		return json_response(405, "Method not allowed. Use POST to generate business cards.")

	if isinstance(payload, (str, bytes)):
		try:
			payload = json.loads(payload)
		except (json.JSONDecodeError, UnicodeDecodeError) as exc:
			return json_response(400, "Request body is not valid JSON", str(exc))
	if not isinstance(payload, dict):
		return json_response(400, "Request body must be a JSON object")

	design_id = payload.get("designId") or payload.get("templateId")
	contact_data = payload.get("contactRecord") or payload.get("cardData")
	if not design_id or not contact_data:
		logger.warning("Rejected request without design or contact record")
		return json_response(400, "Missing required parameters: designId and contactRecord are required")

	try:
		card_count = parse_card_count(payload.get("cardCount"))
		record = bcs.models.contact_record_from_dict(contact_data)
		is_valid, problems = bcs.models.validate_contact_record(record)
		if not is_valid:
			raise bcs.errors.InputError("; ".join(problems))
		data = bcs.assemble.generate_document(
			str(design_id),
			record,
			card_count,
			catalog=catalog,
			image_cache=image_cache,
		)
	except bcs.errors.CardSheetError as exc:
		if exc.status_code >= 500:
			logger.error("Business card generation failed: %s", exc.detail)
			return json_response(exc.status_code, "Business card generation failed", exc.detail)
		logger.warning("Rejected request: %s", exc.detail)
		return json_response(exc.status_code, "Invalid request", exc.detail)
	except Exception as exc:
		logger.error("Business card generation failed", exc_info=True)
		return json_response(500, "Business card generation failed", str(exc))

	filename = bcs.document.sanitize_filename(record.company_name, today)
	logger.info("Generated %s (%d bytes)", filename, len(data))
	return ApiResponse(
		status=200,
		content_type="application/pdf",
		body=data,
		headers={
			"Content-Type": "application/pdf",
			"Content-Disposition": f'attachment; filename="{filename}"',
			"Content-Length": str(len(data)),
		},
	)
