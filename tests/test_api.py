import datetime
import json

import business_card_sheets.api
import business_card_sheets.assemble
import business_card_sheets.document


api = business_card_sheets.api

CONTACT = {
	"companyName": "Acme Corp",
	"name": "Jane Doe",
	"title": "Director",
	"phones": [{"value": "5551234567", "label": "mobile"}],
	"emails": [{"value": "jane@acme.com", "isPrimary": True}],
}


#============================================
def test_generate_pdf_response() -> None:
	"""
	Ensure a valid request returns a dated PDF attachment.
	"""
	payload = {"designId": "modern-professional", "contactRecord": CONTACT, "cardCount": 12}
	response = api.handle_generate_request(payload, today=datetime.date(2024, 5, 1))
	assert response.status == 200
	assert response.content_type == "application/pdf"
	assert response.headers["Content-Disposition"] == 'attachment; filename="business-cards-acme-corp-2024-05-01.pdf"'
	assert response.headers["Content-Length"] == str(len(response.body))
	assert business_card_sheets.document.count_pages(response.body) == 2


#============================================
def test_raw_json_body_and_old_names() -> None:
	"""
	Ensure a JSON string body with templateId and cardData is accepted.
	"""
	body = json.dumps({"templateId": "creative-bold", "cardData": CONTACT})
	response = api.handle_generate_request(body)
	assert response.status == 200
	assert business_card_sheets.document.count_pages(response.body) == 1


#============================================
def test_method_not_allowed() -> None:
	response = api.handle_generate_request({}, method="GET")
	assert response.status == 405
	assert response.json["error"].startswith("Method not allowed")


#============================================
def test_missing_parameters() -> None:
	"""
	Ensure requests without design or contact data are rejected.
	"""
	response = api.handle_generate_request({"designId": "modern-professional"})
	assert response.status == 400
	assert response.json == {"error": "Missing required parameters: designId and contactRecord are required"}


#============================================
def test_invalid_json() -> None:
	response = api.handle_generate_request("{not json")
	assert response.status == 400
	assert response.json["error"] == "Request body is not valid JSON"


#============================================
def test_unknown_design() -> None:
	"""
	Ensure an unknown design is a client error naming the design.
	"""
	response = api.handle_generate_request({"designId": "nope", "contactRecord": CONTACT})
	assert response.status == 400
	assert response.json["error"] == "Invalid request"
	assert "nope" in response.json["details"]


#============================================
def test_invalid_contact_record() -> None:
	"""
	Ensure contact validation problems are reported.
	"""
	contact = dict(CONTACT, name="")
	response = api.handle_generate_request({"designId": "modern-professional", "contactRecord": contact})
	assert response.status == 400
	assert "Name is required" in response.json["details"]


#============================================
def test_card_count_bounds() -> None:
	"""
	Ensure out-of-range and non-numeric counts are rejected.
	"""
	for count in (0, 501, "ten", 2.5, True):
		payload = {"designId": "modern-professional", "contactRecord": CONTACT, "cardCount": count}
		response = api.handle_generate_request(payload)
		assert response.status == 400, count
		assert "cardCount" in response.json["details"]


#============================================
def test_render_failure_is_server_error(monkeypatch) -> None:
	"""
	Ensure an unexpected failure becomes a 500 response.
	"""
	def broken_generate(*args, **kwargs):
		raise RuntimeError("disk full")

	monkeypatch.setattr(business_card_sheets.assemble, "generate_document", broken_generate)
	response = api.handle_generate_request({"designId": "modern-professional", "contactRecord": CONTACT})
	assert response.status == 500
	assert response.json == {"error": "Business card generation failed", "details": "disk full"}
