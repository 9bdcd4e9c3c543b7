"""
Error types for business card sheet generation.

Job-level errors carry an HTTP status code so the request boundary can turn
them into a response. Card-level errors are caught by the sheet assembler.
"""


class CardSheetError(Exception):
	"""
	Base error for the business card pipeline.
	"""
	status_code = 500

	def __init__(self, detail: str, status_code: int | None = None):
		super().__init__(detail)
		self.detail = detail
		if status_code is not None:
			self.status_code = status_code


class InputError(CardSheetError):
	"""
	Missing or malformed request input.
	"""
	status_code = 400


class DesignNotFoundError(InputError):
	"""
	The requested design id is not in the catalog.
	"""


class MissingContactError(InputError):
	"""
	No contact record was supplied.
	"""


class PositionError(CardSheetError):
	"""
	A card position falls outside the printable page.
	"""


class RenderError(CardSheetError):
	"""
	A single card failed to render.
	"""


class LogoLoadError(RenderError):
	"""
	Logo image data could not be fetched or decoded.
	"""


class CaptureError(CardSheetError):
	"""
	The preview element could not be located or captured.
	"""


class DocumentError(CardSheetError):
	"""
	The assembled document is empty.
	"""
