"""
Error types reported to callers.
"""


class LabelToolError(Exception):
	kind = "error"

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message

	def __str__(self) -> str:
		return self.message


class ValidationError(LabelToolError):
	"""
	Input the request cannot be processed with: missing columns, empty
	input, bad range parameters or a malformed aggregated table.
	"""
	kind = "validation"


class ResourceError(LabelToolError):
	"""
	A script font needed by the label text is unavailable.
	"""
	kind = "resource"
