"""
Label enumeration and pagination.
"""

# Standard Library
import datetime
import typing

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.errors
import order_label_converter.normalize
import order_label_converter.reader


LabelData = olc.normalize.LabelData
LabelRange = olc.config.LabelRange
ValidationError = olc.errors.ValidationError
Row = olc.reader.Row

LABEL_MODES = olc.config.LABEL_MODES
MAX_LABELS_PER_REQUEST = olc.config.MAX_LABELS_PER_REQUEST
DATE_FORMAT = olc.config.DATE_FORMAT


#============================================
def format_label_date(value: datetime.date) -> str:
	"""
	Format a print date like "Oct 19, 2026".

	Args:
		value: Date to format.

	Returns:
		Date text.
	"""
	return DATE_FORMAT.format(month=value.strftime("%b"), day=value.day, year=value.year)


#============================================
def validate_mode(mode: str) -> str:
	"""
	Normalize and check a label mode.
	"""
	normalized = (mode or "").strip().lower()
	if normalized not in LABEL_MODES:
		raise ValidationError(f"Unknown label mode: {mode}")
	return normalized


#============================================
def validate_range(label_range: LabelRange | None) -> LabelRange:
	"""
	Check pagination parameters.

	Args:
		label_range: Requested range, None for everything.

	Returns:
		A valid LabelRange.
	"""
	if label_range is None:
		return LabelRange()
	if not isinstance(label_range.start, int) or label_range.start < 0:
		raise ValidationError(f"Invalid start: {label_range.start}")
	limit = label_range.limit
	if limit is not None:
		if not isinstance(limit, int) or limit <= 0 or limit > MAX_LABELS_PER_REQUEST:
			raise ValidationError(
				f"Invalid limit: {limit} (must be 1..{MAX_LABELS_PER_REQUEST})"
			)
	return label_range


#============================================
def build_labels(
	rows: list[Row],
	mode: str,
	label_range: LabelRange | None = None,
	date_text: str | None = None,
) -> tuple[list[LabelData], int]:
	"""
	Build the label records of one request window.

	Every label of the input is enumerated in a fixed order so adjacent
	windows concatenate to the unpaginated sequence. Only labels inside
	the window are normalized.

	Args:
		rows: Parsed rows, raw or aggregated.
		mode: "bundle" for one label per bundle, "order" for one per order.
		label_range: Window [start, start + limit); None for all labels.
		date_text: Print date text; today when None.

	Returns:
		Tuple of (label records, total label count).
	"""
	mode = validate_mode(mode)
	label_range = validate_range(label_range)
	if date_text is None:
		date_text = format_label_date(datetime.date.today())

	views = list(olc.reader.iter_bundle_views(rows, mode))
	total = len(views)
	start = label_range.start
	if start > total:
		raise ValidationError(f"Start {start} exceeds total label count {total}")
	stop = total
	if label_range.limit is not None:
		stop = min(total, start + label_range.limit)

	records = [
		olc.normalize.build_label_data(view, mode, date_text)
		for view in views[start:stop]
	]
	return records, total


#============================================
def iter_label_windows(total: int, batch_size: int) -> typing.Iterator[LabelRange]:
	"""
	Split [0, total) into consecutive windows.

	Args:
		total: Total label count.
		batch_size: Labels per window.

	Yields:
		LabelRange per window.
	"""
	if batch_size <= 0 or batch_size > MAX_LABELS_PER_REQUEST:
		raise ValidationError(
			f"Invalid batch size: {batch_size} (must be 1..{MAX_LABELS_PER_REQUEST})"
		)
	for start in range(0, total, batch_size):
		yield LabelRange(start=start, limit=batch_size)
