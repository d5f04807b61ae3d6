"""
Label composition: turn label records into positioned draw instructions.
"""

# Standard Library
import dataclasses

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.normalize
import order_label_converter.textruns


LabelData = olc.normalize.LabelData
FontSet = olc.textruns.FontSet
TextRun = olc.textruns.TextRun
normalize_text = olc.normalize.normalize_text

LABEL_WIDTH = olc.config.LABEL_WIDTH
LABEL_HEIGHT = olc.config.LABEL_HEIGHT
HEADER_TEXT_SIZE = olc.config.HEADER_TEXT_SIZE
HEADER_TEXT_MIN_SIZE = olc.config.HEADER_TEXT_MIN_SIZE
BODY_TEXT_SIZE = olc.config.BODY_TEXT_SIZE
BODY_TEXT_MIN_SIZE = olc.config.BODY_TEXT_MIN_SIZE
COATING_MAX_LINES = olc.config.COATING_MAX_LINES
MARGIN_FRACTION = olc.config.MARGIN_FRACTION
VALUE_COLUMN_FRACTION = olc.config.VALUE_COLUMN_FRACTION
TABLE_COLUMN_FRACTIONS = olc.config.TABLE_COLUMN_FRACTIONS
TABLE_ROW_LABEL_FRACTION = olc.config.TABLE_ROW_LABEL_FRACTION
TABLE_HEADERS = olc.config.TABLE_HEADERS
TABLE_CELL_FRACTION = olc.config.TABLE_CELL_FRACTION
SEPARATOR_THICKNESS = olc.config.SEPARATOR_THICKNESS
SEPARATOR_THIN_THICKNESS = olc.config.SEPARATOR_THIN_THICKNESS
EMPTY_CELL_TEXT = olc.config.EMPTY_CELL_TEXT
INDEX_LENS_TEXT = olc.config.INDEX_LENS_TEXT


@dataclasses.dataclass(frozen=True)
class RuleLine:
	x0: float
	x1: float
	y: float
	thickness: float


@dataclasses.dataclass
class LabelDrawing:
	font_set: FontSet
	width: float = LABEL_WIDTH
	height: float = LABEL_HEIGHT
	runs: list[TextRun] = dataclasses.field(default_factory=list)
	lines: list[RuleLine] = dataclasses.field(default_factory=list)

	def x(self, fraction: float) -> float:
		return self.width * fraction

	def top(self, fraction_from_bottom: float) -> float:
		"""
		Distance from the top edge for a height fraction measured from the bottom.
		"""
		return (1.0 - fraction_from_bottom) * self.height

	def baseline(self, top_y: float, size: float) -> float:
		return self.height - top_y - size


#============================================
def draw_top_left(drawing: LabelDrawing, x: float, top_y: float, text: str, size: float) -> None:
	"""
	Draw text with its left edge at x, top_y points below the top edge.
	"""
	text = normalize_text(text)
	if not text:
		return
	drawing.runs.extend(
		olc.textruns.layout_runs(text, x, drawing.baseline(top_y, size), size, drawing.font_set)
	)


#============================================
def draw_top_center(drawing: LabelDrawing, x_center: float, top_y: float, text: str, size: float) -> None:
	"""
	Draw text centered on x_center, top_y points below the top edge.
	"""
	text = normalize_text(text)
	if not text:
		return
	width = olc.textruns.measure_text(text, size, drawing.font_set)
	drawing.runs.extend(
		olc.textruns.layout_runs(
			text,
			x_center - width / 2.0,
			drawing.baseline(top_y, size),
			size,
			drawing.font_set,
		)
	)


#============================================
def draw_fitted(
	drawing: LabelDrawing,
	x: float,
	top_y: float,
	text: str,
	size: float,
	min_size: float,
	max_width: float,
) -> None:
	"""
	Draw one line, shrinking and then truncating it to max_width.
	"""
	fitted, fitted_size = olc.textruns.fit_single_line(text, size, min_size, max_width, drawing.font_set)
	draw_top_left(drawing, x, top_y, fitted, fitted_size)


#============================================
def draw_wrapped(
	drawing: LabelDrawing,
	x: float,
	top_y: float,
	text: str,
	size: float,
	max_width: float,
	max_lines: int,
) -> int:
	"""
	Draw wrapped text downward from top_y.

	Returns:
		Number of lines drawn.
	"""
	lines = olc.textruns.wrap_lines(text, size, max_width, max_lines, drawing.font_set)
	leading = olc.textruns.line_leading(size)
	for index, line in enumerate(lines):
		draw_top_left(drawing, x, top_y + index * leading, line, size)
	return len(lines)


#============================================
def hline_top(drawing: LabelDrawing, top_y: float, thickness: float) -> None:
	"""
	Add a full-width separator top_y points below the top edge.
	"""
	drawing.lines.append(
		RuleLine(
			x0=drawing.x(MARGIN_FRACTION),
			x1=drawing.x(1.0 - MARGIN_FRACTION),
			y=drawing.height - top_y,
			thickness=thickness,
		)
	)


#============================================
def label_texts(label: LabelData) -> list[str]:
	"""
	List every string a label will draw, for font scanning.

	Args:
		label: Label record.

	Returns:
		Strings in drawing order.
	"""
	texts = [
		f"Backer Number: {label.backer}",
		f"Name: {label.name or EMPTY_CELL_TEXT}",
		"Prescription:",
		label.prescription_type,
		"Thickness:",
		label.thickness,
		"Coating:",
		label.coating,
		label.date_text,
		"od",
		"os",
		EMPTY_CELL_TEXT,
		olc.config.TRUNCATION_MARKER,
	]
	texts.extend(TABLE_HEADERS)
	for eye in (label.od, label.os):
		texts.extend([eye.sph, eye.cyl, eye.axis, eye.add, eye.pd])
	return texts


#============================================
def layout_label(label: LabelData, font_set: FontSet) -> LabelDrawing:
	"""
	Lay out one prescription label.

	Args:
		label: Label record.
		font_set: Loaded fonts.

	Returns:
		LabelDrawing with text runs and separator lines.
	"""
	drawing = LabelDrawing(font_set=font_set)
	left = drawing.x(MARGIN_FRACTION)
	value_x = drawing.x(VALUE_COLUMN_FRACTION)
	full_width = drawing.x(1.0 - 2.0 * MARGIN_FRACTION)
	value_width = drawing.x(1.0 - MARGIN_FRACTION) - value_x

	draw_fitted(
		drawing, left, drawing.top(olc.config.ROW_BACKER),
		f"Backer Number: {label.backer}",
		HEADER_TEXT_SIZE, HEADER_TEXT_MIN_SIZE, full_width,
	)
	draw_fitted(
		drawing, left, drawing.top(olc.config.ROW_NAME),
		f"Name: {label.name or EMPTY_CELL_TEXT}",
		HEADER_TEXT_SIZE, HEADER_TEXT_MIN_SIZE, full_width,
	)
	hline_top(drawing, drawing.top(olc.config.ROW_SEPARATOR_TOP), SEPARATOR_THICKNESS)

	rows = (
		(olc.config.ROW_PRESCRIPTION, "Prescription:", label.prescription_type or EMPTY_CELL_TEXT),
		(olc.config.ROW_THICKNESS, "Thickness:", label.thickness or INDEX_LENS_TEXT),
	)
	for row_fraction, caption, value in rows:
		top_y = drawing.top(row_fraction)
		draw_top_left(drawing, left, top_y, caption, BODY_TEXT_SIZE)
		draw_fitted(drawing, value_x, top_y, value, BODY_TEXT_SIZE, BODY_TEXT_MIN_SIZE, value_width)

	coating_top = drawing.top(olc.config.ROW_COATING)
	draw_top_left(drawing, left, coating_top, "Coating:", BODY_TEXT_SIZE)
	draw_wrapped(
		drawing, value_x, coating_top,
		label.coating or EMPTY_CELL_TEXT,
		BODY_TEXT_SIZE, value_width, COATING_MAX_LINES,
	)
	hline_top(drawing, drawing.top(olc.config.ROW_SEPARATOR_MIDDLE), SEPARATOR_THIN_THICKNESS)

	column_x = [drawing.x(fraction) for fraction in TABLE_COLUMN_FRACTIONS]
	cell_width = drawing.x(TABLE_CELL_FRACTION)
	header_top = drawing.top(olc.config.ROW_TABLE_HEADER)
	for center, header in zip(column_x, TABLE_HEADERS):
		draw_top_center(drawing, center, header_top, header, BODY_TEXT_SIZE)

	table_rows = (
		(olc.config.ROW_TABLE_OD, "od", label.od),
		(olc.config.ROW_TABLE_OS, "os", label.os),
	)
	for row_fraction, caption, eye in table_rows:
		top_y = drawing.top(row_fraction)
		draw_top_center(drawing, drawing.x(TABLE_ROW_LABEL_FRACTION), top_y, caption, BODY_TEXT_SIZE)
		values = (eye.sph, eye.cyl, eye.axis, eye.add, eye.pd)
		for center, value in zip(column_x, values):
			text, size = olc.textruns.fit_single_line(
				value or EMPTY_CELL_TEXT, BODY_TEXT_SIZE, BODY_TEXT_MIN_SIZE, cell_width, font_set,
			)
			draw_top_center(drawing, center, top_y, text, size)

	hline_top(drawing, drawing.top(olc.config.ROW_SEPARATOR_BOTTOM), SEPARATOR_THIN_THICKNESS)
	draw_top_left(drawing, left, drawing.top(olc.config.ROW_DATE), label.date_text, BODY_TEXT_SIZE)
	return drawing
