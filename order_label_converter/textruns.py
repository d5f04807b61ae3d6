"""
Multi-script text runs: font dispatch, measurement, wrapping and fitting.
"""

# Standard Library
import dataclasses
import typing

# PIP3 modules
import reportlab.pdfbase.pdfmetrics

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.errors
import order_label_converter.normalize


ResourceError = olc.errors.ResourceError
normalize_text = olc.normalize.normalize_text

SCRIPT_LATIN = olc.config.SCRIPT_LATIN
SCRIPT_JAPANESE = olc.config.SCRIPT_JAPANESE
SCRIPT_KOREAN = olc.config.SCRIPT_KOREAN
SCRIPT_SIMPLIFIED_CHINESE = olc.config.SCRIPT_SIMPLIFIED_CHINESE
SCRIPT_OTHER = olc.config.SCRIPT_OTHER
FALLBACK_SCRIPTS = olc.config.FALLBACK_SCRIPTS
TRUNCATION_MARKER = olc.config.TRUNCATION_MARKER
LINE_LEADING = olc.config.LINE_LEADING

# script tag used for Han characters; the font set decides SC or TC
SCRIPT_HAN = "han"

KANA_RANGES = (
	(0x3040, 0x30FF),
	(0x31F0, 0x31FF),
	(0xFF66, 0xFF9D),
)
HANGUL_RANGES = (
	(0xAC00, 0xD7AF),
	(0x1100, 0x11FF),
	(0x3130, 0x318F),
	(0xA960, 0xA97F),
	(0xD7B0, 0xD7FF),
)
HAN_RANGES = (
	(0x4E00, 0x9FFF),
	(0x3400, 0x4DBF),
	(0x20000, 0x2A6DF),
	(0x2A700, 0x2B73F),
	(0x2B740, 0x2B81F),
	(0x2B820, 0x2CEAF),
	(0x2CEB0, 0x2EBEF),
	(0x30000, 0x3134F),
	(0xF900, 0xFAFF),
	(0x2F800, 0x2FA1F),
)


class FontFace(typing.Protocol):
	name: str

	def width(self, text: str, size: float) -> float:
		...


@dataclasses.dataclass(frozen=True)
class RegisteredFace:
	name: str

	def width(self, text: str, size: float) -> float:
		"""
		Advance width of text in a font registered with ReportLab.
		"""
		return reportlab.pdfbase.pdfmetrics.stringWidth(text, self.name, size)


@dataclasses.dataclass
class FontSet:
	faces: dict[str, FontFace]
	han_script: str = SCRIPT_SIMPLIFIED_CHINESE

	def has(self, script: str) -> bool:
		return script in self.faces


@dataclasses.dataclass(frozen=True)
class TextRun:
	font_name: str
	text: str
	x: float
	y: float
	size: float
	width: float


#============================================
def in_ranges(code_point: int, ranges: tuple[tuple[int, int], ...]) -> bool:
	for low, high in ranges:
		if low <= code_point <= high:
			return True
	return False


#============================================
def classify_char(char: str) -> str:
	"""
	Classify a character by the script font it needs.

	Args:
		char: Single character.

	Returns:
		latin, jp, kr, han or other.
	"""
	code_point = ord(char)
	if 0x20 <= code_point <= 0x7E:
		return SCRIPT_LATIN
	if in_ranges(code_point, KANA_RANGES):
		return SCRIPT_JAPANESE
	if in_ranges(code_point, HANGUL_RANGES):
		return SCRIPT_KOREAN
	if in_ranges(code_point, HAN_RANGES):
		return SCRIPT_HAN
	return SCRIPT_OTHER


#============================================
def fallback_script(font_set: FontSet) -> str | None:
	"""
	First loaded font among the CJK fallbacks.
	"""
	for script in FALLBACK_SCRIPTS:
		if font_set.has(script):
			return script
	return None


#============================================
def script_for_char(char: str, font_set: FontSet) -> str:
	"""
	Pick the loaded font key that draws a character.

	Kana, Hangul and Han need their own script font. Any other
	non-ASCII character uses the first loaded CJK fallback font.

	Args:
		char: Single character.
		font_set: Loaded fonts.

	Returns:
		Key into font_set.faces.
	"""
	script = classify_char(char)
	if script == SCRIPT_HAN:
		script = font_set.han_script
	if font_set.has(script):
		return script
	if script != SCRIPT_OTHER:
		raise ResourceError(f"No {script} font loaded for character U+{ord(char):04X}")
	fallback = fallback_script(font_set)
	if fallback is None:
		raise ResourceError(f"No font available for character U+{ord(char):04X}")
	return fallback


#============================================
def required_scripts(texts: typing.Iterable[str], han_script: str) -> set[str]:
	"""
	Scan label text for the script fonts it needs.

	Args:
		texts: All text that will be drawn.
		han_script: Font key Han characters map to.

	Returns:
		Script keys; "other" means any CJK fallback font.
	"""
	scripts: set[str] = set()
	for text in texts:
		for char in normalize_text(text):
			script = classify_char(char)
			if script == SCRIPT_HAN:
				script = han_script
			scripts.add(script)
	return scripts


#============================================
def split_runs(text: str, font_set: FontSet) -> list[tuple[str, str]]:
	"""
	Split text into maximal runs sharing one font.

	Args:
		text: Text to split.
		font_set: Loaded fonts.

	Returns:
		List of (font key, run text).
	"""
	runs: list[tuple[str, str]] = []
	current_script = None
	buffer: list[str] = []
	for char in text:
		script = script_for_char(char, font_set)
		if current_script is not None and script != current_script:
			runs.append((current_script, "".join(buffer)))
			buffer = []
		current_script = script
		buffer.append(char)
	if buffer:
		runs.append((current_script, "".join(buffer)))
	return runs


#============================================
def layout_runs(
	text: str,
	x: float,
	y: float,
	size: float,
	font_set: FontSet,
) -> list[TextRun]:
	"""
	Position the runs of a line starting at x on baseline y.

	Args:
		text: Line text.
		x: Left edge.
		y: Baseline.
		size: Font size.
		font_set: Loaded fonts.

	Returns:
		TextRun list with accumulated x positions.
	"""
	placed: list[TextRun] = []
	cursor_x = x
	for script, run_text in split_runs(text, font_set):
		face = font_set.faces[script]
		width = face.width(run_text, size)
		placed.append(
			TextRun(
				font_name=face.name,
				text=run_text,
				x=cursor_x,
				y=y,
				size=size,
				width=width,
			)
		)
		cursor_x += width
	return placed


#============================================
def measure_text(text: str, size: float, font_set: FontSet) -> float:
	"""
	Measure text as the sum of its run widths.

	Args:
		text: Line text.
		size: Font size.
		font_set: Loaded fonts.

	Returns:
		Width in points.
	"""
	return sum(run.width for run in layout_runs(text, 0.0, 0.0, size, font_set))


#============================================
def truncate_to_width(
	text: str,
	size: float,
	max_width: float,
	font_set: FontSet,
	force_marker: bool = False,
) -> str:
	"""
	Cut text to the longest prefix that fits with a trailing marker.

	Args:
		text: Line text.
		size: Font size.
		max_width: Available width.
		font_set: Loaded fonts.
		force_marker: Always end with "...", for text known to continue.

	Returns:
		Text unchanged if it fits, else prefix plus "...", or "" if even
		the marker does not fit.
	"""
	if not force_marker and measure_text(text, size, font_set) <= max_width:
		return text
	if force_marker and measure_text(text + TRUNCATION_MARKER, size, font_set) <= max_width:
		return text + TRUNCATION_MARKER

	def candidate(length: int) -> str:
		return text[:length].rstrip() + TRUNCATION_MARKER

	if measure_text(TRUNCATION_MARKER, size, font_set) > max_width:
		return ""
	low = 0
	high = len(text) - 1
	while low < high:
		middle = (low + high + 1) // 2
		if measure_text(candidate(middle), size, font_set) <= max_width:
			low = middle
		else:
			high = middle - 1
	return candidate(low)


#============================================
def fit_single_line(
	text: str,
	size: float,
	min_size: float,
	max_width: float,
	font_set: FontSet,
) -> tuple[str, float]:
	"""
	Shrink text in 1pt steps down to min_size, then truncate.

	Args:
		text: Line text.
		size: Preferred font size.
		min_size: Smallest allowed size.
		max_width: Available width.
		font_set: Loaded fonts.

	Returns:
		Tuple of (text, font size).
	"""
	text = normalize_text(text)
	while size > min_size and measure_text(text, size, font_set) > max_width:
		size = max(min_size, size - 1.0)
	return truncate_to_width(text, size, max_width, font_set), size


#============================================
def wrap_lines(
	text: str,
	size: float,
	max_width: float,
	max_lines: int,
	font_set: FontSet,
) -> list[str]:
	"""
	Greedy word wrap within a line budget.

	Overflowing content is cut and the last kept line ends with "...".

	Args:
		text: Text to wrap.
		size: Font size.
		max_width: Line width.
		max_lines: Line budget.
		font_set: Loaded fonts.

	Returns:
		Wrapped lines.
	"""
	words = normalize_text(text).split(" ")
	if not words or words == [""]:
		return []
	lines: list[str] = []
	current = ""
	for word in words:
		candidate = word if not current else f"{current} {word}"
		if measure_text(candidate, size, font_set) <= max_width or not current:
			current = candidate
			continue
		lines.append(current)
		current = word
	if current:
		lines.append(current)

	overflow = len(lines) > max_lines
	lines = lines[:max_lines]
	fitted = [truncate_to_width(line, size, max_width, font_set) for line in lines]
	if overflow and fitted:
		fitted[-1] = truncate_to_width(lines[-1], size, max_width, font_set, force_marker=True)
	return fitted


#============================================
def line_leading(size: float) -> float:
	return size * LINE_LEADING
