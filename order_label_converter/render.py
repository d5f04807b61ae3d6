"""
PDF rendering of prescription labels and batch merging.
"""

# Standard Library
import json
import pathlib
import typing

# PIP3 modules
import pypdf
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfbase.ttfonts
import reportlab.pdfgen.canvas

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.errors
import order_label_converter.layout
import order_label_converter.normalize
import order_label_converter.textruns


FontConfig = olc.config.FontConfig
RenderResult = olc.config.RenderResult
ResourceError = olc.errors.ResourceError
LabelData = olc.normalize.LabelData
LabelDrawing = olc.layout.LabelDrawing
FontSet = olc.textruns.FontSet
RegisteredFace = olc.textruns.RegisteredFace

SCRIPT_LATIN = olc.config.SCRIPT_LATIN
SCRIPT_OTHER = olc.config.SCRIPT_OTHER
FALLBACK_SCRIPTS = olc.config.FALLBACK_SCRIPTS
FONT_FILES = olc.config.FONT_FILES
FONT_NAMES = olc.config.FONT_NAMES
LABEL_WIDTH = olc.config.LABEL_WIDTH
LABEL_HEIGHT = olc.config.LABEL_HEIGHT
PROGRESS_BAR_WIDTH = olc.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = olc.config.PROGRESS_UPDATE_EVERY

# font name -> resolved TTF path, for fonts this process registered
REGISTERED_FONT_PATHS: dict[str, str] = {}


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def registered_font_name(script: str, font_path: pathlib.Path) -> tuple[str, bool]:
	"""
	Pick the ReportLab font name for a script font file.

	The first file registered for a script gets the plain Noto name; a
	different file for the same script gets a numbered name.

	Args:
		script: Script key such as "jp".
		font_path: TTF path.

	Returns:
		Tuple of (font name, already registered).
	"""
	base_name = FONT_NAMES[script]
	resolved = str(font_path.resolve())
	font_name = base_name
	number = 1
	while font_name in REGISTERED_FONT_PATHS:
		if REGISTERED_FONT_PATHS[font_name] == resolved:
			return font_name, True
		number += 1
		font_name = f"{base_name}-{number}"
	return font_name, False


#============================================
def register_script_font(script: str, font_config: FontConfig) -> RegisteredFace:
	"""
	Register the TTF font of one script with ReportLab.

	Args:
		script: Script key such as "jp".
		font_config: Font configuration.

	Returns:
		RegisteredFace for the font.
	"""
	font_path = pathlib.Path(font_config.font_dir) / FONT_FILES[script]
	if not font_path.is_file():
		raise ResourceError(f"Font not found: {font_path}")
	font_name, registered = registered_font_name(script, font_path)
	if registered:
		return RegisteredFace(name=font_name)
	try:
		font = reportlab.pdfbase.ttfonts.TTFont(font_name, str(font_path))
	except reportlab.pdfbase.ttfonts.TTFError as error:
		raise ResourceError(f"Font not usable: {font_path} ({error})") from error
	reportlab.pdfbase.pdfmetrics.registerFont(font)
	REGISTERED_FONT_PATHS[font_name] = str(font_path.resolve())
	return RegisteredFace(name=font_name)


#============================================
def load_font_set(required: set[str], font_config: FontConfig) -> FontSet:
	"""
	Load only the fonts the scanned label text needs.

	Every Kana, Hangul or Han script in the text must load its own font.
	Other non-ASCII text needs one CJK fallback font.

	Args:
		required: Output of textruns.required_scripts.
		font_config: Font configuration.

	Returns:
		FontSet covering every required script.
	"""
	faces: dict[str, typing.Any] = {SCRIPT_LATIN: RegisteredFace(name=font_config.latin_font)}
	for script in sorted(required):
		if script in (SCRIPT_LATIN, SCRIPT_OTHER):
			continue
		faces[script] = register_script_font(script, font_config)
	font_set = FontSet(faces=faces, han_script=font_config.han_script)

	if SCRIPT_OTHER not in required or olc.textruns.fallback_script(font_set) is not None:
		return font_set
	missing: list[str] = []
	for script in FALLBACK_SCRIPTS:
		try:
			faces[script] = register_script_font(script, font_config)
		except ResourceError as error:
			missing.append(str(error))
			continue
		return font_set
	raise ResourceError("Label text needs a CJK fallback font: " + "; ".join(missing))


#============================================
def font_set_for_labels(labels: list[LabelData], font_config: FontConfig) -> FontSet:
	"""
	Scan all label text, then load the fonts it requires.

	Args:
		labels: Label records.
		font_config: Font configuration.

	Returns:
		FontSet.
	"""
	texts: list[str] = []
	for label in labels:
		texts.extend(olc.layout.label_texts(label))
	required = olc.textruns.required_scripts(texts, font_config.han_script)
	return load_font_set(required, font_config)


#============================================
def paint_drawing(pdf: reportlab.pdfgen.canvas.Canvas, drawing: LabelDrawing) -> None:
	"""
	Paint draw instructions onto the current page.

	Args:
		pdf: ReportLab canvas.
		drawing: Laid out label.
	"""
	pdf.setFillColorRGB(0.0, 0.0, 0.0)
	pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
	for line in drawing.lines:
		pdf.setLineWidth(line.thickness)
		pdf.line(line.x0, line.y, line.x1, line.y)
	for run in drawing.runs:
		pdf.setFont(run.font_name, run.size)
		pdf.drawString(run.x, run.y, run.text)


#============================================
def render_labels_to_pdf(
	labels: list[LabelData],
	output_path: pathlib.Path | typing.BinaryIO,
	font_config: FontConfig,
	total_labels: int | None = None,
	start: int = 0,
	verbose: bool = False,
) -> RenderResult:
	"""
	Render one label per page into a PDF.

	Args:
		labels: Label records in output order.
		output_path: Output PDF path or binary stream.
		font_config: Font configuration.
		total_labels: Total labels of the whole input, for reporting.
		start: Index of the first label within the whole input.
		verbose: Print a progress bar.

	Returns:
		RenderResult.
	"""
	font_set = font_set_for_labels(labels, font_config)
	target = str(output_path) if isinstance(output_path, pathlib.Path) else output_path
	pdf = reportlab.pdfgen.canvas.Canvas(target, pagesize=(LABEL_WIDTH, LABEL_HEIGHT))
	total = len(labels)
	for index, label in enumerate(labels, start=1):
		drawing = olc.layout.layout_label(label, font_set)
		paint_drawing(pdf, drawing)
		pdf.showPage()
		if verbose and (index % PROGRESS_UPDATE_EVERY == 0 or index == total):
			print_progress("Labels", index, total)
	if verbose and total > 0:
		print()
	pdf.save()

	fonts = {script: face.name for script, face in font_set.faces.items()}
	return RenderResult(
		total_labels=total if total_labels is None else total_labels,
		start=start,
		printed_labels=total,
		pages=total,
		fonts=fonts,
	)


#============================================
def merge_pdfs(input_paths: list[pathlib.Path], output_path: pathlib.Path) -> int:
	"""
	Concatenate label PDFs in the given order.

	Args:
		input_paths: PDF paths.
		output_path: Merged PDF path.

	Returns:
		Number of pages written.
	"""
	writer = pypdf.PdfWriter()
	pages = 0
	for path in input_paths:
		reader = pypdf.PdfReader(str(path))
		for page in reader.pages:
			writer.add_page(page)
			pages += 1
	with output_path.open("wb") as handle:
		writer.write(handle)
	return pages


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	input_path: pathlib.Path,
	mode: str,
	results: list[RenderResult],
	output_path: pathlib.Path,
) -> None:
	"""
	Write a manifest JSON file for a label run.

	Args:
		manifest_path: Output path.
		input_path: Input CSV.
		mode: Label mode.
		results: RenderResult per written batch.
		output_path: Output PDF.
	"""
	fonts: dict[str, str] = {}
	for result in results:
		fonts.update(result.fonts)
	data = {
		"input": str(input_path),
		"output": str(output_path),
		"mode": mode,
		"total_labels": results[0].total_labels if results else 0,
		"printed_labels": sum(result.printed_labels for result in results),
		"pages": sum(result.pages for result in results),
		"batches": [
			{"start": result.start, "labels": result.printed_labels}
			for result in results
		],
		"label_size": {"width": LABEL_WIDTH, "height": LABEL_HEIGHT},
		"fonts": fonts,
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
