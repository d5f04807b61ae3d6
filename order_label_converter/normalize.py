"""
Label field normalization: numeric formats and derived label text.
"""

# Standard Library
import dataclasses
import math
import re
import typing

# local repo modules
import order_label_converter as olc
import order_label_converter.aggregate
import order_label_converter.config
import order_label_converter.reader


BundleView = olc.reader.BundleView

CATEGORY_LENS = olc.config.CATEGORY_LENS
CATEGORY_COATING = olc.config.CATEGORY_COATING
ITEM_SEPARATOR = olc.config.ITEM_SEPARATOR
LABEL_FIELD_CANDIDATES = olc.config.LABEL_FIELD_CANDIDATES
LABEL_MODE_ORDER = olc.config.LABEL_MODE_ORDER
DEFAULT_PRESCRIPTION_TYPE = olc.config.DEFAULT_PRESCRIPTION_TYPE
DEFAULT_COATING = olc.config.DEFAULT_COATING
INDEX_LENS_TEXT = olc.config.INDEX_LENS_TEXT

INDEX_LENS_RE = re.compile(r"(?<![\d.])1\.\d{1,2}(?![\d])")
WHITESPACE_RE = re.compile(r"\s+")


@dataclasses.dataclass
class EyeValues:
	sph: str = ""
	cyl: str = ""
	axis: str = ""
	add: str = ""
	pd: str = ""


@dataclasses.dataclass
class LabelData:
	order_id: str
	bundle_id: str
	backer: str
	name: str
	prescription_type: str
	thickness: str
	coating: str
	od: EyeValues
	os: EyeValues
	date_text: str


#============================================
def normalize_text(value: typing.Any) -> str:
	"""
	Collapse whitespace runs to one space and trim.

	Args:
		value: Any cell value.

	Returns:
		Normalized text, empty for None.
	"""
	if value is None:
		return ""
	return WHITESPACE_RE.sub(" ", str(value)).strip()


#============================================
def parse_number(value: typing.Any) -> float | None:
	"""
	Parse a cell to a finite float.

	Args:
		value: Cell value.

	Returns:
		Float, or None for blank, "/", "nan" and unparsable input.
	"""
	if value is None:
		return None
	text = str(value).strip()
	if not text or text == "/" or "_" in text:
		return None
	try:
		number = float(text)
	except ValueError:
		return None
	if not math.isfinite(number):
		return None
	return number


#============================================
def format_two_decimals(value: typing.Any) -> str:
	"""
	Format a numeric cell with two decimals ("-2" -> "-2.00").
	"""
	number = parse_number(value)
	if number is None:
		return ""
	return f"{number:.2f}"


#============================================
def format_axis(value: typing.Any) -> str:
	"""
	Format an axis cell as a whole number, halves rounding up.
	"""
	number = parse_number(value)
	if number is None:
		return ""
	return str(int(math.floor(number + 0.5)))


#============================================
def parse_index_lens(text: typing.Any) -> str:
	"""
	Find a lens index like 1.67 in item text.

	Args:
		text: Lens item text.

	Returns:
		Index with two decimals, or "" when none is found.
	"""
	match = INDEX_LENS_RE.search("" if text is None else str(text))
	if not match:
		return ""
	return format_two_decimals(match.group(0))


#============================================
def thickness_text(explicit_index: typing.Any, lens_text: str) -> str:
	"""
	Build the thickness line.

	Args:
		explicit_index: Value of an "Index Lens" field, if any.
		lens_text: Joined lens items of the bundle.

	Returns:
		Thickness text such as "1.67 index lens".
	"""
	explicit = normalize_text(explicit_index)
	if explicit:
		return explicit
	index = parse_index_lens(lens_text)
	if index:
		return f"{index} {INDEX_LENS_TEXT}"
	return INDEX_LENS_TEXT


#============================================
def coating_text(coating_items: list[str]) -> str:
	"""
	Build the coating line; anything mentioning blue light collapses.

	Args:
		coating_items: Coating items of the bundle.

	Returns:
		Coating text.
	"""
	items = olc.aggregate.uniq_preserve_order(coating_items)
	if not items:
		return DEFAULT_COATING
	for item in items:
		if "blue" in item.lower():
			return DEFAULT_COATING
	return ITEM_SEPARATOR.join(items)


#============================================
def resolve_pd(view: BundleView) -> tuple[str, str]:
	"""
	Resolve right and left pupillary distance.

	Separate OD/OS values win; otherwise a positive single PD is split
	evenly between both eyes.

	Args:
		view: Bundle view.

	Returns:
		Tuple of (od_pd, os_pd).
	"""
	pd_od = format_two_decimals(view.resolve(LABEL_FIELD_CANDIDATES["pd_od"]))
	pd_os = format_two_decimals(view.resolve(LABEL_FIELD_CANDIDATES["pd_os"]))
	if pd_od or pd_os:
		return (pd_od, pd_os)
	single = parse_number(view.resolve(LABEL_FIELD_CANDIDATES["pd_single"]))
	if single is not None and single > 0:
		half = f"{single / 2.0:.2f}"
		return (half, half)
	return ("", "")


#============================================
def prescription_type(view: BundleView) -> str:
	"""
	Resolve the prescription type, defaulting to single vision.
	"""
	value = normalize_text(view.resolve(LABEL_FIELD_CANDIDATES["prescription_type"]))
	return value or DEFAULT_PRESCRIPTION_TYPE


#============================================
def eye_values(view: BundleView, eye: str, pd_value: str) -> EyeValues:
	"""
	Resolve sphere, cylinder, axis and add for one eye.

	Args:
		view: Bundle view.
		eye: "od" or "os".
		pd_value: Already resolved PD.

	Returns:
		EyeValues.
	"""
	return EyeValues(
		sph=format_two_decimals(view.resolve(LABEL_FIELD_CANDIDATES[f"{eye}_sph"])),
		cyl=format_two_decimals(view.resolve(LABEL_FIELD_CANDIDATES[f"{eye}_cyl"])),
		axis=format_axis(view.resolve(LABEL_FIELD_CANDIDATES[f"{eye}_axis"])),
		add=format_two_decimals(view.resolve(LABEL_FIELD_CANDIDATES[f"{eye}_add"])),
		pd=pd_value,
	)


#============================================
def build_label_data(view: BundleView, mode: str, date_text: str) -> LabelData:
	"""
	Turn a bundle view into display-ready label fields.

	Args:
		view: Bundle view.
		mode: "bundle" or "order".
		date_text: Print date shown on the label.

	Returns:
		LabelData.
	"""
	lens_text = ITEM_SEPARATOR.join(olc.aggregate.uniq_preserve_order(view.items.get(CATEGORY_LENS, [])))
	pd_od, pd_os = resolve_pd(view)
	backer = view.order_id if mode == LABEL_MODE_ORDER else view.bundle_id
	return LabelData(
		order_id=view.order_id,
		bundle_id=view.bundle_id,
		backer=normalize_text(backer),
		name=normalize_text(view.resolve(LABEL_FIELD_CANDIDATES["name"])),
		prescription_type=prescription_type(view),
		thickness=thickness_text(view.resolve(LABEL_FIELD_CANDIDATES["index_lens"]), lens_text),
		coating=coating_text(view.items.get(CATEGORY_COATING, [])),
		od=eye_values(view, "od", pd_od),
		os=eye_values(view, "os", pd_os),
		date_text=date_text,
	)
