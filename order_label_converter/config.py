"""
Shared configuration and constants.
"""

import dataclasses


ORDER_ID = "Order ID"
BUNDLE_ID = "Bundle ID"
LINE_ITEM = "Line Item"
QUANTITY = "Quantity"
LINE_ITEM_PRICE = "Line Item Price"
BUNDLE_COUNT = "Bundle Count"
LENS_NOTES = "Lens Notes"

REQUIRED_COLUMNS = (ORDER_ID, BUNDLE_ID, LINE_ITEM, QUANTITY)
ID_COLUMNS = (ORDER_ID, BUNDLE_ID)
LINE_LEVEL_COLUMNS = (LINE_ITEM, QUANTITY, LINE_ITEM_PRICE)
PROTECTED_COLUMNS = {ORDER_ID, BUNDLE_ID, LINE_ITEM, QUANTITY, BUNDLE_COUNT}

CATEGORY_FRAME = "Frame"
CATEGORY_LENS = "Lens"
CATEGORY_COATING = "Coating"
CATEGORY_OTHER = "Other"
CATEGORIES = (CATEGORY_FRAME, CATEGORY_LENS, CATEGORY_COATING, CATEGORY_OTHER)

RX_COLUMN_PATTERN = r"\b(OD|OS|PD|Prism|ADD|Axis|Cylinder|Sphere|Pupillary|base)\b"
BUNDLE_SUFFIX_PATTERN = r"^(.*) \(Bundle (\d+)\)$"
ITEM_SEPARATOR = "; "

DROP_MODE_NONE = "none"
DROP_MODE_DEFAULT = "default"
DROP_MODE_CUSTOM = "custom"
DROP_MODES = (DROP_MODE_NONE, DROP_MODE_DEFAULT, DROP_MODE_CUSTOM)

# financial and internal export columns nobody needs on the one-row sheet
DEFAULT_DROP_COLUMNS = (
	"Subtotal",
	"Shipping",
	"Taxes",
	"Total",
	"Discount Code",
	"Discount Amount",
	"Shipping Method",
	"Currency",
	"Financial Status",
	"Fulfillment Status",
	"Paid at",
	"Fulfilled at",
	"Cancelled at",
	"Payment Method",
	"Payment Reference",
	"Refunded Amount",
	"Outstanding Balance",
	"Risk Level",
	"Source",
	"Tags",
	"Note Attributes",
	"Employee",
	"Location",
	"Device ID",
	"Receipt Number",
	"Vendor",
	"Id",
)

LABEL_MODE_BUNDLE = "bundle"
LABEL_MODE_ORDER = "order"
LABEL_MODES = (LABEL_MODE_BUNDLE, LABEL_MODE_ORDER)
MAX_LABELS_PER_REQUEST = 300

# candidate column names per label field, most preferred first
LABEL_FIELD_CANDIDATES = {
	"name": ("Name", "Shipping Name", "Billing Name", "Customer Name"),
	"prescription_type": ("Prescription Type", "Prescription", "Lens Type"),
	"index_lens": ("Index Lens",),
	"od_sph": ("OD_SPH", "OD SPH", "Sphere OD", "OD Sphere"),
	"od_cyl": ("OD_CYL", "OD CYL", "Cylinder OD", "OD Cylinder"),
	"od_axis": ("OD_AXIS", "OD AXIS", "Axis OD", "OD Axis"),
	"od_add": ("OD_ADD", "OD ADD", "ADD OD", "Add OD", "OD Add"),
	"os_sph": ("OS_SPH", "OS SPH", "Sphere OS", "OS Sphere"),
	"os_cyl": ("OS_CYL", "OS CYL", "Cylinder OS", "OS Cylinder"),
	"os_axis": ("OS_AXIS", "OS AXIS", "Axis OS", "OS Axis"),
	"os_add": ("OS_ADD", "OS ADD", "ADD OS", "Add OS", "OS Add"),
	"pd_od": ("PD_OD", "PD OD", "OD PD", "Pupillary Distance OD"),
	"pd_os": ("PD_OS", "PD OS", "OS PD", "Pupillary Distance OS"),
	"pd_single": ("Single PD", "Single_PD", "PD", "Pupillary Distance"),
}
# label fields always read at order level, never per bundle
ORDER_LABEL_FIELDS = ("name",)
DEFAULT_PRESCRIPTION_TYPE = "Single Vision"
DEFAULT_COATING = "Blue Light Blocking"
INDEX_LENS_TEXT = "index lens"
EMPTY_CELL_TEXT = "-"

CM_TO_POINTS = 28.3464566929
LABEL_WIDTH = 5.0 * CM_TO_POINTS
LABEL_HEIGHT = 4.0 * CM_TO_POINTS

SCRIPT_LATIN = "latin"
SCRIPT_JAPANESE = "jp"
SCRIPT_KOREAN = "kr"
SCRIPT_SIMPLIFIED_CHINESE = "sc"
SCRIPT_TRADITIONAL_CHINESE = "tc"
SCRIPT_OTHER = "other"
HAN_SCRIPTS = (SCRIPT_SIMPLIFIED_CHINESE, SCRIPT_TRADITIONAL_CHINESE)
FALLBACK_SCRIPTS = (SCRIPT_SIMPLIFIED_CHINESE, SCRIPT_JAPANESE, SCRIPT_KOREAN)

DEFAULT_FONT_LATIN = "Helvetica"
DEFAULT_FONT_DIR = "fonts"
FONT_FILES = {
	SCRIPT_JAPANESE: "NotoSansJP.ttf",
	SCRIPT_SIMPLIFIED_CHINESE: "NotoSansSC.ttf",
	SCRIPT_TRADITIONAL_CHINESE: "NotoSansTC.ttf",
	SCRIPT_KOREAN: "NotoSansKR.ttf",
}
FONT_NAMES = {
	SCRIPT_JAPANESE: "NotoSansJP",
	SCRIPT_SIMPLIFIED_CHINESE: "NotoSansSC",
	SCRIPT_TRADITIONAL_CHINESE: "NotoSansTC",
	SCRIPT_KOREAN: "NotoSansKR",
}

TRUNCATION_MARKER = "..."
HEADER_TEXT_SIZE = 7.0
HEADER_TEXT_MIN_SIZE = 5.0
BODY_TEXT_SIZE = 6.0
BODY_TEXT_MIN_SIZE = 4.0
LINE_LEADING = 1.1
COATING_MAX_LINES = 2
MARGIN_FRACTION = 0.03
VALUE_COLUMN_FRACTION = 0.45
TABLE_COLUMN_FRACTIONS = (0.16, 0.32, 0.48, 0.64, 0.80)
TABLE_ROW_LABEL_FRACTION = 0.06
TABLE_HEADERS = ("sph", "cyl", "axis", "add", "pd")
TABLE_CELL_FRACTION = 0.15
SEPARATOR_THICKNESS = 1.0
SEPARATOR_THIN_THICKNESS = 0.8

# fractions of label height measured from the bottom edge
ROW_BACKER = 0.92
ROW_NAME = 0.80
ROW_SEPARATOR_TOP = 0.74
ROW_PRESCRIPTION = 0.67
ROW_THICKNESS = 0.60
ROW_COATING = 0.53
ROW_SEPARATOR_MIDDLE = 0.42
ROW_TABLE_HEADER = 0.36
ROW_TABLE_OD = 0.285
ROW_TABLE_OS = 0.21
ROW_SEPARATOR_BOTTOM = 0.155
ROW_DATE = 0.085

PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10
DATE_FORMAT = "{month} {day}, {year}"


@dataclasses.dataclass
class DropConfig:
	mode: str = DROP_MODE_DEFAULT
	extra: frozenset[str] = frozenset()
	include_defaults: bool = True
	default_columns: tuple[str, ...] = DEFAULT_DROP_COLUMNS


@dataclasses.dataclass
class FontConfig:
	font_dir: str = DEFAULT_FONT_DIR
	latin_font: str = DEFAULT_FONT_LATIN
	han_script: str = SCRIPT_SIMPLIFIED_CHINESE


@dataclasses.dataclass
class LabelRange:
	start: int = 0
	limit: int | None = None


@dataclasses.dataclass
class RenderResult:
	total_labels: int
	start: int
	printed_labels: int
	pages: int
	fonts: dict[str, str]
