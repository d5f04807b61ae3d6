"""
Order and bundle aggregation into a one-row-per-order wide table.
"""

# Standard Library
import dataclasses
import math
import re
import typing

# local repo modules
import order_label_converter as olc
import order_label_converter.columns
import order_label_converter.config
import order_label_converter.errors
import order_label_converter.resolve


ColumnSets = olc.columns.ColumnSets
DropConfig = olc.config.DropConfig
ValidationError = olc.errors.ValidationError
Row = olc.resolve.Row

cell_text = olc.resolve.cell_text
is_blank = olc.resolve.is_blank
bundle_column = olc.resolve.bundle_column
merge_first_non_empty = olc.resolve.merge_first_non_empty

ORDER_ID = olc.config.ORDER_ID
BUNDLE_ID = olc.config.BUNDLE_ID
LINE_ITEM = olc.config.LINE_ITEM
QUANTITY = olc.config.QUANTITY
BUNDLE_COUNT = olc.config.BUNDLE_COUNT
CATEGORIES = olc.config.CATEGORIES
CATEGORY_FRAME = olc.config.CATEGORY_FRAME
CATEGORY_LENS = olc.config.CATEGORY_LENS
CATEGORY_COATING = olc.config.CATEGORY_COATING
CATEGORY_OTHER = olc.config.CATEGORY_OTHER
ITEM_SEPARATOR = olc.config.ITEM_SEPARATOR

LENS_WORD_RE = re.compile(r"\blens\b", re.IGNORECASE)
BUNDLE_SUFFIX_RE = re.compile(olc.config.BUNDLE_SUFFIX_PATTERN)


@dataclasses.dataclass
class BundleRecord:
	bundle_id: str
	items: dict[str, list[str]] = dataclasses.field(
		default_factory=lambda: {category: [] for category in CATEGORIES}
	)
	rx: dict[str, typing.Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class OrderRecord:
	order_id: str
	fields: dict[str, typing.Any] = dataclasses.field(default_factory=dict)
	bundles: dict[str, BundleRecord] = dataclasses.field(default_factory=dict)


#============================================
def categorize(item: typing.Any) -> str:
	"""
	Assign a line item to a category by keyword.

	Checks run in order: coating, lens, frame. An item naming both a frame
	and a lens is a Lens.

	Args:
		item: Line item text.

	Returns:
		One of Frame, Lens, Coating, Other.
	"""
	text = "" if item is None else str(item).lower()
	if "coating" in text:
		return CATEGORY_COATING
	if "index lens" in text or "prescription lens" in text or LENS_WORD_RE.search(text):
		return CATEGORY_LENS
	if "frame" in text or "glasses style" in text:
		return CATEGORY_FRAME
	return CATEGORY_OTHER


#============================================
def parse_quantity(value: typing.Any) -> float:
	"""
	Parse a quantity cell, defaulting to 1.

	Args:
		value: Quantity cell.

	Returns:
		Quantity; 1 for blank, zero or non-numeric input.
	"""
	text = "" if value is None else str(value).strip()
	if "_" in text:
		return 1.0
	try:
		number = float(text)
	except (TypeError, ValueError):
		return 1.0
	if not math.isfinite(number) or number == 0:
		return 1.0
	return number


#============================================
def format_quantity(quantity: float) -> str:
	"""
	Format a quantity without a trailing ".0" for whole numbers.

	Args:
		quantity: Parsed quantity.

	Returns:
		Display string.
	"""
	if quantity.is_integer():
		return str(int(quantity))
	return repr(quantity)


#============================================
def item_display(item: typing.Any, quantity: typing.Any) -> str:
	"""
	Build the item text shown in a category list.

	Args:
		item: Line item text.
		quantity: Quantity cell.

	Returns:
		Item text, with " xN" appended when the quantity is not 1.
	"""
	text = "" if item is None else str(item)
	number = parse_quantity(quantity)
	if number == 1:
		return text
	return f"{text} x{format_quantity(number)}"


#============================================
def uniq_preserve_order(values: typing.Iterable[typing.Any]) -> list[str]:
	"""
	Drop blanks and repeated values, keeping first occurrences.

	Args:
		values: Item strings.

	Returns:
		Trimmed unique values in first-seen order.
	"""
	seen: set[str] = set()
	result: list[str] = []
	for value in values:
		if value is None:
			continue
		text = str(value).strip()
		if not text or text in seen:
			continue
		seen.add(text)
		result.append(text)
	return result


#============================================
def join_items(values: typing.Iterable[typing.Any]) -> str:
	"""
	Join a category list into one cell.
	"""
	return ITEM_SEPARATOR.join(uniq_preserve_order(values))


#============================================
def build_order_map(
	rows: typing.Iterable[Row],
	order_columns: typing.Iterable[str],
	bundle_columns: typing.Iterable[str],
) -> dict[str, OrderRecord]:
	"""
	Fold line item rows into orders and bundles in one pass.

	Order fields and bundle fields keep the first non-empty value seen.
	Item lists keep every entry; duplicates are removed when flattening.

	Args:
		rows: Line item rows.
		order_columns: Columns merged at order level.
		bundle_columns: Columns merged at bundle level.

	Returns:
		Orders keyed by Order ID, in first-seen order.
	"""
	order_columns = tuple(order_columns)
	bundle_columns = tuple(bundle_columns)
	orders: dict[str, OrderRecord] = {}
	for row in rows:
		order_id = cell_text(row, ORDER_ID)
		bundle_id = cell_text(row, BUNDLE_ID)

		order = orders.get(order_id)
		if order is None:
			order = OrderRecord(order_id=order_id)
			orders[order_id] = order
		merge_first_non_empty(order.fields, row, order_columns)

		bundle = order.bundles.get(bundle_id)
		if bundle is None:
			bundle = BundleRecord(bundle_id=bundle_id)
			order.bundles[bundle_id] = bundle

		item = row.get(LINE_ITEM)
		bundle.items[categorize(item)].append(item_display(item, row.get(QUANTITY)))
		merge_first_non_empty(bundle.rx, row, bundle_columns)
	return orders


#============================================
def sorted_bundles(order: OrderRecord) -> list[BundleRecord]:
	"""
	Order bundles by Bundle ID compared as strings.

	"10" sorts before "2"; numeric-looking IDs are not compared as numbers.

	Args:
		order: OrderRecord.

	Returns:
		Bundles in emission order.
	"""
	return sorted(order.bundles.values(), key=lambda bundle: bundle.bundle_id)


#============================================
def bundle_block_columns(rx_columns: typing.Iterable[str], index: int) -> list[str]:
	"""
	List the wide-table columns of one bundle block.

	Args:
		rx_columns: Rx columns in header order.
		index: 1-based bundle index.

	Returns:
		Column names for the block.
	"""
	columns = [bundle_column(BUNDLE_ID, index)]
	for category in CATEGORIES:
		columns.append(bundle_column(f"{category} Items", index))
	for column in rx_columns:
		columns.append(bundle_column(column, index))
	return columns


#============================================
def flatten_orders(
	orders: dict[str, OrderRecord],
	column_sets: ColumnSets,
) -> tuple[list[dict[str, str]], list[str]]:
	"""
	Flatten orders into wide rows, one per order.

	Args:
		orders: Orders from build_order_map.
		column_sets: Classified columns.

	Returns:
		Tuple of (rows, columns).
	"""
	rows: list[dict[str, str]] = []
	max_bundle_count = 1
	for order in orders.values():
		bundles = sorted_bundles(order)
		max_bundle_count = max(max_bundle_count, len(bundles))
		row_out: dict[str, str] = {
			ORDER_ID: order.order_id,
			BUNDLE_COUNT: str(len(bundles)),
		}
		for column in column_sets.order_level_columns:
			if column in order.fields:
				row_out[column] = order.fields[column]
		for index, bundle in enumerate(bundles, start=1):
			row_out[bundle_column(BUNDLE_ID, index)] = bundle.bundle_id
			for category in CATEGORIES:
				row_out[bundle_column(f"{category} Items", index)] = join_items(bundle.items[category])
			for column in column_sets.rx_columns:
				row_out[bundle_column(column, index)] = bundle.rx.get(column, "")
		rows.append(row_out)

	columns = [ORDER_ID, BUNDLE_COUNT, *column_sets.order_level_columns]
	for index in range(1, max_bundle_count + 1):
		columns.extend(bundle_block_columns(column_sets.rx_columns, index))
	return rows, columns


#============================================
def suppress_dropped(
	rows: list[dict[str, str]],
	columns: list[str],
	dropped: frozenset[str],
) -> tuple[list[dict[str, str]], list[str]]:
	"""
	Remove dropped columns and their "(Bundle N)" copies.

	Args:
		rows: Wide rows.
		columns: Wide column list.
		dropped: Base column names to remove.

	Returns:
		Tuple of (rows, columns) without dropped columns.
	"""
	if not dropped:
		return rows, columns
	removed: set[str] = set()
	for column in columns:
		base = column
		match = BUNDLE_SUFFIX_RE.match(column)
		if match:
			base = match.group(1)
		if base in dropped:
			removed.add(column)
	if not removed:
		return rows, columns
	kept_columns = [column for column in columns if column not in removed]
	kept_rows = [
		{key: value for key, value in row.items() if key not in removed}
		for row in rows
	]
	return kept_rows, kept_columns


#============================================
def aggregate(
	rows: list[Row],
	drop_config: DropConfig | None = None,
) -> tuple[list[dict[str, str]], list[str]]:
	"""
	Aggregate line item rows into one row per order.

	Args:
		rows: Parsed rows; the keys of the first row are the schema.
		drop_config: Optional column drop policy.

	Returns:
		Tuple of (output rows, ordered column list).
	"""
	if not rows:
		raise ValidationError("Empty CSV")
	header = list(rows[0].keys())
	olc.columns.require_columns(header)
	column_sets = olc.columns.classify_columns(header, drop_config)
	orders = build_order_map(rows, column_sets.order_level_columns, column_sets.rx_columns)
	out_rows, columns = flatten_orders(orders, column_sets)
	return suppress_dropped(out_rows, columns, column_sets.dropped)
