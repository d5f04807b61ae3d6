"""
Per-bundle views over raw detail tables and aggregated wide tables.
"""

# Standard Library
import dataclasses
import math
import re
import typing

# local repo modules
import order_label_converter as olc
import order_label_converter.aggregate
import order_label_converter.columns
import order_label_converter.config
import order_label_converter.errors
import order_label_converter.resolve


ValidationError = olc.errors.ValidationError
Row = olc.resolve.Row

cell_text = olc.resolve.cell_text
is_blank = olc.resolve.is_blank
bundle_column = olc.resolve.bundle_column
pick = olc.resolve.pick
pick_bundle = olc.resolve.pick_bundle

ORDER_ID = olc.config.ORDER_ID
BUNDLE_ID = olc.config.BUNDLE_ID
BUNDLE_COUNT = olc.config.BUNDLE_COUNT
CATEGORIES = olc.config.CATEGORIES
ITEM_SEPARATOR = olc.config.ITEM_SEPARATOR
LABEL_FIELD_CANDIDATES = olc.config.LABEL_FIELD_CANDIDATES
LABEL_MODE_ORDER = olc.config.LABEL_MODE_ORDER
ORDER_LABEL_FIELDS = olc.config.ORDER_LABEL_FIELDS

BUNDLE_SUFFIX_RE = re.compile(olc.config.BUNDLE_SUFFIX_PATTERN)


@dataclasses.dataclass
class BundleView:
	order_id: str
	bundle_id: str
	items: dict[str, list[str]]
	row: Row
	index: int | None = None

	def resolve(self, candidates: typing.Iterable[str]) -> typing.Any:
		"""
		Resolve a field for this bundle from candidate column names.
		"""
		if self.index is None:
			return pick(self.row, candidates)
		return pick_bundle(self.row, candidates, self.index)


#============================================
def is_aggregated_table(columns: typing.Iterable[str]) -> bool:
	"""
	Detect a one-row-per-order wide table from its header.

	Args:
		columns: Header column names.

	Returns:
		True when a Bundle Count or "(Bundle N)" column is present.
	"""
	for column in columns:
		if column == BUNDLE_COUNT or BUNDLE_SUFFIX_RE.match(column):
			return True
	return False


#============================================
def bundle_indices(columns: typing.Iterable[str]) -> dict[int, list[str]]:
	"""
	Group "(Bundle N)" columns by bundle index.

	Args:
		columns: Header column names.

	Returns:
		Column names per bundle index, indices ascending.
	"""
	grouped: dict[int, list[str]] = {}
	for column in columns:
		match = BUNDLE_SUFFIX_RE.match(column)
		if match:
			grouped.setdefault(int(match.group(2)), []).append(column)
	return dict(sorted(grouped.items()))


#============================================
def infer_bundle_count(row: Row, columns_by_index: dict[int, list[str]]) -> int:
	"""
	Work out how many bundles an aggregated row carries.

	A positive Bundle Count wins (floored); otherwise the highest bundle
	index with any non-empty cell counts. The result never exceeds the
	highest bundle block present in the header.

	Args:
		row: Aggregated row.
		columns_by_index: Output of bundle_indices.

	Returns:
		Bundle count, possibly 0.
	"""
	max_index = max(columns_by_index, default=0)
	try:
		declared = float(cell_text(row, BUNDLE_COUNT).strip())
	except ValueError:
		declared = 0.0
	if math.isfinite(declared) and declared > 0:
		return min(int(math.floor(declared)), max_index)
	highest = 0
	for index, columns in columns_by_index.items():
		if any(not is_blank(row.get(column)) for column in columns):
			highest = index
	return highest


#============================================
def split_items(value: typing.Any) -> list[str]:
	"""
	Split a joined category cell back into items.
	"""
	if is_blank(value):
		return []
	return [part.strip() for part in str(value).split(ITEM_SEPARATOR) if part.strip()]


#============================================
def aggregated_bundle_view(row: Row, index: int) -> BundleView:
	"""
	Build the view of one bundle block of an aggregated row.

	Args:
		row: Aggregated row.
		index: 1-based bundle index.

	Returns:
		BundleView resolving fields by suffix then plain name.
	"""
	items = {
		category: split_items(row.get(bundle_column(f"{category} Items", index)))
		for category in CATEGORIES
	}
	return BundleView(
		order_id=cell_text(row, ORDER_ID),
		bundle_id=cell_text(row, bundle_column(BUNDLE_ID, index)),
		items=items,
		row=row,
		index=index,
	)


#============================================
def iter_aggregated_views(
	rows: list[Row],
	columns: list[str],
	mode: str,
) -> typing.Iterator[BundleView]:
	"""
	Yield bundle views from an aggregated wide table.

	Args:
		rows: Aggregated rows.
		columns: Header column names.
		mode: "bundle" or "order".

	Yields:
		BundleView per label, in table order.
	"""
	columns_by_index = bundle_indices(columns)
	if not columns_by_index:
		raise ValidationError("Aggregated table has no (Bundle N) columns")
	if mode == LABEL_MODE_ORDER and 1 not in columns_by_index:
		raise ValidationError("Aggregated table has no (Bundle 1) columns for order mode")
	for row in rows:
		if mode == LABEL_MODE_ORDER:
			yield aggregated_bundle_view(row, 1)
			continue
		count = infer_bundle_count(row, columns_by_index)
		for index in range(1, count + 1):
			yield aggregated_bundle_view(row, index)


#============================================
def label_field_columns(columns: typing.Iterable[str]) -> list[str]:
	"""
	Select the columns label fields are resolved from.

	Args:
		columns: Header column names.

	Returns:
		Rx columns plus any column named in the label candidate table,
		except order-level label fields.
	"""
	wanted: set[str] = set()
	for field, candidates in LABEL_FIELD_CANDIDATES.items():
		if field not in ORDER_LABEL_FIELDS:
			wanted.update(candidates)
	return [
		column for column in columns
		if column in wanted or olc.columns.is_rx_column(column)
	]


#============================================
def iter_raw_views(
	rows: list[Row],
	columns: list[str],
	mode: str,
) -> typing.Iterator[BundleView]:
	"""
	Yield bundle views from a raw line item table.

	The whole table is folded first since bundles of one order may be
	spread anywhere in the file.

	Args:
		rows: Raw rows.
		columns: Header column names.
		mode: "bundle" or "order".

	Yields:
		BundleView per label, orders in first-seen order.
	"""
	olc.columns.require_columns(columns)
	column_sets = olc.columns.classify_columns(columns)
	bundle_columns = label_field_columns(columns)
	orders = olc.aggregate.build_order_map(rows, column_sets.order_level_columns, bundle_columns)
	for order in orders.values():
		bundles = olc.aggregate.sorted_bundles(order)
		if mode == LABEL_MODE_ORDER:
			bundles = bundles[:1]
		for bundle in bundles:
			merged = dict(order.fields)
			merged.update(bundle.rx)
			yield BundleView(
				order_id=order.order_id,
				bundle_id=bundle.bundle_id,
				items={
					category: olc.aggregate.uniq_preserve_order(values)
					for category, values in bundle.items.items()
				},
				row=merged,
			)


#============================================
def iter_bundle_views(rows: list[Row], mode: str) -> typing.Iterator[BundleView]:
	"""
	Yield bundle views from either a raw or an aggregated table.

	Args:
		rows: Parsed rows; the keys of the first row are the schema.
		mode: "bundle" or "order".

	Yields:
		BundleView per label.
	"""
	if not rows:
		raise ValidationError("Empty CSV")
	columns = list(rows[0].keys())
	if is_aggregated_table(columns):
		olc.columns.require_columns(columns, (ORDER_ID,))
		yield from iter_aggregated_views(rows, columns, mode)
		return
	yield from iter_raw_views(rows, columns, mode)
