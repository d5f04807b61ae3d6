"""
Column classification for raw order detail tables.
"""

# Standard Library
import dataclasses
import re

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.errors


DropConfig = olc.config.DropConfig
ValidationError = olc.errors.ValidationError

ID_COLUMNS = olc.config.ID_COLUMNS
LINE_LEVEL_COLUMNS = olc.config.LINE_LEVEL_COLUMNS
REQUIRED_COLUMNS = olc.config.REQUIRED_COLUMNS
PROTECTED_COLUMNS = olc.config.PROTECTED_COLUMNS
LENS_NOTES = olc.config.LENS_NOTES
DROP_MODE_NONE = olc.config.DROP_MODE_NONE
DROP_MODE_DEFAULT = olc.config.DROP_MODE_DEFAULT
DROP_MODE_CUSTOM = olc.config.DROP_MODE_CUSTOM
DROP_MODES = olc.config.DROP_MODES

RX_COLUMN_RE = re.compile(olc.config.RX_COLUMN_PATTERN, re.IGNORECASE)


@dataclasses.dataclass(frozen=True)
class ColumnSets:
	all_columns: tuple[str, ...]
	id_columns: tuple[str, ...]
	line_level_columns: tuple[str, ...]
	rx_columns: tuple[str, ...]
	order_level_columns: tuple[str, ...]
	dropped: frozenset[str] = frozenset()


#============================================
def is_rx_column(name: str) -> bool:
	"""
	Check whether a column holds prescription data.

	Args:
		name: Column name.

	Returns:
		True for Rx columns.
	"""
	return name == LENS_NOTES or RX_COLUMN_RE.search(name) is not None


#============================================
def require_columns(columns: list[str], required: tuple[str, ...] = REQUIRED_COLUMNS) -> None:
	"""
	Fail when a required column is absent from the header.

	Args:
		columns: Header column names.
		required: Columns that must be present.
	"""
	present = set(columns)
	for column in required:
		if column not in present:
			raise ValidationError(f"Missing required column: {column}")


#============================================
def resolve_drop_set(drop_config: DropConfig | None) -> frozenset[str]:
	"""
	Compute the set of column names to drop.

	Args:
		drop_config: Drop policy, None meaning drop nothing.

	Returns:
		Column names to remove; required columns are never included.
	"""
	if drop_config is None:
		return frozenset()
	mode = drop_config.mode.strip().lower()
	if mode not in DROP_MODES:
		raise ValidationError(f"Unknown drop mode: {drop_config.mode}")
	names: set[str] = set()
	if mode == DROP_MODE_DEFAULT:
		names.update(drop_config.default_columns)
	elif mode == DROP_MODE_CUSTOM:
		if drop_config.include_defaults:
			names.update(drop_config.default_columns)
		names.update(name.strip() for name in drop_config.extra if name.strip())
	return frozenset(names - PROTECTED_COLUMNS)


#============================================
def classify_columns(
	columns: list[str],
	drop_config: DropConfig | None = None,
) -> ColumnSets:
	"""
	Partition header columns for aggregation.

	The header of the first row is the schema for the whole file.

	Args:
		columns: Header column names in file order.
		drop_config: Optional drop policy.

	Returns:
		ColumnSets with order-level columns in header order.
	"""
	dropped = resolve_drop_set(drop_config)
	id_set = set(ID_COLUMNS)
	line_set = set(LINE_LEVEL_COLUMNS)
	rx_columns = [
		column for column in columns
		if is_rx_column(column) and column not in dropped
	]
	rx_set = set(rx_columns)
	order_level_columns = [
		column for column in columns
		if column not in id_set
		and column not in line_set
		and column not in rx_set
		and not is_rx_column(column)
		and column not in dropped
	]
	return ColumnSets(
		all_columns=tuple(columns),
		id_columns=tuple(column for column in ID_COLUMNS if column in columns),
		line_level_columns=tuple(column for column in LINE_LEVEL_COLUMNS if column in columns),
		rx_columns=tuple(rx_columns),
		order_level_columns=tuple(order_level_columns),
		dropped=dropped,
	)
