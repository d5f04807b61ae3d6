"""
Field resolution over rows with loosely named columns.
"""

# Standard Library
import typing


Row = typing.Mapping[str, typing.Any]


#============================================
def cell_text(row: Row, key: str) -> str:
	"""
	Read a cell as a string.

	Args:
		row: Row mapping.
		key: Column name.

	Returns:
		Cell value as a string, empty when missing.
	"""
	value = row.get(key)
	if value is None:
		return ""
	return str(value)


#============================================
def is_blank(value: typing.Any) -> bool:
	"""
	Check whether a value is missing or whitespace only.

	Args:
		value: Cell value.

	Returns:
		True if the value carries no text.
	"""
	if value is None:
		return True
	return str(value).strip() == ""


#============================================
def bundle_column(name: str, index: int) -> str:
	"""
	Build the per-bundle column name used by the wide table.

	Args:
		name: Base column name.
		index: 1-based bundle index.

	Returns:
		Column name like "Sphere OD (Bundle 2)".
	"""
	return f"{name} (Bundle {index})"


#============================================
def pick(row: Row, candidates: typing.Iterable[str]) -> typing.Any:
	"""
	Return the first non-empty value among candidate columns.

	Args:
		row: Row mapping.
		candidates: Column names, most preferred first.

	Returns:
		First non-empty value, or "" when none match.
	"""
	for key in candidates:
		value = row.get(key)
		if not is_blank(value):
			return value
	return ""


#============================================
def pick_bundle(row: Row, candidates: typing.Iterable[str], index: int) -> typing.Any:
	"""
	Resolve a field from one bundle block of an aggregated row.

	Each candidate is tried with the "(Bundle i)" suffix first and then
	under its plain name before moving to the next candidate.

	Args:
		row: Aggregated row mapping.
		candidates: Column names, most preferred first.
		index: 1-based bundle index.

	Returns:
		First non-empty value, or "" when none match.
	"""
	for key in candidates:
		value = pick(row, (bundle_column(key, index), key))
		if value != "":
			return value
	return ""


#============================================
def merge_first_non_empty(
	target: dict[str, typing.Any],
	row: Row,
	columns: typing.Iterable[str],
) -> None:
	"""
	Copy values into target for columns it has not filled yet.

	Args:
		target: Accumulated field map, updated in place.
		row: Source row.
		columns: Columns to scan.
	"""
	for column in columns:
		if not is_blank(target.get(column)):
			continue
		value = row.get(column)
		if not is_blank(value):
			target[column] = value
