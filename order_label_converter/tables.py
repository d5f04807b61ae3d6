"""
CSV input and output for order tables.
"""

# Standard Library
import csv
import io
import pathlib

# local repo modules
import order_label_converter as olc
import order_label_converter.errors


ValidationError = olc.errors.ValidationError

MAX_REPORTED_ERRORS = 3


#============================================
def parse_csv_text(text: str) -> list[dict[str, str]]:
	"""
	Parse CSV text with a header row into row dictionaries.

	Blank lines are skipped. Rows with more or fewer fields than the
	header are rejected.

	Args:
		text: CSV text.

	Returns:
		Rows keyed by header names, in file order.
	"""
	if text.startswith("\ufeff"):
		text = text[1:]
	reader = csv.DictReader(io.StringIO(text, newline=""))
	rows: list[dict[str, str]] = []
	errors: list[str] = []
	try:
		for row in reader:
			if None in row:
				errors.append(f"line {reader.line_num}: too many fields")
				continue
			if all(value is None or value == "" for value in row.values()):
				continue
			if any(value is None for value in row.values()):
				errors.append(f"line {reader.line_num}: too few fields")
				continue
			rows.append(row)
	except csv.Error as error:
		raise ValidationError(f"CSV parse error: {error}") from error
	if errors:
		raise ValidationError("CSV parse error: " + "; ".join(errors[:MAX_REPORTED_ERRORS]))
	if not rows:
		raise ValidationError("Empty CSV")
	return rows


#============================================
def read_rows(path: pathlib.Path) -> list[dict[str, str]]:
	"""
	Read a CSV file into row dictionaries.

	Args:
		path: CSV path.

	Returns:
		Parsed rows.
	"""
	if not path.is_file():
		raise ValidationError(f"Input not found: {path}")
	try:
		text = path.read_text(encoding="utf-8-sig")
	except UnicodeDecodeError as error:
		raise ValidationError(f"Input is not UTF-8 text: {path}") from error
	return parse_csv_text(text)


#============================================
def format_csv(rows: list[dict[str, str]], columns: list[str]) -> str:
	"""
	Serialize rows with a fixed column order; missing cells are empty.

	Args:
		rows: Output rows.
		columns: Column order.

	Returns:
		CSV text.
	"""
	buffer = io.StringIO()
	writer = csv.DictWriter(buffer, fieldnames=columns, restval="", extrasaction="ignore", lineterminator="\n")
	writer.writeheader()
	for row in rows:
		writer.writerow(row)
	return buffer.getvalue()


#============================================
def write_rows(path: pathlib.Path, rows: list[dict[str, str]], columns: list[str]) -> None:
	"""
	Write rows to a CSV file.
	"""
	with path.open("w", encoding="utf-8", newline="") as handle:
		handle.write(format_csv(rows, columns))
