"""
CLI entry points for order aggregation and label PDFs.
"""

# Standard Library
import argparse
import pathlib
import sys
import tempfile
import time

# local repo modules
import order_label_converter as olc
import order_label_converter.aggregate
import order_label_converter.config
import order_label_converter.errors
import order_label_converter.labels
import order_label_converter.render
import order_label_converter.tables


DropConfig = olc.config.DropConfig
FontConfig = olc.config.FontConfig
LabelRange = olc.config.LabelRange
LabelToolError = olc.errors.LabelToolError
ValidationError = olc.errors.ValidationError

DROP_MODES = olc.config.DROP_MODES
DROP_MODE_DEFAULT = olc.config.DROP_MODE_DEFAULT
LABEL_MODES = olc.config.LABEL_MODES
LABEL_MODE_BUNDLE = olc.config.LABEL_MODE_BUNDLE
DEFAULT_FONT_DIR = olc.config.DEFAULT_FONT_DIR
DEFAULT_DROP_COLUMNS = olc.config.DEFAULT_DROP_COLUMNS
HAN_SCRIPTS = olc.config.HAN_SCRIPTS
SCRIPT_SIMPLIFIED_CHINESE = olc.config.SCRIPT_SIMPLIFIED_CHINESE
MAX_LABELS_PER_REQUEST = olc.config.MAX_LABELS_PER_REQUEST

EXIT_CODES = {
	"validation": 2,
	"resource": 3,
}


#============================================
def read_drop_list(path: str) -> tuple[str, ...]:
	"""
	Read a newline separated drop list, ignoring blanks and # comments.

	Args:
		path: Text file path.

	Returns:
		Column names.
	"""
	names: list[str] = []
	with open(path, "r", encoding="utf-8") as handle:
		for line in handle:
			name = line.strip()
			if not name or name.startswith("#"):
				continue
			names.append(name)
	return tuple(names)


#============================================
def build_drop_config(args: argparse.Namespace) -> DropConfig:
	"""
	Build the column drop policy from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		DropConfig.
	"""
	default_columns = DEFAULT_DROP_COLUMNS
	if args.drop_list:
		default_columns = read_drop_list(args.drop_list)
	return DropConfig(
		mode=args.drop_mode,
		extra=frozenset(args.drop_columns or ()),
		include_defaults=args.include_defaults,
		default_columns=default_columns,
	)


#============================================
def build_font_config(args: argparse.Namespace) -> FontConfig:
	"""
	Build font config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		FontConfig.
	"""
	return FontConfig(
		font_dir=args.font_dir,
		han_script=args.han_script,
	)


#============================================
def build_parser() -> argparse.ArgumentParser:
	"""
	Build the argument parser.

	Returns:
		ArgumentParser with aggregate, labels and merge commands.
	"""
	parser = argparse.ArgumentParser(description="Aggregate order exports and print prescription labels.")
	commands = parser.add_subparsers(dest="command", required=True)

	aggregate_parser = commands.add_parser("aggregate", help="One row per order CSV.")
	aggregate_parser.add_argument("input", help="Order detail CSV.")
	aggregate_parser.add_argument("-o", "--output", dest="output_path", required=True, help="Output CSV path.")
	drop_group = aggregate_parser.add_argument_group("Columns")
	drop_group.add_argument("--drop-mode", dest="drop_mode", choices=DROP_MODES, default=DROP_MODE_DEFAULT, help="Column drop policy.")
	drop_group.add_argument("--drop", dest="drop_columns", action="append", default=None, help="Extra column to drop (custom mode).")
	drop_group.add_argument("--drop-list", dest="drop_list", default=None, help="File replacing the built-in drop list.")
	drop_group.add_argument("--no-defaults", dest="include_defaults", action="store_false", help="Custom mode drops only --drop columns.")

	labels_parser = commands.add_parser("labels", help="Label PDF, one label per page.")
	labels_parser.add_argument("input", help="Order detail CSV or aggregated CSV.")
	output_group = labels_parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	behavior_group = labels_parser.add_argument_group("Behavior")
	behavior_group.add_argument("--mode", dest="mode", choices=LABEL_MODES, default=LABEL_MODE_BUNDLE, help="One label per bundle or per order.")
	behavior_group.add_argument("--font-dir", dest="font_dir", default=DEFAULT_FONT_DIR, help="Directory with Noto CJK fonts.")
	behavior_group.add_argument("--han-font", dest="han_script", choices=HAN_SCRIPTS, default=SCRIPT_SIMPLIFIED_CHINESE, help="Font used for Han characters.")
	behavior_group.add_argument("--date", dest="date_text", default=None, help="Date text printed on labels.")
	limit_group = labels_parser.add_argument_group("Limits")
	limit_group.add_argument("-s", "--start", dest="start", type=int, default=0, help="First label index.")
	limit_group.add_argument("-l", "--limit", dest="limit", type=int, default=None, help=f"Labels to print (1..{MAX_LABELS_PER_REQUEST}).")
	limit_group.add_argument("-b", "--batch-size", dest="batch_size", type=int, default=None, help="Render in batches and merge.")

	merge_parser = commands.add_parser("merge", help="Merge label PDFs in order.")
	merge_parser.add_argument("inputs", nargs="+", help="PDF files.")
	merge_parser.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")
	return parser


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	return build_parser().parse_args(argv)


#============================================
def run_aggregate(args: argparse.Namespace) -> None:
	"""
	Aggregate a detail CSV into one row per order.

	Args:
		args: Parsed argparse namespace.
	"""
	print("Order aggregation")
	print(f"Input CSV: {args.input}")
	print(f"Output CSV: {args.output_path}")
	drop_config = build_drop_config(args)
	print(f"Drop mode: {drop_config.mode}")

	start_time = time.perf_counter()
	rows = olc.tables.read_rows(pathlib.Path(args.input))
	print(f"Rows read: {len(rows)}")
	out_rows, columns = olc.aggregate.aggregate(rows, drop_config)
	olc.tables.write_rows(pathlib.Path(args.output_path), out_rows, columns)
	total_time = time.perf_counter() - start_time
	print(f"Orders written: {len(out_rows)}")
	print(f"Columns written: {len(columns)}")
	print(f"Timing: total={total_time:.2f}s")


#============================================
def run_labels(args: argparse.Namespace) -> None:
	"""
	Build labels from a CSV and write them to a PDF.

	Args:
		args: Parsed argparse namespace.
	"""
	print("Prescription label pipeline")
	print(f"Input CSV: {args.input}")
	print(f"Output PDF: {args.output_path}")
	print(f"Mode: {args.mode}")
	if args.limit is not None:
		print(f"Range: start={args.start} limit={args.limit}")
	if args.batch_size is not None:
		print(f"Batch size: {args.batch_size}")

	font_config = build_font_config(args)
	output_path = pathlib.Path(args.output_path)
	start_time = time.perf_counter()
	rows = olc.tables.read_rows(pathlib.Path(args.input))
	print(f"Rows read: {len(rows)}")

	results = []
	if args.batch_size is None:
		label_range = LabelRange(start=args.start, limit=args.limit)
		labels, total = olc.labels.build_labels(rows, args.mode, label_range, args.date_text)
		print(f"Labels found: {total}")
		result = olc.render.render_labels_to_pdf(
			labels, output_path, font_config, total_labels=total, start=args.start, verbose=True,
		)
		results.append(result)
	else:
		_labels, total = olc.labels.build_labels(rows, args.mode, LabelRange(start=0, limit=1), args.date_text)
		print(f"Labels found: {total}")
		with tempfile.TemporaryDirectory() as batch_dir:
			batch_paths: list[pathlib.Path] = []
			for window in olc.labels.iter_label_windows(total, args.batch_size):
				labels, _total = olc.labels.build_labels(rows, args.mode, window, args.date_text)
				batch_path = pathlib.Path(batch_dir) / f"labels_{window.start:06d}.pdf"
				result = olc.render.render_labels_to_pdf(
					labels, batch_path, font_config, total_labels=total, start=window.start,
				)
				results.append(result)
				batch_paths.append(batch_path)
				print(f"Batch written: start={window.start} labels={result.printed_labels}")
			pages = olc.render.merge_pdfs(batch_paths, output_path)
			print(f"Batches merged: {len(batch_paths)} ({pages} pages)")

	printed = sum(result.printed_labels for result in results)
	print(f"Labels printed: {printed}")
	if args.manifest_path:
		manifest_path = pathlib.Path(args.manifest_path)
		olc.render.write_manifest(manifest_path, pathlib.Path(args.input), args.mode, results, output_path)
		print(f"Manifest written: {manifest_path}")
	total_time = time.perf_counter() - start_time
	print(f"Timing: total={total_time:.2f}s")


#============================================
def run_merge(args: argparse.Namespace) -> None:
	"""
	Merge label PDFs into one document.

	Args:
		args: Parsed argparse namespace.
	"""
	paths = [pathlib.Path(entry) for entry in args.inputs]
	for path in paths:
		if not path.is_file():
			raise ValidationError(f"PDF not found: {path}")
	pages = olc.render.merge_pdfs(paths, pathlib.Path(args.output_path))
	print(f"Merged {len(paths)} files, {pages} pages: {args.output_path}")


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.

	Returns:
		Process exit code.
	"""
	args = parse_args(argv)
	commands = {
		"aggregate": run_aggregate,
		"labels": run_labels,
		"merge": run_merge,
	}
	try:
		commands[args.command](args)
	except LabelToolError as error:
		print(f"{error.kind}: {error.message}", file=sys.stderr)
		return EXIT_CODES.get(error.kind, 1)
	return 0
