import pytest

import order_label_converter.columns
import order_label_converter.config
import order_label_converter.errors
import order_label_converter.resolve

import sample_rows


columns = order_label_converter.columns
resolve = order_label_converter.resolve
DropConfig = order_label_converter.config.DropConfig


#============================================
@pytest.mark.parametrize(
	"name, expected",
	[
		("Sphere OD", True),
		("OS_SPH", False),
		("od sph", True),
		("Pupillary Distance", True),
		("Prism Base", True),
		("Add OS", True),
		("Lens Notes", True),
		("Order ID", False),
		("Address", False),
		("Prescription Type", False),
		("Database", False),
	],
)
def test_is_rx_column(name, expected) -> None:
	"""
	Rx columns match whole words, case-insensitive, plus Lens Notes.
	"""
	assert columns.is_rx_column(name) is expected


#============================================
def test_classify_sample_header() -> None:
	"""
	The sample header splits into id, line, Rx and order-level columns.
	"""
	column_sets = columns.classify_columns(sample_rows.HEADER)
	assert column_sets.id_columns == ("Order ID", "Bundle ID")
	assert column_sets.line_level_columns == ("Line Item", "Quantity", "Line Item Price")
	assert column_sets.rx_columns == ("Sphere OD", "Sphere OS", "Axis OD", "PD", "Lens Notes")
	assert column_sets.order_level_columns == ("Name", "Email", "Total", "Prescription Type")


#============================================
def test_classify_without_rx_columns() -> None:
	"""
	A header with no Rx columns is valid.
	"""
	header = ["Order ID", "Bundle ID", "Line Item", "Quantity", "Name"]
	column_sets = columns.classify_columns(header)
	assert column_sets.rx_columns == ()
	assert column_sets.order_level_columns == ("Name",)


#============================================
def test_drop_sets() -> None:
	"""
	Drop modes resolve to the expected name sets.
	"""
	assert columns.resolve_drop_set(None) == frozenset()
	assert columns.resolve_drop_set(DropConfig(mode="none")) == frozenset()
	default_set = columns.resolve_drop_set(DropConfig(mode="default"))
	assert "Total" in default_set
	custom_only = columns.resolve_drop_set(
		DropConfig(mode="custom", extra=frozenset({"Email", " ", "Bundle ID"}), include_defaults=False)
	)
	assert custom_only == frozenset({"Email"})
	replaced = columns.resolve_drop_set(DropConfig(mode="default", default_columns=("Email",)))
	assert replaced == frozenset({"Email"})


#============================================
def test_unknown_drop_mode() -> None:
	"""
	An unknown mode is a validation error.
	"""
	with pytest.raises(order_label_converter.errors.ValidationError):
		columns.resolve_drop_set(DropConfig(mode="everything"))


#============================================
def test_drop_applies_to_rx_and_order_columns() -> None:
	"""
	Dropped names leave both the Rx and order-level sets.
	"""
	drop_config = DropConfig(mode="custom", extra=frozenset({"PD", "Email"}), include_defaults=False)
	column_sets = columns.classify_columns(sample_rows.HEADER, drop_config)
	assert "PD" not in column_sets.rx_columns
	assert "Email" not in column_sets.order_level_columns
	assert column_sets.dropped == frozenset({"PD", "Email"})


#============================================
def test_pick_first_non_empty() -> None:
	"""
	Candidates resolve in order, skipping blanks; no fuzzy matching.
	"""
	row = {"OD_SPH": "  ", "OD SPH": "-1.25", "Sphere OD": "-9"}
	assert resolve.pick(row, ["OD_SPH", "OD SPH", "Sphere OD"]) == "-1.25"
	assert resolve.pick(row, ["od sph"]) == ""
	assert resolve.pick({}, ["OD_SPH"]) == ""
	assert resolve.pick({"PD": None}, ["PD"]) == ""


#============================================
def test_pick_bundle_suffix_then_plain() -> None:
	"""
	Bundle lookup tries the suffixed column before the plain one.
	"""
	row = {
		"Name": "Ada",
		"Sphere OD (Bundle 2)": "-2",
		"Sphere OD": "-5",
		"OD_SPH (Bundle 2)": "",
	}
	assert resolve.pick_bundle(row, ["OD_SPH", "Sphere OD"], 2) == "-2"
	assert resolve.pick_bundle(row, ["Sphere OD"], 1) == "-5"
	assert resolve.pick_bundle(row, ["Name"], 3) == "Ada"
	assert resolve.pick_bundle(row, ["Missing"], 1) == ""


#============================================
def test_merge_first_non_empty() -> None:
	"""
	Only unfilled fields take new values.
	"""
	target = {"A": "kept"}
	resolve.merge_first_non_empty(target, {"A": "new", "B": " ", "C": "c"}, ["A", "B", "C"])
	assert target == {"A": "kept", "C": "c"}
	resolve.merge_first_non_empty(target, {"B": "b"}, ["B"])
	assert target["B"] == "b"
