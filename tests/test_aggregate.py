import pytest

import order_label_converter.aggregate
import order_label_converter.config
import order_label_converter.errors

import sample_rows


aggregate = order_label_converter.aggregate


#============================================
def aggregate_sample(drop_config=None) -> tuple[list[dict[str, str]], list[str]]:
	"""
	Aggregate the shared sample rows.
	"""
	return aggregate.aggregate(sample_rows.sample_rows(), drop_config)


#============================================
@pytest.mark.parametrize(
	"item, expected",
	[
		("Blue Light Coating", "Coating"),
		("1.67 Index Lens", "Lens"),
		("Premium Frame", "Frame"),
		("Lens Cleaning Cloth", "Lens"),
		("Frame with prescription lens", "Lens"),
		("Lens coating upgrade", "Coating"),
		("Glasses Style: Round", "Frame"),
		("Lenses case", "Other"),
		("Gift Box", "Other"),
		("", "Other"),
		(None, "Other"),
	],
)
def test_categorize_cascade(item, expected) -> None:
	"""
	Coating wins over lens, lens wins over frame.
	"""
	assert aggregate.categorize(item) == expected


#============================================
@pytest.mark.parametrize(
	"quantity, expected",
	[
		("1", "Premium Frame"),
		("3", "Premium Frame x3"),
		("3.0", "Premium Frame x3"),
		("2.5", "Premium Frame x2.5"),
		("", "Premium Frame"),
		("abc", "Premium Frame"),
		(None, "Premium Frame"),
		("0", "Premium Frame"),
		("1_5", "Premium Frame"),
	],
)
def test_item_display_quantity(quantity, expected) -> None:
	"""
	Quantity 1, blank and non-numeric quantities show the bare item.
	"""
	assert aggregate.item_display("Premium Frame", quantity) == expected


#============================================
def test_uniq_preserve_order() -> None:
	"""
	Blanks go, duplicates keep their first position.
	"""
	values = ["b", " a ", "", "   ", None, "b", "a", "c"]
	assert aggregate.uniq_preserve_order(values) == ["b", "a", "c"]


#============================================
def test_column_order() -> None:
	"""
	Base columns first, then one block per bundle index.
	"""
	_rows, columns = aggregate_sample()
	block_1 = [
		"Bundle ID (Bundle 1)",
		"Frame Items (Bundle 1)",
		"Lens Items (Bundle 1)",
		"Coating Items (Bundle 1)",
		"Other Items (Bundle 1)",
		"Sphere OD (Bundle 1)",
		"Sphere OS (Bundle 1)",
		"Axis OD (Bundle 1)",
		"PD (Bundle 1)",
		"Lens Notes (Bundle 1)",
	]
	block_2 = [column.replace("(Bundle 1)", "(Bundle 2)") for column in block_1]
	assert columns == [
		"Order ID",
		"Bundle Count",
		"Name",
		"Email",
		"Total",
		"Prescription Type",
		*block_1,
		*block_2,
	]


#============================================
def test_bundle_ids_sort_as_strings() -> None:
	"""
	Bundle IDs compare as strings: "10" is Bundle 1 and "2" is Bundle 2.

	This matches the shipped behavior even though numeric IDs of
	different widths end up out of numeric order.
	"""
	rows, _columns = aggregate_sample()
	order = rows[0]
	assert order["Bundle Count"] == "2"
	assert order["Bundle ID (Bundle 1)"] == "10"
	assert order["Bundle ID (Bundle 2)"] == "2"


#============================================
def test_bundle_contents() -> None:
	"""
	Items are categorized and deduplicated; Rx values are first non-empty.
	"""
	rows, _columns = aggregate_sample()
	order = rows[0]
	assert order["Coating Items (Bundle 1)"] == "Blue Light Coating"
	assert order["Sphere OD (Bundle 1)"] == "+0.25"
	assert order["Frame Items (Bundle 2)"] == "Premium Frame"
	assert order["Lens Items (Bundle 2)"] == "1.67 Index Lens"
	assert order["Sphere OD (Bundle 2)"] == "-2"
	assert order["Sphere OS (Bundle 2)"] == "-1.5"
	assert order["PD (Bundle 2)"] == "62"
	assert order["Lens Notes (Bundle 2)"] == ""


#============================================
def test_order_fields_first_write_wins() -> None:
	"""
	A later non-empty Name does not replace the first one.
	"""
	rows, _columns = aggregate_sample()
	assert rows[0]["Name"] == "Ada Lovelace"
	assert rows[0]["Email"] == "ada@example.com"
	assert rows[0]["Prescription Type"] == "Progressive"


#============================================
def test_short_orders_leave_blocks_missing() -> None:
	"""
	Orders with fewer bundles have no cells for unused blocks.
	"""
	rows, _columns = aggregate_sample()
	order = rows[1]
	assert order["Order ID"] == "1002"
	assert order["Bundle Count"] == "1"
	assert order["Lens Items (Bundle 1)"] == "Lens Cleaning Cloth x3"
	assert order["Other Items (Bundle 1)"] == "Gift Box"
	assert order["Lens Notes (Bundle 1)"] == "thin edges"
	assert "Bundle ID (Bundle 2)" not in order


#============================================
def test_orders_keep_first_seen_order() -> None:
	"""
	Orders are emitted in the order their first row appears.
	"""
	rows, _columns = aggregate_sample()
	assert [row["Order ID"] for row in rows] == ["1001", "1002"]


#============================================
def test_default_drop_removes_financial_columns() -> None:
	"""
	The default drop list removes Total but keeps everything else.
	"""
	drop_config = order_label_converter.config.DropConfig(mode="default")
	rows, columns = aggregate_sample(drop_config)
	assert "Total" not in columns
	assert "Total" not in rows[0]
	assert "Email" in columns


#============================================
def test_no_drop_keeps_all_columns() -> None:
	"""
	Mode none keeps every order-level column.
	"""
	drop_config = order_label_converter.config.DropConfig(mode="none", extra=frozenset({"Email"}))
	rows, columns = aggregate_sample(drop_config)
	assert "Total" in columns
	assert "Email" in columns
	assert rows[0]["Total"] == "120.00"


#============================================
def test_custom_drop_suppresses_bundle_columns() -> None:
	"""
	Custom names drop order-level, Rx and derived bundle columns.
	"""
	drop_config = order_label_converter.config.DropConfig(
		mode="custom",
		extra=frozenset({"Email", "Lens Notes", "Other Items", "Order ID"}),
		include_defaults=False,
	)
	rows, columns = aggregate_sample(drop_config)
	assert "Email" not in columns
	assert "Total" in columns
	assert "Order ID" in columns
	assert not [column for column in columns if column.startswith("Lens Notes")]
	assert not [column for column in columns if column.startswith("Other Items")]
	assert "Other Items (Bundle 1)" not in rows[1]


#============================================
def test_custom_drop_unions_defaults() -> None:
	"""
	Custom mode adds caller names to the default list.
	"""
	drop_config = order_label_converter.config.DropConfig(mode="custom", extra=frozenset({"Email"}))
	_rows, columns = aggregate_sample(drop_config)
	assert "Email" not in columns
	assert "Total" not in columns


#============================================
def test_empty_input_rejected() -> None:
	"""
	No rows is a validation error.
	"""
	with pytest.raises(order_label_converter.errors.ValidationError):
		aggregate.aggregate([])


#============================================
def test_missing_bundle_id_rejected() -> None:
	"""
	A header without Bundle ID fails and names the column.
	"""
	rows = sample_rows.sample_rows()
	for row in rows:
		del row["Bundle ID"]
	with pytest.raises(order_label_converter.errors.ValidationError) as excinfo:
		aggregate.aggregate(rows)
	assert "Bundle ID" in str(excinfo.value)
	assert excinfo.value.kind == "validation"


#============================================
def test_schema_comes_from_first_row() -> None:
	"""
	Keys that only appear in later rows are ignored.
	"""
	rows = sample_rows.sample_rows()
	rows[1]["Late Column"] = "surprise"
	_out_rows, columns = aggregate.aggregate(rows)
	assert "Late Column" not in columns
