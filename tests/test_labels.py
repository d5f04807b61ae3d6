# Standard Library
import datetime

import pytest

import order_label_converter.aggregate
import order_label_converter.config
import order_label_converter.errors
import order_label_converter.labels

import sample_rows


labels = order_label_converter.labels
LabelRange = order_label_converter.config.LabelRange
ValidationError = order_label_converter.errors.ValidationError


#============================================
def many_bundle_rows(count: int) -> list[dict[str, str]]:
	"""
	Build one raw row per bundle, all in one order.
	"""
	rows = []
	for index in range(count):
		rows.append(
			sample_rows.make_row(
				{
					"Order ID": "5000",
					"Bundle ID": f"B{index:03d}",
					"Line Item": "Standard Lens",
					"Quantity": "1",
				}
			)
		)
	return rows


#============================================
def test_format_label_date() -> None:
	"""
	Dates print as abbreviated month, day and year.
	"""
	assert labels.format_label_date(datetime.date(2026, 10, 19)) == "Oct 19, 2026"
	assert labels.format_label_date(datetime.date(2024, 3, 5)) == "Mar 5, 2024"


#============================================
def test_build_labels_bundle_mode() -> None:
	"""
	Bundle mode yields one label per bundle in a stable order.
	"""
	records, total = labels.build_labels(sample_rows.sample_rows(), "bundle", date_text="Oct 19, 2026")
	assert total == 3
	assert [(record.order_id, record.backer) for record in records] == [
		("1001", "10"),
		("1001", "2"),
		("1002", "7"),
	]
	assert all(record.date_text == "Oct 19, 2026" for record in records)


#============================================
def test_build_labels_order_mode() -> None:
	"""
	Order mode yields one label per order with the order id as backer.
	"""
	records, total = labels.build_labels(sample_rows.sample_rows(), " Order ", date_text="")
	assert total == 2
	assert [record.backer for record in records] == ["1001", "1002"]


#============================================
def test_build_labels_from_wide_table_matches_raw() -> None:
	"""
	Labels read from the aggregated table equal those from raw rows.
	"""
	rows = sample_rows.sample_rows()
	wide_rows, _ = order_label_converter.aggregate.aggregate(rows)
	raw_records, raw_total = labels.build_labels(rows, "bundle", date_text="x")
	wide_records, wide_total = labels.build_labels(wide_rows, "bundle", date_text="x")
	assert raw_total == wide_total
	assert raw_records == wide_records


#============================================
def test_pagination_is_gapless() -> None:
	"""
	Adjacent windows concatenate to the full label sequence.
	"""
	rows = many_bundle_rows(7)
	full, total = labels.build_labels(rows, "bundle", date_text="")
	assert total == 7
	paged = []
	for window in labels.iter_label_windows(total, 3):
		records, window_total = labels.build_labels(rows, "bundle", window, date_text="")
		assert window_total == total
		paged.extend(records)
	assert [record.backer for record in paged] == [record.backer for record in full]


#============================================
def test_window_bounds() -> None:
	"""
	A window clips at the end; start at the end gives no labels.
	"""
	rows = many_bundle_rows(5)
	records, total = labels.build_labels(rows, "bundle", LabelRange(start=3, limit=10), date_text="")
	assert total == 5
	assert [record.backer for record in records] == ["B003", "B004"]
	records, _ = labels.build_labels(rows, "bundle", LabelRange(start=5, limit=10), date_text="")
	assert records == []


#============================================
def test_start_past_total_is_error() -> None:
	with pytest.raises(ValidationError, match="exceeds total"):
		labels.build_labels(many_bundle_rows(2), "bundle", LabelRange(start=3), date_text="")


#============================================
@pytest.mark.parametrize("limit", [0, -1, 301])
def test_invalid_limit(limit) -> None:
	"""
	Limits outside 1..300 are rejected.
	"""
	with pytest.raises(ValidationError, match="Invalid limit"):
		labels.build_labels(many_bundle_rows(2), "bundle", LabelRange(start=0, limit=limit))


#============================================
def test_invalid_start_and_mode() -> None:
	with pytest.raises(ValidationError, match="Invalid start"):
		labels.build_labels(many_bundle_rows(2), "bundle", LabelRange(start=-1))
	with pytest.raises(ValidationError, match="Unknown label mode"):
		labels.build_labels(many_bundle_rows(2), "sheet")


#============================================
def test_default_date_is_today() -> None:
	records, _ = labels.build_labels(many_bundle_rows(1), "bundle")
	assert records[0].date_text == labels.format_label_date(datetime.date.today())


#============================================
def test_iter_label_windows() -> None:
	"""
	Windows cover [0, total) in order.
	"""
	windows = list(labels.iter_label_windows(7, 3))
	assert [(window.start, window.limit) for window in windows] == [(0, 3), (3, 3), (6, 3)]
	assert list(labels.iter_label_windows(0, 3)) == []
	with pytest.raises(ValidationError, match="Invalid batch size"):
		list(labels.iter_label_windows(7, 0))
