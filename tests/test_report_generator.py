import csv
from datetime import date

import pytest

from partsflow.core.aggregation import dashboard_metrics
from partsflow.core.exceptions import ValidationError
from partsflow.models import Sale
from partsflow.utils.report_generator import (
    INVENTORY_FIELDS,
    SALES_FIELDS,
    build_report_frame,
    export_csv,
    generate_dashboard_report,
    report_summary,
)

from conftest import line, make_product


def test_inventory_frame_columns_and_stock_value(products):
    df = build_report_frame(products, INVENTORY_FIELDS)

    assert list(df.columns) == [
        "Name", "Brand", "Model", "Category", "Current Stock",
        "Min Stock", "Unit Cost", "Selling Price", "Stock Value",
    ]
    assert df.loc[0, "Stock Value"] == "1000.00"
    assert df.loc[1, "Current Stock"] == 3


def test_export_quotes_fields_with_commas(tmp_path):
    product = make_product("p1", name="Servo, 400W", specs='He said "fast"\nsecond line')
    path = export_csv([product], {"Name": "name", "Specs": "specs"}, tmp_path / "out" / "inventory.csv")

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))

    assert rows == [["Name", "Specs"], ["Servo, 400W", 'He said "fast"\nsecond line']]


def test_export_sales_report(tmp_path):
    sales = [Sale(id="s1", date=date(2026, 10, 3), customer="Acme Manufacturing",
                  items=(line("p1", 2, 10.0), line("p2", 1, 5.0)), total=25.0)]

    path = export_csv(sales, SALES_FIELDS, tmp_path / "sales-report.csv")

    assert path.read_text(encoding="utf-8").splitlines() == [
        "Date,Customer,Items Count,Total",
        "2026-10-03,Acme Manufacturing,2,25.00",
    ]


def test_export_with_no_rows_is_rejected(tmp_path):
    with pytest.raises(ValidationError, match="No data to export"):
        export_csv([], SALES_FIELDS, tmp_path / "empty.csv")

    assert not (tmp_path / "empty.csv").exists()


def test_dashboard_report_file(tmp_path, products):
    metrics = dashboard_metrics(products, [], [], date(2026, 10, 19))
    output = tmp_path / "reports" / "dashboard.txt"

    generate_dashboard_report(metrics, str(output))

    text = output.read_text(encoding="utf-8")
    assert "PARTSFLOW HUB - DASHBOARD" in text
    assert "Total stock: 13" in text
    assert "Proximity Sensor (Omron - E2E-X5): 0 / 0 min" in text


def test_report_summary_covers_selected_records(products):
    summary = report_summary("inventory", products[1:])

    assert summary == {
        "Products": "2",
        "Total inventory value": "$750.00",
        "Low stock items": "1",
    }

    sales = [Sale(id=f"s{i}", date=date(2026, 10, i), customer="Acme Manufacturing",
                  items=(line("p1", 1, 600.0),), total=600.0) for i in (1, 2)]
    assert report_summary("sales", sales) == {"Transactions": "2", "Total sales": "$1,200.00"}
    assert report_summary("purchases", []) == {"Transactions": "0", "Total purchases": "$0.00"}
