# utils/helpers.py
import uuid
import datetime
from pathlib import Path
from typing import Dict, Optional
import pandas as pd
from partsflow.models import Product

UNKNOWN_PRODUCT = "Unknown Product"

def read_data(file_path):
    """
    Reads a CSV or Excel file into a pandas DataFrame,
    skipping any initial blank rows before the header.

    Args:
        file_path (str): Path to the input file (CSV or XLSX).

    Returns:
        pd.DataFrame: Loaded data.

    Raises:
        ValueError: If file type is unsupported.
    """
    path = Path(file_path)
    ext = path.suffix.lower()

    def find_header_row_xlsx(path):
        # Scan first 20 rows to find first non-empty row with header columns
        temp_df = pd.read_excel(path, nrows=20, header=None, engine='openpyxl')
        for idx, row in temp_df.iterrows():
            if row.dropna().shape[0] > 1:  # heuristic: more than 1 non-empty cell = header
                return idx
        return 0

    def find_header_row_csv(path):
        # For CSV, read lines until first line with >1 non-empty column
        with open(path, 'r', encoding='utf-8') as f:
            for idx, line in enumerate(f):
                if len([c for c in line.strip().split(',') if c]) > 1:
                    return idx
        return 0

    if ext == ".csv":
        header_row = find_header_row_csv(path)
        df = pd.read_csv(path, header=header_row, dtype=str, keep_default_na=False)
    elif ext in (".xlsx", ".xls"):
        header_row = find_header_row_xlsx(path)
        df = pd.read_excel(path, header=header_row, dtype=str, engine='openpyxl').fillna('')
    else:
        raise ValueError("Unsupported file type. Use .csv or .xlsx")

    return df

def generate_id():
    return str(uuid.uuid4())

def today():
    return datetime.date.today()

def product_label(products_by_id: Dict[str, Product], product_id: Optional[str]) -> str:
    """Display name for a product reference; deleted products are not an error."""
    product = products_by_id.get(product_id)
    return product.label if product else UNKNOWN_PRODUCT
