from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from tqdm.auto import tqdm

from partsflow.core.exceptions import FileProcessingError, ValidationError
from partsflow.core.inventory_service import InventoryService
from partsflow.models import Product
from partsflow.utils.helpers import generate_id, read_data
from partsflow.utils.logger import get_logger

logger = get_logger(__name__)

@dataclass
class ImportStats:
    """Track catalog import statistics."""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    total_input_records: int = 0
    successful_records: int = 0
    skipped_records: int = 0
    error_records: int = 0

    def __post_init__(self):
        if self.start_time is None:
            self.start_time = datetime.now()

    def finish(self):
        """Mark processing as finished."""
        self.end_time = datetime.now()

    @property
    def duration(self) -> Optional[float]:
        """Get processing duration in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    @property
    def success_rate(self) -> float:
        """Calculate success rate percentage."""
        if self.total_input_records == 0:
            return 0.0
        return (self.successful_records / self.total_input_records) * 100

    def log_summary(self):
        logger.info("=" * 60)
        logger.info("CATALOG IMPORT SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Duration: {self.duration:.2f}s" if self.duration else "Duration: N/A")
        logger.info(f"Input records: {self.total_input_records:,}")
        logger.info(f"Imported: {self.successful_records:,}")
        logger.info(f"Skipped: {self.skipped_records:,}")
        logger.info(f"Errors: {self.error_records:,}")
        logger.info(f"Success rate: {self.success_rate:.2f}%")
        logger.info("=" * 60)


class CatalogImporter:
    """
    Bulk-loads products from a CSV or Excel catalog sheet.

    Handles:
    - Header detection and column mapping
    - Field normalization through the same form rules as manual entry
    - Skipping blank rows and counting invalid ones
    """

    COLUMN_MAP = {
        'Name': 'name',
        'Brand': 'brand',
        'Model': 'model',
        'Category': 'category',
        'Quantity': 'quantity',
        'Min Stock': 'min_stock',
        'Unit Cost': 'unit_cost',
        'Selling Price': 'selling_price',
        'Specs': 'specs',
    }

    def __init__(self, service: InventoryService):
        self.service = service
        self.logger = get_logger(self.__class__.__name__)
        self.stats = ImportStats()

    def get_required_columns(self) -> List[str]:
        return ['Name', 'Brand', 'Model', 'Category']

    def validate_input_data(self, df: pd.DataFrame) -> bool:
        """Validate catalog sheet structure."""
        missing_cols = [col for col in self.get_required_columns() if col not in df.columns]

        if missing_cols:
            self.logger.error(f"Missing required columns: {missing_cols}")
            return False

        if df.empty:
            self.logger.error("Input dataframe is empty")
            return False

        self.logger.info("Input data validation passed")
        return True

    def load_and_validate_file(self, file_path: str) -> pd.DataFrame:
        """Load file and perform basic validation."""
        self.logger.info(f"📂 Loading catalog from: {file_path}")

        if not Path(file_path).exists():
            raise FileProcessingError(f"File not found: {file_path}")

        try:
            df = read_data(file_path)
        except (ValueError, OSError) as e:
            self.logger.error(f"❌ Error loading file {file_path}: {e}")
            raise FileProcessingError(f"Failed to load {file_path}: {e}") from e

        df.columns = [str(c).strip() for c in df.columns]
        self.stats.total_input_records = len(df)
        self.logger.info(f"✅ Loaded {len(df):,} records from {Path(file_path).name}")

        if not self.validate_input_data(df):
            raise FileProcessingError(f"{file_path} is not a valid catalog sheet")

        return df

    def process_row(self, row: pd.Series) -> Optional[Product]:
        """Turn one sheet row into a product, or None for a blank row."""
        form: Dict[str, Any] = {
            field: row.get(column) for column, field in self.COLUMN_MAP.items()
        }
        if not any(str(form.get(name) or '').strip() for name in ('name', 'brand', 'model')):
            return None
        return self.service.product_from_form(generate_id(), form)

    def run_import(self, file_path: str) -> ImportStats:
        """
        Import a catalog file into the store.

        Args:
            file_path: Path to a .csv or .xlsx sheet

        Returns:
            ImportStats with per-row outcomes
        """
        self.stats = ImportStats()
        df = self.load_and_validate_file(file_path)

        products: List[Product] = []
        for idx, row in tqdm(df.iterrows(), total=len(df), desc="Importing catalog", unit="row"):
            try:
                product = self.process_row(row)
            except ValidationError as e:
                self.logger.warning(f"⚠️  Row {idx} rejected: {e}")
                self.stats.error_records += 1
                continue

            if product is None:
                self.stats.skipped_records += 1
            else:
                products.append(product)
                self.stats.successful_records += 1

        self.service.add_products(products)
        self.stats.finish()
        self.stats.log_summary()
        return self.stats
