import os
from typing import Optional
import pandas as pd

from .errors import DataError
from .schema import MISSING_MARKER, REQUIRED_COLS
from .utils.logger import get_logger


class DataLoader:
    """Loads the stroke CSV dataset and optionally samples rows."""

    def __init__(self, path: str, sample_size: Optional[int] = None, random_state: int = 42):
        self.path = path
        self.sample_size = sample_size
        self.random_state = random_state
        self.logger = get_logger(self.__class__.__name__)

    def load(self) -> pd.DataFrame:
        if not os.path.exists(self.path):
            raise DataError(f"Dataset not found: {self.path}")

        df = pd.read_csv(self.path, na_values=[MISSING_MARKER])

        missing = [col for col in REQUIRED_COLS if col not in df.columns]
        if missing:
            raise DataError(f"Dataset is missing required columns: {missing}")

        if self.sample_size:
            df = df.sample(self.sample_size, random_state=self.random_state)

        self.logger.info(f"Loaded {self.path}: {df.shape[0]:,} rows x {df.shape[1]} cols")
        return df
