"""Reads the raw salary table from a CSV file."""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd

from ..exceptions import DataLoadError

logger = logging.getLogger("salary_fairness.loader")


def load_salary_data(
    path: Union[str, Path], required_columns: Optional[Iterable[str]] = None
) -> pd.DataFrame:
    """Load a comma-separated file with a header row into a DataFrame.

    Column types are inferred by pandas: fully numeric columns become numbers,
    everything else stays text. Extra columns are kept; selecting the fields the
    analysis needs is the cleaner's job.

    Args:
        path: Location of the CSV file.
        required_columns: Header names that must be present.

    Raises:
        FileNotFoundError: If the file does not exist.
        DataLoadError: If the file is empty, cannot be parsed, or lacks a
            required column.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Input data file not found: {path}")

    try:
        data = pd.read_csv(path)
    except pd.errors.EmptyDataError as e:
        raise DataLoadError(f"Input data file is empty: {path}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DataLoadError(f"Could not parse {path}: {e}") from e

    if required_columns is not None:
        missing = [col for col in required_columns if col not in data.columns]
        if missing:
            raise DataLoadError(
                f"Input data file {path} is missing required columns: {missing}"
            )

    logger.debug(
        f"Read {len(data)} rows from {path}",
        extra={"component": "loader", "stage": "data_loading", "rows": len(data)},
    )
    return data
