from typing import Any, Dict, List, Optional

import pandas as pd

from ..schema import Schema


class DataFrameBackend:
    def to_dataframe(self, rows: List[Dict[str, Any]], schema: Optional[Schema] = None) -> Any:
        raise NotImplementedError


class PandasBackend(DataFrameBackend):
    """Nested record and array fields stay as Python dicts and lists inside object columns."""
    def to_dataframe(self, rows: List[Dict[str, Any]], schema: Optional[Schema] = None) -> pd.DataFrame:
        columns = schema.field_names if schema is not None else None
        return pd.DataFrame(rows, columns=columns)
