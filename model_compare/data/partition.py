# model_compare/data/partition.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Literal, Tuple

import numpy as np
import pandas as pd

from model_compare import logs
from model_compare.utils.errors import InvalidSchema, UserInputError

ColumnType = Literal["numeric", "categorical", "identifier"]


@dataclass(frozen=True)
class DatasetPartition:
    """
    DatasetPartition（FINAL / FROZEN）

    Semantics:
    - Immutable labeled table + per-column type schema
    - Row identity == DataFrame index inherited from the source table
    - `frame` always hands out a copy; the held table is never mutated
    """

    name: str
    _frame: pd.DataFrame
    schema: Dict[str, ColumnType]

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    @property
    def columns(self) -> List[str]:
        return list(self._frame.columns)

    @property
    def index(self) -> pd.Index:
        return self._frame.index

    def __len__(self) -> int:
        return len(self._frame)

    def has_column(self, column: str) -> bool:
        return column in self.schema

    def column_type(self, column: str) -> ColumnType:
        return self.schema[column]

    def select(self, columns: Iterable[str]) -> pd.DataFrame:
        return self._frame.loc[:, list(columns)].copy()

    def column(self, column: str) -> pd.Series:
        return self._frame[column].copy()

    def take(self, positions: np.ndarray, name: str) -> "DatasetPartition":
        return DatasetPartition(
            name=name,
            _frame=self._frame.iloc[positions].copy(),
            schema=dict(self.schema),
        )


class PartitionProvider:
    """
    PartitionProvider（FINAL）

    Responsibility:
    - load a labeled table (CSV / Parquet / in-memory DataFrame)
    - infer the column schema
    - deterministic train / test split
    """

    _READERS = {
        ".csv": pd.read_csv,
        ".parquet": pd.read_parquet,
        ".pq": pd.read_parquet,
    }

    def __init__(
        self,
        *,
        categorical: Iterable[str] = (),
        identifiers: Iterable[str] = (),
    ):
        self.categorical = list(categorical)
        self.identifiers = list(identifiers)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def load(self, source: str | Path | pd.DataFrame) -> DatasetPartition:
        if isinstance(source, pd.DataFrame):
            df = source.copy()
            name = "memory"
        else:
            df = self._read(Path(source))
            name = Path(source).stem

        missing = [c for c in self.categorical if c not in df.columns]
        if missing:
            raise InvalidSchema(f"categorical columns not in table: {missing}")

        schema: Dict[str, ColumnType] = {}
        for col in df.columns:
            col_type = self._infer_type(df[col], col)
            if col_type == "categorical":
                df[col] = _as_categorical(df[col])
            schema[col] = col_type

        logs.info(
            f"[PartitionProvider] loaded {name} rows={len(df)} "
            f"cols={len(df.columns)}"
        )
        return DatasetPartition(name=name, _frame=df, schema=schema)

    @staticmethod
    def split(
        table: DatasetPartition,
        ratio: float,
        seed: int,
    ) -> Tuple[DatasetPartition, DatasetPartition]:
        """
        Deterministic split.

        - train size = round(n * ratio)
        - same (table, ratio, seed) -> same rows, across runs
        - both partitions keep the original row order
        """
        if not 0.0 < ratio < 1.0:
            raise UserInputError(f"split ratio must be in (0, 1), got {ratio}")

        n = len(table)
        n_train = int(round(n * ratio))

        perm = np.random.default_rng(seed).permutation(n)
        train_pos = np.sort(perm[:n_train])
        test_pos = np.sort(perm[n_train:])

        train = table.take(train_pos, name=f"{table.name}:train")
        test = table.take(test_pos, name=f"{table.name}:test")

        logs.info(
            f"[PartitionProvider] split {table.name} ratio={ratio} seed={seed} "
            f"-> train={len(train)} test={len(test)}"
        )
        return train, test

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _read(self, path: Path) -> pd.DataFrame:
        reader = self._READERS.get(path.suffix.lower())
        if reader is None:
            raise UserInputError(
                f"unsupported source format {path.suffix!r} "
                f"(supported: {sorted(self._READERS)})"
            )
        if not path.exists():
            raise FileNotFoundError(f"source not found: {path}")
        return reader(path)

    def _infer_type(self, s: pd.Series, col: str) -> ColumnType:
        if col in self.identifiers:
            return "identifier"
        if col in self.categorical:
            return "categorical"
        if pd.api.types.is_bool_dtype(s):
            return "categorical"
        if pd.api.types.is_numeric_dtype(s):
            return "numeric"
        if (
            pd.api.types.is_object_dtype(s)
            or pd.api.types.is_string_dtype(s)
            or isinstance(s.dtype, pd.CategoricalDtype)
        ):
            return "categorical"
        # datetimes and the like are never model inputs
        return "identifier"


def _as_categorical(s: pd.Series) -> pd.Series:
    """Levels as plain strings (object dtype); missing values stay NaN."""
    values = [np.nan if pd.isna(v) else str(v) for v in s.tolist()]
    return pd.Series(values, index=s.index, name=s.name, dtype=object)
