"""
DataSource: named numeric columns for model building.

A DataSource only knows that it holds data; it has no idea which column
is the response. Design (pylm.regression.design) picks the response and
predictors out of it, either by explicit column names or from a formula.

Usage:
    from pylm import DataSource

    ds = DataSource.from_file("mtcars.csv")
    ds = DataSource.from_dataframe(df)
    ds = DataSource.from_arrays(X=X, y=y)

    ds['mpg']      # float64 array
    ds.keys()      # frozenset({'mpg', 'disp', ...})
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from pylm.core.exceptions import ValidationError

if TYPE_CHECKING:
    import pandas as pd


def _numeric(name: str, values: Any) -> NDArray[np.floating[Any]]:
    try:
        return np.asarray(values, dtype=np.float64)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"column {name!r} is not numeric: {e}") from e


def _n_rows(columns: Mapping[str, NDArray]) -> int:
    """Row count of the first non-scalar column (0 if there is none)."""
    return next((arr.shape[0] for arr in columns.values() if arr.ndim > 0), 0)


@dataclass(frozen=True)
class DataSource:
    """
    Immutable collection of float64 columns keyed by name.

    Build one with the from_* classmethods rather than the constructor.
    """
    _data: dict[str, NDArray[np.floating[Any]]]
    _metadata: dict[str, Any] = field(default_factory=dict)

    def keys(self) -> frozenset[str]:
        """Public column names (names starting with '_' are internal)."""
        return frozenset(k for k in self._data if not k.startswith('_'))

    def __getitem__(self, key: str) -> NDArray[np.floating[Any]]:
        try:
            return self._data[key]
        except KeyError:
            raise KeyError(
                f"DataSource has no array '{key}'. Available: {sorted(self.keys())}"
            ) from None

    def __contains__(self, key: object) -> bool:
        return key in self._data

    @property
    def n_observations(self) -> int:
        return self._metadata.get('n_observations', 0)

    @property
    def metadata(self) -> dict[str, Any]:
        """Where the data came from and its shape (a copy)."""
        return dict(self._metadata)

    # === Constructors ===

    @classmethod
    def from_arrays(
        cls,
        *,
        X: NDArray | None = None,
        y: NDArray | None = None,
        data: NDArray | None = None,
        columns: list[str] | None = None,
        **named_arrays: NDArray,
    ) -> DataSource:
        """
        Build from arrays.

        ``X`` is stored as a 2-D design block (a vector becomes one column),
        ``y`` as a 1-D response. A 2-D ``data`` block is split into the given
        ``columns``. Any other keyword becomes a column of that name.
        """
        storage: dict[str, NDArray] = {}

        if X is not None:
            X_arr = _numeric('X', X)
            storage['X'] = X_arr.reshape(-1, 1) if X_arr.ndim == 1 else X_arr
        if y is not None:
            y_arr = _numeric('y', y)
            storage['y'] = y_arr.ravel() if y_arr.ndim == 2 and y_arr.shape[1] == 1 else y_arr
        if data is not None:
            block = _numeric('data', data)
            if columns is None:
                storage['_data'] = block
            elif block.ndim != 2 or block.shape[1] != len(columns):
                raise ValidationError(
                    f"data has shape {block.shape} but {len(columns)} column names were given"
                )
            else:
                storage.update({col: block[:, j] for j, col in enumerate(columns)})
        for name, values in named_arrays.items():
            storage[name] = _numeric(name, values)

        metadata: dict[str, Any] = {'n_observations': _n_rows(storage), 'source': 'arrays'}
        if columns is not None:
            metadata['columns'] = list(columns)
        return cls(_data=storage, _metadata=metadata)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> DataSource:
        """Build from a mapping of column name to 1-D array-like."""
        storage = {str(name): _numeric(str(name), values) for name, values in mapping.items()}
        return cls(
            _data=storage,
            _metadata={
                'n_observations': _n_rows(storage),
                'source': 'mapping',
                'columns': list(storage),
            },
        )

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> DataSource:
        """
        Build from a pandas DataFrame.

        Every column must be numeric; categorical encoding is the caller's job.
        The index is not carried over.
        """
        storage: dict[str, NDArray] = {}
        for col in df.columns:
            try:
                storage[str(col)] = df[col].to_numpy(dtype=np.float64)
            except (ValueError, TypeError) as e:
                raise ValidationError(
                    f"column {col!r} is not numeric ({df[col].dtype}); "
                    f"encode it before fitting"
                ) from e

        metadata: dict[str, Any] = {
            'n_observations': len(df),
            'source': 'dataframe',
            'columns': [str(c) for c in df.columns],
        }
        if source_path:
            metadata['source_path'] = source_path
        return cls(_data=storage, _metadata=metadata)

    @classmethod
    def from_file(cls, path: str | Path, *, columns: list[str] | None = None) -> DataSource:
        """
        Read a CSV/TSV (via pandas) or a 2-D .npy array.

        For delimited files ``columns`` selects which columns to read; for
        .npy it names the array's columns.
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in ('.csv', '.tsv'):
            import pandas as pd
            df = pd.read_csv(path, usecols=columns, sep='\t' if suffix == '.tsv' else ',')
            return cls.from_dataframe(df, source_path=str(path))
        if suffix == '.npy':
            return cls.from_arrays(data=np.load(path), columns=columns)
        raise ValidationError(f"Unknown file format: {suffix}")
