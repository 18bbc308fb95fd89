"""
Small table-building primitives shared by the fitting and scoring layers.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Sequence
import numpy as np
import pandas as pd


def object_column(values: Iterable) -> np.ndarray:
	"""
	Pack arbitrary per-row objects (arrays, Series, models) into a 1-D object
	array so pandas stores them as cells instead of expanding them.
	"""
	vals = list(values)
	out = np.empty(len(vals), dtype=object)
	for i, v in enumerate(vals):
		out[i] = v
	return out


def frame_from_columns(columns: Dict[str, Sequence], nested: Iterable[str] = ()) -> pd.DataFrame:
	"""Build a DataFrame column by column; `nested` columns become object cells."""
	nested_set = set(nested)
	data = {}
	for name, vals in columns.items():
		if name in nested_set:
			data[name] = object_column(vals)
		else:
			data[name] = list(vals)
	return pd.DataFrame(data, columns=list(columns))


def percent_of_max(score, total: float):
	"""round(score / total * 100) with half-to-even rounding."""
	return np.round(np.asarray(score, dtype=np.float64) / float(total) * 100.0, 0)


def ordered_present(wanted: Sequence[str], present: Iterable[str]) -> List[str]:
	"""Columns of `wanted` that are present, in `wanted` order."""
	have = set(present)
	return [c for c in wanted if c in have]
