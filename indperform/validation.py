"""
Input-contract checks run before any splitting or fitting.

All checks raise InputContractError naming the offending argument; none of
them modifies the caller's objects.
"""

from __future__ import annotations
from typing import List
import re
import numpy as np
import pandas as pd

from indperform.errors import InputContractError


_NON_WORD = re.compile(r"[^0-9A-Za-z_]")


def sanitize_name(name) -> str:
	"""
	Make a column name safe to use as a model term: every character that is
	not alphanumeric or underscore becomes "_", and names that start with a
	digit or underscore (or are empty) get an "x" prefix.
	"""
	s = _NON_WORD.sub("_", str(name).strip())
	if s == "" or s[0].isdigit() or s[0] == "_":
		s = "x" + s
	return s


def unique_names(names) -> List[str]:
	"""Sanitize names and suffix duplicates with _2, _3, ..."""
	out: List[str] = []
	seen: dict[str, int] = {}
	for nm in names:
		s = sanitize_name(nm)
		if s in seen:
			seen[s] += 1
			s = f"{s}_{seen[s]}"
		else:
			seen[s] = 1
		out.append(s)
	return out


def check_ind_press(tbl, name: str = "ind_tbl", default_col: str = "ind") -> pd.DataFrame:
	"""
	Coerce an indicator or pressure table into a numeric DataFrame.

	A named Series keeps its name; an unnamed vector becomes `default_col`.
	"""
	if tbl is None:
		raise InputContractError(f"{name}: argument is missing")
	if isinstance(tbl, pd.Series):
		col = tbl.name if tbl.name is not None else default_col
		df = tbl.to_frame(name=col).reset_index(drop=True)
	elif isinstance(tbl, pd.DataFrame):
		df = tbl.reset_index(drop=True).copy()
	else:
		a = np.asarray(tbl)
		if a.ndim == 1:
			df = pd.DataFrame({default_col: a})
		elif a.ndim == 2:
			df = pd.DataFrame(a, columns=[f"{default_col}{i + 1}" for i in range(a.shape[1])])
		else:
			raise InputContractError(f"{name}: has to be a table or a vector, got {a.ndim} dimensions")
	if df.shape[1] == 0:
		raise InputContractError(f"{name}: contains no variables")
	if df.shape[0] == 0:
		raise InputContractError(f"{name}: contains no observations")
	for col in df.columns:
		s = df[col]
		if pd.api.types.is_bool_dtype(s) or not pd.api.types.is_numeric_dtype(s):
			raise InputContractError(f"{name}: variable {col!r} is not numeric")
	df.columns = unique_names(df.columns)
	return df.astype(np.float64)


def check_input_vec(vec, name: str = "time") -> np.ndarray:
	"""Return a 1-D float array without missing values."""
	if vec is None:
		raise InputContractError(f"{name}: argument is missing")
	a = np.asarray(vec)
	if a.ndim != 1:
		raise InputContractError(f"{name}: has to be a vector")
	if a.size == 0:
		raise InputContractError(f"{name}: is empty")
	if a.dtype == bool or not np.issubdtype(a.dtype, np.number):
		raise InputContractError(f"{name}: has to be numeric")
	a = a.astype(np.float64)
	if not np.all(np.isfinite(a)):
		raise InputContractError(f"{name}: contains missing or infinite values")
	return a


def check_lengths(tbl: pd.DataFrame, vec: np.ndarray, tbl_name: str = "ind_tbl", vec_name: str = "time") -> None:
	if tbl.shape[0] != vec.shape[0]:
		raise InputContractError(
			f"{vec_name}: the number of time steps in {vec_name} ({vec.shape[0]}) and "
			f"the row number of {tbl_name} ({tbl.shape[0]}) differ"
		)
