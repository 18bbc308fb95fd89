"""Normalized root-mean-square error.

	NRMSE = RMSE(pred, obs) / N(obs)

with N one of: sample standard deviation ("sd"), mean ("mean"), range
("maxmin") or interquartile range ("iq"). When the series were transformed
before modeling they can be back-transformed first; `back_transform`
chooses whether both series, only the observations or only the predictions
are back-transformed.
"""

from __future__ import annotations
from typing import Optional
import numpy as np

from indperform.errors import InputContractError, NormalizationError
from .transforms import back_transform_function

METHODS = ("sd", "mean", "maxmin", "iq")
BACK_TRANSFORM_TARGETS = ("both", "obs", "pred")


def _denominator(obs: np.ndarray, method: str) -> float:
	if method == "sd":
		if obs.shape[0] < 2:
			return np.nan
		return float(np.std(obs, ddof=1))
	if method == "mean":
		return float(np.mean(obs))
	if method == "maxmin":
		return float(np.max(obs) - np.min(obs))
	q75, q25 = np.percentile(obs, [75.0, 25.0])
	return float(q75 - q25)


def nrmse(
	pred,
	obs,
	method: str = "sd",
	transformation: str = "none",
	trans_function: Optional[str] = None,
	back_transform: str = "both",
) -> float:
	"""
	Normalized RMSE of `pred` against `obs`; pairs with a missing value are dropped.

	Returns NaN when there is no complete pair (or, for "sd", only one).
	Raises NormalizationError when the denominator is zero or infinite.
	"""
	if method not in METHODS:
		raise InputContractError(f"method: {method!r} is not one of {list(METHODS)}")
	if back_transform not in BACK_TRANSFORM_TARGETS:
		raise InputContractError(f"back_transform: {back_transform!r} is not one of {list(BACK_TRANSFORM_TARGETS)}")
	p = np.asarray(pred, dtype=np.float64).reshape(-1)
	o = np.asarray(obs, dtype=np.float64).reshape(-1)
	if p.shape != o.shape:
		raise InputContractError(f"pred: length {p.shape[0]} differs from obs length {o.shape[0]}")

	back = back_transform_function(transformation, trans_function)
	if transformation != "none":
		with np.errstate(all="ignore"):
			if back_transform in ("both", "obs"):
				o = back(o)
			if back_transform in ("both", "pred"):
				p = back(p)

	ok = np.isfinite(p) & np.isfinite(o)
	if not np.any(ok):
		return np.nan
	p = p[ok]
	o = o[ok]
	rmse = float(np.sqrt(np.mean((p - o) ** 2)))
	den = _denominator(o, method)
	if np.isnan(den):
		return np.nan
	if np.isinf(den) or den == 0.0:
		raise NormalizationError(f"normalization denominator ({method}) is {den}")
	return rmse / den
