"""Per-model summary statistics.

Every extractor tolerates failed units (None) and returns NaN for them, so the
extracted vectors line up positionally with the model list they came from.
"""

from __future__ import annotations
from typing import Dict, Iterable, List
import logging
import warnings
import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.diagnostic import acorr_ljungbox

logger = logging.getLogger(__name__)

DIAGNOSTIC_COLUMNS = ("p_val", "edf", "r_sq", "expl_dev", "aic", "gcv", "ks_p", "lb_p", "tac")


def _result_of(model):
	"""Unwrap a GamFit (or pass a statsmodels results object through)."""
	if model is None:
		return None
	return getattr(model, "result", model)


def smooth_p_value(model) -> float:
	"""
	p value of the test that the smooth term is zero (Wald test referred to
	the smooth's effective degrees of freedom).
	"""
	res = _result_of(model)
	with warnings.catch_warnings():
		warnings.simplefilter("ignore")
		test = res.test_significance(0)
	return float(np.squeeze(np.asarray(test.pvalue, dtype=np.float64)))


def smooth_edf(model) -> float:
	"""Effective degrees of freedom of the smooth term."""
	res = _result_of(model)
	start = int(res.model.k_exog_linear)
	return float(np.sum(np.asarray(res.edf, dtype=np.float64)[start:]))


def get_p_values(models: Iterable) -> np.ndarray:
	"""Smooth-term p values, NaN where a model is missing or the test fails."""
	out: List[float] = []
	for m in models:
		if _result_of(m) is None:
			out.append(np.nan)
			continue
		try:
			out.append(smooth_p_value(m))
		except Exception as e:
			logger.debug("p value extraction failed: %s", e)
			out.append(np.nan)
	return np.asarray(out, dtype=np.float64)


def _r_squared(res) -> float:
	# adjusted R^2 on the response scale
	y = np.asarray(res.model.endog, dtype=np.float64)
	mu = np.asarray(res.fittedvalues, dtype=np.float64)
	n = y.shape[0]
	df_resid = float(res.df_resid)
	var_y = float(np.var(y, ddof=1)) if n > 1 else 0.0
	if var_y == 0.0 or df_resid <= 0.0:
		return np.nan
	var_r = float(np.var(y - mu, ddof=1))
	return 1.0 - var_r * (n - 1) / (var_y * df_resid)


def _explained_deviance(res) -> float:
	y = np.asarray(res.model.endog, dtype=np.float64)
	mu = np.asarray(res.fittedvalues, dtype=np.float64)
	fam = res.model.family
	dev = float(fam.deviance(y, mu))
	null_dev = float(fam.deviance(y, np.full_like(y, y.mean())))
	if null_dev == 0.0:
		return np.nan
	return 1.0 - dev / null_dev


def _residual_tests(res) -> tuple[float, float]:
	r = np.asarray(res.resid_deviance, dtype=np.float64)
	r = r[np.isfinite(r)]
	ks_p = np.nan
	lb_p = np.nan
	if r.shape[0] > 2:
		sd = float(np.std(r, ddof=1))
		if sd > 0.0:
			ks_p = float(stats.kstest((r - r.mean()) / sd, "norm").pvalue)
		lb = acorr_ljungbox(r, lags=[1], return_df=True)
		lb_p = float(lb["lb_pvalue"].iloc[0])
	return ks_p, lb_p


def model_diagnostics(model, alpha: float = 0.05) -> Dict[str, object]:
	"""
	Summary statistics of one fitted model.

	p_val    smooth-term p value
	edf      effective degrees of freedom of the smooth
	r_sq     adjusted R^2
	expl_dev proportion of null deviance explained
	aic, gcv
	ks_p     Kolmogorov-Smirnov test of standardized deviance residuals vs normal
	lb_p     Ljung-Box lag-1 test of residual autocorrelation
	tac      temporal autocorrelation flag (lb_p < alpha)
	"""
	res = _result_of(model)
	ks_p, lb_p = _residual_tests(res)
	tac = pd.NA
	if np.isfinite(lb_p):
		tac = bool(lb_p < alpha)
	return {
		"p_val": smooth_p_value(model),
		"edf": smooth_edf(model),
		"r_sq": _r_squared(res),
		"expl_dev": _explained_deviance(res),
		"aic": float(res.aic),
		"gcv": float(res.gcv),
		"ks_p": ks_p,
		"lb_p": lb_p,
		"tac": tac,
	}


def _empty_row() -> Dict[str, object]:
	row: Dict[str, object] = {c: np.nan for c in DIAGNOSTIC_COLUMNS}
	row["tac"] = pd.NA
	return row


def extract_diagnostics(models: Iterable, alpha: float = 0.05) -> pd.DataFrame:
	"""
	One diagnostics row per model, all-missing for failed models.
	"""
	rows = []
	for m in models:
		if _result_of(m) is None:
			rows.append(_empty_row())
			continue
		try:
			rows.append(model_diagnostics(m, alpha=alpha))
		except Exception as e:
			logger.debug("diagnostics extraction failed: %s", e)
			rows.append(_empty_row())
	df = pd.DataFrame(rows, columns=list(DIAGNOSTIC_COLUMNS))
	df["tac"] = df["tac"].astype("boolean")
	return df
