"""
Long-term trend models: one additive model per indicator,

	ind ~ 1 + s(time, k)

fitted on the training part of the time series.
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import partial
from typing import Dict, Optional, Sequence
import logging
import numpy as np
import pandas as pd

from indperform.config import FamilySpec, FitConfig
from indperform.diagnostics import get_p_values
from indperform.frames import frame_from_columns
from indperform.splits import split_time, train_na_mask
from indperform.validation import check_input_vec, check_ind_press, check_lengths
from .batch import raise_if_all_failed, report_failures, run_batch
from .gam import GamFitter

logger = logging.getLogger(__name__)

TREND_COLUMNS = ["ind_id", "ind", "p_val", "model", "ind_train", "time_train", "train_na", "pred", "ci_up", "ci_low"]
NESTED_COLUMNS = ("model", "ind_train", "time_train", "train_na", "pred", "ci_up", "ci_low")


@dataclass(frozen=True)
class TrendUnit:
	"""Training data of one indicator."""
	ind: str
	y: np.ndarray
	time: np.ndarray


def fit_trend_unit(fitter: GamFitter, unit: TrendUnit) -> Dict[str, object]:
	"""Fit one trend model and predict over the training time steps."""
	fit = fitter.fit(unit.y, unit.time, domain=unit.time)
	pred, ci_low, ci_up = fitter.predict(fit, unit.time)
	return {"model": fit, "pred": pred, "ci_low": ci_low, "ci_up": ci_up}


def model_trend(
	ind_tbl,
	time,
	train: float = 1.0,
	random: bool = False,
	k: int = 4,
	family: FamilySpec = "gaussian",
	link: Optional[str] = None,
	seed: Optional[int] = None,
	n_jobs: int = 1,
	alpha_grid: Optional[Sequence[float]] = None,
) -> pd.DataFrame:
	"""
	Model the long-term trend of every indicator in `ind_tbl`.

	Parameters
	----------
	ind_tbl : DataFrame, 2-D array or vector
		Numeric indicator series, one column per indicator.
	time : vector
		Time steps (e.g. years), one per row of `ind_tbl`.
	train : float
		Proportion of time steps used for fitting (default: the full series).
	random : bool
		Draw the training steps at random instead of taking the first ones.
	k : int
		Basis dimension of the smooth term.
	family, link :
		Error distribution and link (name or statsmodels Family).

	Returns
	-------
	DataFrame with one row per indicator: ind_id, ind, p_val, model,
	ind_train, time_train, train_na, pred, ci_up, ci_low. Failed indicators
	keep their row with model None and missing p value and predictions.

	Raises
	------
	InputContractError on malformed input, FitError if no model could be fitted.
	A PartialFitWarning lists indicators whose fit failed.
	"""
	y_ = check_ind_press(ind_tbl, "ind_tbl", "ind")
	time_ = check_input_vec(time, "time")
	check_lengths(y_, time_, "ind_tbl", "time")
	kw = {}
	if alpha_grid is not None:
		kw["alpha_grid"] = tuple(alpha_grid)
	cfg = FitConfig(train=train, random=random, seed=seed, k=k, family=family, link=link, n_jobs=n_jobs, **kw)

	split = split_time(time_.shape[0], cfg.train, cfg.random, cfg.seed)
	time_train = time_[split.train]
	fitter = GamFitter.from_config(cfg)

	units = []
	labels: Dict[int, Dict[str, object]] = {}
	for i, name in enumerate(y_.columns):
		ind_id = i + 1
		values = y_[name].to_numpy(dtype=np.float64)
		units.append((ind_id, TrendUnit(ind=name, y=values[split.train], time=time_train)))
		labels[ind_id] = {"ind_id": ind_id, "ind": name}

	batch = run_batch(partial(fit_trend_unit, fitter), units, cfg.n_jobs)
	raise_if_all_failed(
		batch,
		"No indicator trend model could be fitted! Check if you chose the correct error distribution (default is gaussian).",
	)

	cols: Dict[str, list] = {c: [] for c in TREND_COLUMNS}
	nan_train = np.full(split.n_train, np.nan)
	for (ind_id, unit), outcome in zip(units, batch.outcomes):
		values = y_[unit.ind].to_numpy(dtype=np.float64)
		if outcome.ok:
			v = outcome.value
			model, pred, ci_up, ci_low = v["model"], v["pred"], v["ci_up"], v["ci_low"]
		else:
			model, pred, ci_up, ci_low = None, nan_train.copy(), nan_train.copy(), nan_train.copy()
		cols["ind_id"].append(ind_id)
		cols["ind"].append(unit.ind)
		cols["model"].append(model)
		cols["ind_train"].append(pd.Series(unit.y, index=time_train, name=unit.ind))
		cols["time_train"].append(time_train.copy())
		cols["train_na"].append(train_na_mask(values, time_, split))
		cols["pred"].append(pred)
		cols["ci_up"].append(ci_up)
		cols["ci_low"].append(ci_low)
	cols["p_val"] = list(get_p_values(cols["model"]))

	out = frame_from_columns(cols, nested=NESTED_COLUMNS)
	report_failures(batch, labels, "indicators")
	return out
