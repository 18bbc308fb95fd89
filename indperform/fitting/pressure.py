"""
Indicator responses to pressures.

ind_init builds every indicator x pressure combination on a shared time split;
model_gam fits one additive model per combination,

	ind ~ 1 [+ group] [+ press:group] + s(press, k)

on the training years and scores its predictive performance on the test years.
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import partial
from typing import Dict, Mapping, Optional, Sequence
import logging
import numpy as np
import pandas as pd

from indperform.config import FamilySpec, FitConfig
from indperform.diagnostics import DIAGNOSTIC_COLUMNS, model_diagnostics
from indperform.errors import InputContractError
from indperform.frames import frame_from_columns
from indperform.metrics import nrmse
from indperform.splits import split_time, train_na_mask
from indperform.validation import check_input_vec, check_ind_press, check_lengths
from .batch import raise_if_all_failed, report_failures, run_batch
from .gam import GamFitter

logger = logging.getLogger(__name__)

INIT_COLUMNS = [
	"id", "ind", "press", "ind_train", "press_train", "time_train",
	"ind_test", "press_test", "time_test", "train_na",
]
GAM_COLUMNS = [
	"id", "ind", "press", "model_type", "aic", "edf", "p_val", "r_sq", "expl_dev",
	"nrmse", "ks_p", "tac", "model", "pred", "ci_up", "ci_low",
]
_GAM_NESTED = ("model", "pred", "ci_up", "ci_low")


def ind_init(
	ind_tbl,
	press_tbl,
	time,
	train: float = 0.9,
	random: bool = False,
	seed: Optional[int] = None,
) -> pd.DataFrame:
	"""
	Combine every indicator with every pressure and split the time series
	into training and test data (the same split for all combinations).
	"""
	ind_ = check_ind_press(ind_tbl, "ind_tbl", "ind")
	press_ = check_ind_press(press_tbl, "press_tbl", "press")
	time_ = check_input_vec(time, "time")
	check_lengths(ind_, time_, "ind_tbl", "time")
	check_lengths(press_, time_, "press_tbl", "time")
	cfg = FitConfig(train=train, random=random, seed=seed)
	split = split_time(time_.shape[0], cfg.train, cfg.random, cfg.seed)
	t_tr = time_[split.train]
	t_te = time_[split.test]

	cols: Dict[str, list] = {c: [] for c in INIT_COLUMNS}
	i = 0
	for ind in ind_.columns:
		y = ind_[ind].to_numpy(dtype=np.float64)
		for press in press_.columns:
			x = press_[press].to_numpy(dtype=np.float64)
			i += 1
			cols["id"].append(i)
			cols["ind"].append(ind)
			cols["press"].append(press)
			cols["ind_train"].append(pd.Series(y[split.train], index=t_tr, name=ind))
			cols["press_train"].append(pd.Series(x[split.train], index=t_tr, name=press))
			cols["time_train"].append(t_tr.copy())
			cols["ind_test"].append(pd.Series(y[split.test], index=t_te, name=ind))
			cols["press_test"].append(pd.Series(x[split.test], index=t_te, name=press))
			cols["time_test"].append(t_te.copy())
			cols["train_na"].append(train_na_mask(y, time_, split))
	logger.info("initialized %d indicator-pressure combinations", i)
	return frame_from_columns(cols, nested=INIT_COLUMNS[3:])


@dataclass(frozen=True)
class PressureUnit:
	"""Training and test data of one indicator-pressure combination."""
	ind: str
	press: str
	y_train: np.ndarray
	x_train: np.ndarray
	y_test: np.ndarray
	x_test: np.ndarray
	g_train: Optional[np.ndarray] = None
	g_test: Optional[np.ndarray] = None


def fit_pressure_unit(fitter: GamFitter, interaction: bool, unit: PressureUnit) -> Dict[str, object]:
	"""Fit one pressure-response model, predict and compute diagnostics."""
	domain = np.concatenate([unit.x_train, unit.x_test])
	fit = fitter.fit(unit.y_train, unit.x_train, group=unit.g_train, interaction=interaction, domain=domain)
	pred, ci_low, ci_up = fitter.predict(fit, unit.x_train, group=unit.g_train)
	err = np.nan
	if unit.y_test.shape[0] > 0:
		pred_test, _, _ = fitter.predict(fit, unit.x_test, group=unit.g_test)
		err = nrmse(pred_test, unit.y_test, method="sd")
	diag = model_diagnostics(fit)
	out: Dict[str, object] = {"model": fit, "pred": pred, "ci_low": ci_low, "ci_up": ci_up, "nrmse": err}
	out.update(diag)
	return out


def _group_levels(group, times: np.ndarray, name: str) -> np.ndarray:
	if isinstance(group, Mapping):
		lookup = dict(group)
	else:
		s = pd.Series(group)
		lookup = dict(zip(s.index.to_numpy(dtype=np.float64), s.to_numpy(dtype=object)))
	levels = []
	for t in times:
		if float(t) not in lookup:
			raise InputContractError(f"group: has no level for time step {t} ({name})")
		levels.append(lookup[float(t)])
	return np.asarray(levels, dtype=object)


def _check_init_tbl(init_tbl) -> None:
	if not isinstance(init_tbl, pd.DataFrame):
		raise InputContractError("init_tbl: has to be the DataFrame returned by ind_init()")
	missing = [c for c in INIT_COLUMNS if c not in init_tbl.columns]
	if missing:
		raise InputContractError(f"init_tbl: missing columns {missing} (see ind_init())")
	if init_tbl.shape[0] == 0:
		raise InputContractError("init_tbl: contains no indicator-pressure combinations")


def model_gam(
	init_tbl: pd.DataFrame,
	k: int = 5,
	family: FamilySpec = "gaussian",
	link: Optional[str] = None,
	group=None,
	interaction: bool = False,
	n_jobs: int = 1,
	alpha_grid: Optional[Sequence[float]] = None,
) -> pd.DataFrame:
	"""
	Model every indicator-pressure combination of `init_tbl`.

	`group` is an optional grouping factor indexed by time (pd.Series or
	mapping time -> level); it enters as dummy-coded parametric terms and,
	with `interaction=True`, also as pressure x group terms.

	Returns one row per combination with the diagnostics of
	indperform.diagnostics, the test-data nrmse and the training predictions.
	"""
	_check_init_tbl(init_tbl)
	if interaction and group is None:
		raise InputContractError("interaction: requires a grouping factor (group=...)")
	kw = {}
	if alpha_grid is not None:
		kw["alpha_grid"] = tuple(alpha_grid)
	cfg = FitConfig(k=k, family=family, link=link, n_jobs=n_jobs, **kw)
	fitter = GamFitter.from_config(cfg)

	units = []
	labels: Dict[int, Dict[str, object]] = {}
	for row in init_tbl.itertuples(index=False):
		t_tr = np.asarray(row.time_train, dtype=np.float64)
		t_te = np.asarray(row.time_test, dtype=np.float64)
		g_tr = None
		g_te = None
		if group is not None:
			g_tr = _group_levels(group, t_tr, "training data")
			g_te = _group_levels(group, t_te, "test data")
		unit = PressureUnit(
			ind=row.ind,
			press=row.press,
			y_train=np.asarray(row.ind_train, dtype=np.float64),
			x_train=np.asarray(row.press_train, dtype=np.float64),
			y_test=np.asarray(row.ind_test, dtype=np.float64),
			x_test=np.asarray(row.press_test, dtype=np.float64),
			g_train=g_tr,
			g_test=g_te,
		)
		units.append((int(row.id), unit))
		labels[int(row.id)] = {"id": int(row.id), "ind": row.ind, "press": row.press}

	batch = run_batch(partial(fit_pressure_unit, fitter, bool(interaction)), units, cfg.n_jobs)
	raise_if_all_failed(
		batch,
		"No indicator-pressure model could be fitted! Check if you chose the correct error distribution (default is gaussian).",
	)

	cols: Dict[str, list] = {c: [] for c in GAM_COLUMNS}
	for (key, unit), outcome in zip(units, batch.outcomes):
		n_tr = unit.y_train.shape[0]
		if outcome.ok:
			v = outcome.value
		else:
			v = {c: np.nan for c in DIAGNOSTIC_COLUMNS}
			v["tac"] = pd.NA
			v.update({"model": None, "nrmse": np.nan})
			for c in ("pred", "ci_low", "ci_up"):
				v[c] = np.full(n_tr, np.nan)
		cols["id"].append(key)
		cols["ind"].append(unit.ind)
		cols["press"].append(unit.press)
		cols["model_type"].append("gam")
		for c in GAM_COLUMNS[4:]:
			cols[c].append(v[c])

	out = frame_from_columns(cols, nested=_GAM_NESTED)
	out["tac"] = out["tac"].astype("boolean")
	report_failures(batch, labels, "indicator-pressure combinations")
	return out
