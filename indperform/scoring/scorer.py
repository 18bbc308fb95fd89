"""
Criterion scoring: map model diagnostics and expert judgements onto the
discrete scores of a CriteriaTemplate.

Automatically scored (sub-)criteria:

	C8     long-term trend significant (trend p value <= signif)
	C9_1   significant pressure response (smooth p value <= signif)
	C9_2   deviance explained: 0 below, 1 within, 2 above expl_dev_bands
	C10_1  test-data nrmse <= nrmse_max
	C10_2  no temporal autocorrelation in the residuals (tac is False)
	C10_3  residuals consistent with normality (ks_p >= signif)

Pressures without a significant response (C9_1 = 0) get zero for all of
their sub-criteria. Every other indicator-level criterion of the template
(e.g. C11) is taken from `expert_scores`.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Mapping, Optional, Tuple
import logging
import numpy as np
import pandas as pd

from indperform.errors import InputContractError
from .records import IndicatorScore, PressureScore, ScoreTable
from .template import CriteriaTemplate

logger = logging.getLogger(__name__)

TREND_CRITERION = "C8"
PRESSURE_SUBCRITERIA = ("C9_1", "C9_2", "C10_1", "C10_2", "C10_3")


def _is_missing(v) -> bool:
	if v is None or v is pd.NA:
		return True
	try:
		return bool(np.isnan(v))
	except TypeError:
		return False


def _level_p(p, signif: float) -> int:
	return 0 if _is_missing(p) else int(float(p) <= signif)


def _level_expl_dev(v, bands: Tuple[float, float]) -> int:
	if _is_missing(v):
		return 0
	v = float(v)
	if v < bands[0]:
		return 0
	if v <= bands[1]:
		return 1
	return 2


def _level_nrmse(v, nrmse_max: float) -> int:
	return 0 if _is_missing(v) else int(float(v) <= nrmse_max)


def _level_tac(v) -> int:
	return 0 if _is_missing(v) else int(not bool(v))


def _level_normal(v, signif: float) -> int:
	return 0 if _is_missing(v) else int(float(v) >= signif)


def _clamped(template: CriteriaTemplate, subcrit: str, level: float) -> float:
	"""Weighted value of the highest allowed score not above `level`."""
	allowed = [s for s in template.scores(subcrit) if s <= level]
	score = max(allowed) if allowed else min(template.scores(subcrit))
	return template.weighted(subcrit, score)


def _first_seen(*series: Optional[pd.Series]) -> List[str]:
	out: Dict[str, None] = {}
	for s in series:
		if s is None:
			continue
		for v in s.tolist():
			out.setdefault(str(v), None)
	return list(out)


def _press_types(press_type) -> Dict[str, Optional[str]]:
	if press_type is None:
		return {}
	if isinstance(press_type, pd.DataFrame):
		for col in ("press", "press_type"):
			if col not in press_type.columns:
				raise InputContractError(f"press_type: column {col!r} is missing")
		return {str(p): t for p, t in zip(press_type["press"], press_type["press_type"])}
	if isinstance(press_type, Mapping):
		return {str(p): t for p, t in press_type.items()}
	raise InputContractError("press_type: has to be a mapping press -> type or a DataFrame with press and press_type")


def _expert_table(expert_scores, crits: Tuple[str, ...]) -> Dict[str, Dict[str, float]]:
	"""ind -> {criterion: score} for the expert-scored criteria."""
	if expert_scores is None:
		return {}
	if isinstance(expert_scores, Mapping):
		tbl = pd.DataFrame([{"ind": ind, **dict(v)} for ind, v in expert_scores.items()])
	elif isinstance(expert_scores, pd.DataFrame):
		tbl = expert_scores
	else:
		raise InputContractError("expert_scores: has to be a DataFrame with an 'ind' column or a mapping")
	if "ind" not in tbl.columns:
		raise InputContractError("expert_scores: column 'ind' is missing")
	if tbl["ind"].duplicated().any():
		raise InputContractError("expert_scores: indicator names have to be unique")
	out: Dict[str, Dict[str, float]] = {}
	for rec in tbl.to_dict("records"):
		out[str(rec["ind"])] = {c: rec[c] for c in crits if c in rec}
	return out


def _check_columns(tbl, name: str, cols: Tuple[str, ...]) -> None:
	if not isinstance(tbl, pd.DataFrame):
		raise InputContractError(f"{name}: has to be a DataFrame")
	missing = [c for c in cols if c not in tbl.columns]
	if missing:
		raise InputContractError(f"{name}: missing columns {missing}")


def scoring(
	template: CriteriaTemplate,
	trend_tbl: Optional[pd.DataFrame] = None,
	mod_tbl: Optional[pd.DataFrame] = None,
	press_type=None,
	expert_scores=None,
	signif: float = 0.05,
	expl_dev_bands: Tuple[float, float] = (0.25, 0.5),
	nrmse_max: float = 0.8,
) -> ScoreTable:
	"""
	Score every indicator against the criteria of `template`.

	Parameters
	----------
	template : CriteriaTemplate
	trend_tbl : DataFrame, optional
		Output of model_trend (ind, p_val); scores C8.
	mod_tbl : DataFrame, optional
		Output of model_gam (ind, press, p_val, expl_dev, nrmse, tac, ks_p);
		scores the pressure-specific sub-criteria present in the template.
	press_type : mapping or DataFrame, optional
		Pressure type per pressure (e.g. "fishing", "climate").
	expert_scores : DataFrame or mapping, optional
		Scores of the remaining indicator-level criteria, one row per indicator.
	signif : float
		Significance level of the p value and normality criteria.
	expl_dev_bands : (lower, upper)
		Deviance-explained bands of C9_2.
	nrmse_max : float
		Largest test-data nrmse still scored as good predictive performance.

	Scores outside a sub-criterion's defined scores are clamped down to the
	nearest defined score and weighted by the template.
	"""
	if not isinstance(template, CriteriaTemplate):
		raise InputContractError("template: has to be a CriteriaTemplate")
	if not 0.0 < float(signif) < 1.0:
		raise InputContractError("signif: has to be strictly between 0 and 1")
	lo, hi = expl_dev_bands
	if not 0.0 <= lo <= hi:
		raise InputContractError("expl_dev_bands: has to be (lower, upper) with 0 <= lower <= upper")

	general = template.general_criteria
	score_trend = trend_tbl is not None and TREND_CRITERION in general
	expert_crits = tuple(c for c in general if c != TREND_CRITERION or trend_tbl is None)
	experts = _expert_table(expert_scores, expert_crits)
	expert_crits = tuple(c for c in expert_crits if any(c in v for v in experts.values()))
	general_scored = tuple(c for c in general if c in expert_crits or (c == TREND_CRITERION and score_trend))

	subs: Optional[Tuple[str, ...]] = None
	if mod_tbl is not None:
		_check_columns(mod_tbl, "mod_tbl", ("ind", "press", "p_val", "expl_dev", "nrmse", "tac", "ks_p"))
		known = {e.subcrit for e in template.entries}
		subs = tuple(s for s in PRESSURE_SUBCRITERIA if s in known)
		if len(subs) == 0:
			raise InputContractError("template: defines none of the pressure-specific sub-criteria " + ", ".join(PRESSURE_SUBCRITERIA))

	trend_p: Dict[str, float] = {}
	if score_trend:
		_check_columns(trend_tbl, "trend_tbl", ("ind", "p_val"))
		if trend_tbl["ind"].duplicated().any():
			raise InputContractError("trend_tbl: indicator names have to be unique")
		trend_p = {str(i): p for i, p in zip(trend_tbl["ind"], trend_tbl["p_val"])}

	inds = _first_seen(
		trend_tbl["ind"] if score_trend else None,
		mod_tbl["ind"] if mod_tbl is not None else None,
		pd.Series(list(experts)) if experts else None,
	)
	types = _press_types(press_type)
	levels: Dict[str, Callable[[dict], int]] = {
		"C9_1": lambda r: _level_p(r["p_val"], signif),
		"C9_2": lambda r: _level_expl_dev(r["expl_dev"], (lo, hi)),
		"C10_1": lambda r: _level_nrmse(r["nrmse"], nrmse_max),
		"C10_2": lambda r: _level_tac(r["tac"]),
		"C10_3": lambda r: _level_normal(r["ks_p"], signif),
	}

	press_rows: Dict[str, List[PressureScore]] = {i: [] for i in inds}
	if subs is not None:
		for rec in mod_tbl.to_dict("records"):
			sig = _level_p(rec["p_val"], signif)
			sc = {}
			for s in subs:
				level = levels[s](rec) if sig else 0
				sc[s] = _clamped(template, s, level)
			press = str(rec["press"])
			press_rows[str(rec["ind"])].append(PressureScore(press=press, press_type=types.get(press), subscores=sc))

	rows = []
	for ind in inds:
		crits = None
		if general_scored:
			crits = {}
			for c in general_scored:
				if c == TREND_CRITERION and score_trend:
					if ind not in trend_p:
						logger.warning("indicator %s has no trend model, C8 scored 0", ind)
					crits[c] = _clamped(template, c, _level_p(trend_p.get(ind), signif))
					continue
				if ind not in experts or c not in experts[ind] or _is_missing(experts[ind][c]):
					raise InputContractError(f"expert_scores: no score for {c!r} of indicator {ind!r}")
				value = float(experts[ind][c])
				if value not in template.scores(c):
					raise InputContractError(f"expert_scores: {value} is not a defined score of {c!r} ({ind!r})")
				crits[c] = template.weighted(c, value)
		press_spec = tuple(press_rows[ind]) if subs is not None else None
		rows.append(IndicatorScore(ind=ind, criteria=crits, press_spec=press_spec))

	logger.info(
		"scored %d indicators (criteria: %s; pressure sub-criteria: %s)",
		len(rows), list(general_scored), list(subs) if subs is not None else [],
	)
	return ScoreTable(rows=tuple(rows), general_criteria=general_scored, press_subcriteria=subs)
