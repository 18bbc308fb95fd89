"""Summary of indicator performance scores.

summary_sc reshapes a ScoreTable into three views:

  • overview: one row per indicator; indicator-level criteria as scored,
    pressure-specific criteria averaged over the significant pressures, the
    number of significant pressures and percent-of-maximum columns
  • subcriteria_per_press: one row per (indicator, significant pressure) with
    sub-criterion scores, their sums per criterion and percentages
  • scores_matrix: indicators as index, indicator-level criteria and one
    column per <pressure>_<criterion> over all tested pressures; pairs an
    indicator was not tested for are missing

The branch taken depends only on which criterion groups the input carries
(CriteriaPresence); nothing is cached between calls.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Union
import logging
import numpy as np
import pandas as pd

from indperform.errors import InputContractError
from indperform.frames import ordered_present, percent_of_max
from .records import CriteriaPresence, ScoreTable
from .template import CriteriaTemplate

logger = logging.getLogger(__name__)

MISSING_PRESS_POLICIES = ("zero", "missing")


@dataclass(frozen=True)
class ScoreSummary:
	overview: pd.DataFrame
	subcriteria_per_press: Optional[pd.DataFrame]
	scores_matrix: pd.DataFrame
	presence: CriteriaPresence


def pct_col(crit: str) -> str:
	return f"{crit}_in%"


def _add_percentages(df: pd.DataFrame, crits: List[str], totals: Dict[str, float]) -> pd.DataFrame:
	out = df.copy()
	for c in crits:
		out[pct_col(c)] = percent_of_max(out[c], totals[c])
	return out


def _press_crits(scores: ScoreTable, template: CriteriaTemplate) -> Dict[str, List[str]]:
	"""Scored sub-criteria grouped by criterion, in template order."""
	groups: Dict[str, List[str]] = {}
	for s in scores.press_subcriteria or ():
		c = template.crit_of(s)
		groups.setdefault(c, []).append(s)
	ordered = ordered_present(template.criteria, groups)
	return {c: groups[c] for c in ordered}


def _sum_per_crit(long: pd.DataFrame, groups: Dict[str, List[str]]) -> pd.DataFrame:
	out = long.copy()
	for c, subs in groups.items():
		out[c] = out[subs].sum(axis=1)
	return out


def _significant(long: pd.DataFrame, subs: List[str]) -> pd.DataFrame:
	"""Drop (indicator, pressure) rows whose sub-scores are all zero."""
	if long.shape[0] == 0:
		return long
	keep = long[subs].sum(axis=1) != 0.0
	return long.loc[keep].reset_index(drop=True)


def _pressure_means(sig: pd.DataFrame, inds: List[str], crits: List[str]) -> pd.DataFrame:
	"""Mean criterion score over significant pressures and their number."""
	grouped = sig.groupby("ind", sort=False)
	n_press = grouped["press"].nunique()
	data: Dict[str, object] = {"ind": inds}
	data["nr_sign_press"] = [int(n_press.get(i, 0)) for i in inds]
	for c in crits:
		sums = grouped[c].sum()
		vals = [float(sums[i]) / n if n > 0 else np.nan for i, n in zip(inds, data["nr_sign_press"])]
		data[c] = np.round(np.asarray(vals, dtype=np.float64), 1)
	return pd.DataFrame(data)


def _overview(
	scores: ScoreTable,
	template: CriteriaTemplate,
	presence: CriteriaPresence,
	sig: Optional[pd.DataFrame],
	groups: Dict[str, List[str]],
	totals: Dict[str, float],
	missing_press: str,
) -> pd.DataFrame:
	general = list(scores.general_criteria)
	if presence is CriteriaPresence.GENERAL:
		return _add_percentages(scores.general_frame(), general, totals)

	crits = list(groups)
	means = _pressure_means(sig, scores.inds, crits)
	means = _add_percentages(means, crits, totals)
	if missing_press == "zero":
		fill_cols = crits + [pct_col(c) for c in crits]
		means[fill_cols] = means[fill_cols].fillna(0.0)
	if presence is CriteriaPresence.BOTH:
		gen = _add_percentages(scores.general_frame(), general, totals)
		merged = gen.merge(means, on="ind", how="left", sort=False)
		if missing_press == "zero":
			gen_cols = general + [pct_col(c) for c in general]
			merged[gen_cols] = merged[gen_cols].fillna(0.0)
	else:
		merged = means
	all_crits = ordered_present(template.criteria, general + crits)
	order = ["ind", "nr_sign_press", *all_crits, *[pct_col(c) for c in all_crits]]
	return merged[ordered_present(order, merged.columns)].reset_index(drop=True)


def _per_press(
	sig: pd.DataFrame,
	groups: Dict[str, List[str]],
	totals: Dict[str, float],
) -> pd.DataFrame:
	crits = list(groups)
	subs = [s for c in crits for s in groups[c]]
	out = _add_percentages(sig, crits, totals)
	order = ["ind", "press", "press_type", *subs, *crits, *[pct_col(c) for c in crits]]
	return out[order].reset_index(drop=True)


def _matrix(
	scores: ScoreTable,
	presence: CriteriaPresence,
	summed: Optional[pd.DataFrame],
	groups: Dict[str, List[str]],
) -> pd.DataFrame:
	"""Pressures an indicator was not tested against stay missing."""
	inds = scores.inds
	mat = pd.DataFrame(index=pd.Index(inds, name="ind"))
	if presence in (CriteriaPresence.GENERAL, CriteriaPresence.BOTH):
		gen = scores.general_frame().set_index("ind")
		for c in scores.general_criteria:
			mat[c] = gen[c]
	if presence in (CriteriaPresence.PRESSURE, CriteriaPresence.BOTH):
		presses = list(dict.fromkeys(summed["press"].tolist()))
		for p in presses:
			sub = summed.loc[summed["press"] == p].set_index("ind")
			for c in groups:
				col = sub[c].reindex(inds)
				mat[f"{p}_{c}"] = col.to_numpy(dtype=np.float64)
	return mat


def summary_sc(
	scores: Union[ScoreTable, pd.DataFrame],
	template: CriteriaTemplate,
	missing_press: str = "zero",
) -> ScoreSummary:
	"""
	Summarize indicator scores into overview, per-pressure and matrix views.

	Parameters
	----------
	scores : ScoreTable or flat score DataFrame (see ScoreTable.from_frame)
	template : CriteriaTemplate
		The template used for scoring; provides the total score per criterion.
	missing_press : "zero" or "missing"
		How the overview reports indicators without significant pressures:
		0 (default, indicator-level gaps are zero-filled as well) or NaN.
	"""
	if isinstance(scores, pd.DataFrame):
		scores = ScoreTable.from_frame(scores)
	if not isinstance(scores, ScoreTable):
		raise InputContractError("scores: has to be a ScoreTable or a score DataFrame")
	if not isinstance(template, CriteriaTemplate):
		raise InputContractError("template: has to be a CriteriaTemplate")
	if missing_press not in MISSING_PRESS_POLICIES:
		raise InputContractError(f"missing_press: {missing_press!r} is not one of {list(MISSING_PRESS_POLICIES)}")
	for c in scores.general_criteria:
		template.subcriteria(c)

	presence = scores.presence
	logger.info("summarizing %d indicators (criteria present: %s)", len(scores.rows), presence.value)
	if presence is CriteriaPresence.NONE:
		empty = pd.DataFrame({"ind": scores.inds})
		return ScoreSummary(
			overview=empty,
			subcriteria_per_press=None,
			scores_matrix=pd.DataFrame(index=pd.Index(scores.inds, name="ind")),
			presence=presence,
		)

	totals = template.total_scores()
	groups = _press_crits(scores, template)
	summed = None
	sig = None
	per_press = None
	if presence in (CriteriaPresence.PRESSURE, CriteriaPresence.BOTH):
		subs = list(scores.press_subcriteria)
		summed = _sum_per_crit(scores.pressure_long(), groups)
		sig = _significant(summed, subs)
		per_press = _per_press(sig, groups, totals)

	overview = _overview(scores, template, presence, sig, groups, totals, missing_press)
	matrix = _matrix(scores, presence, summed, groups)
	return ScoreSummary(overview=overview, subcriteria_per_press=per_press, scores_matrix=matrix, presence=presence)
