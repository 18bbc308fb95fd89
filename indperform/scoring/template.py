"""
Criterion-scoring template: every (sub-)criterion with its possible scores
and weights.

The template is immutable; the weighted maximum of a sub-criterion is
max(score * weight) over its entries, and the total score of a criterion is
the sum of its sub-criterion maxima.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple
import numpy as np
import pandas as pd

from indperform.errors import InputContractError


@dataclass(frozen=True)
class TemplateEntry:
	"""
	One possible score of a sub-criterion.

	Attributes
	----------
	crit : str
		Criterion code (e.g. "C9").
	subcrit : str
		Sub-criterion code; equal to `crit` for criteria without sub-criteria,
		otherwise "<crit>_<n>" (e.g. "C9_2").
	score : float
		Score awarded when the condition holds.
	weight : float
		Multiplier applied to the score.
	condition : str
		Human-readable condition for the score.
	"""
	crit: str
	subcrit: str
	score: float
	weight: float = 1.0
	condition: str = ""


class CriteriaTemplate:
	"""Immutable lookup table of template entries, in definition order."""

	_COLUMNS = ("crit", "subcrit", "score", "weight", "condition")

	def __init__(self, entries: Iterable[TemplateEntry]) -> None:
		ents = tuple(entries)
		if len(ents) == 0:
			raise InputContractError("template: contains no entries")
		for e in ents:
			if not isinstance(e.crit, str) or not isinstance(e.subcrit, str):
				raise InputContractError("template: crit and subcrit have to be strings")
			if e.subcrit != e.crit and not e.subcrit.startswith(e.crit + "_"):
				raise InputContractError(f"template: sub-criterion {e.subcrit!r} does not belong to {e.crit!r}")
			if not np.isfinite(e.score) or not np.isfinite(e.weight) or e.weight < 0.0:
				raise InputContractError(f"template: invalid score or weight for {e.subcrit!r}")
		self._entries = ents
		crits: List[str] = []
		subs: Dict[str, List[str]] = {}
		for e in ents:
			if e.crit not in subs:
				crits.append(e.crit)
				subs[e.crit] = []
			if e.subcrit not in subs[e.crit]:
				subs[e.crit].append(e.subcrit)
		for c, ss in subs.items():
			if c in ss and len(ss) > 1:
				raise InputContractError(f"template: criterion {c!r} mixes itself with sub-criteria")
		self._crits = tuple(crits)
		self._subs = {c: tuple(ss) for c, ss in subs.items()}
		self._crit_of = {s: c for c, ss in subs.items() for s in ss}

	@property
	def entries(self) -> Tuple[TemplateEntry, ...]:
		return self._entries

	@property
	def criteria(self) -> Tuple[str, ...]:
		return self._crits

	@property
	def general_criteria(self) -> Tuple[str, ...]:
		"""Criteria scored once per indicator."""
		return tuple(c for c in self._crits if not self.is_pressure_specific(c))

	@property
	def pressure_criteria(self) -> Tuple[str, ...]:
		"""Criteria scored per indicator and pressure through sub-criteria."""
		return tuple(c for c in self._crits if self.is_pressure_specific(c))

	def is_pressure_specific(self, crit: str) -> bool:
		return self._subs[crit] != (crit,)

	def subcriteria(self, crit: str) -> Tuple[str, ...]:
		if crit not in self._subs:
			raise InputContractError(f"template: unknown criterion {crit!r}")
		return self._subs[crit]

	def crit_of(self, subcrit: str) -> str:
		if subcrit not in self._crit_of:
			raise InputContractError(f"template: unknown sub-criterion {subcrit!r}")
		return self._crit_of[subcrit]

	def _entries_of(self, subcrit: str) -> List[TemplateEntry]:
		self.crit_of(subcrit)
		return [e for e in self._entries if e.subcrit == subcrit]

	def scores(self, subcrit: str) -> Tuple[float, ...]:
		return tuple(sorted({e.score for e in self._entries_of(subcrit)}))

	def weighted(self, subcrit: str, score: float) -> float:
		"""Weighted value of an allowed score."""
		for e in self._entries_of(subcrit):
			if e.score == score:
				return float(e.score * e.weight)
		raise InputContractError(f"template: score {score} is not defined for {subcrit!r}")

	def max_score(self, subcrit: str) -> float:
		return float(max(e.score * e.weight for e in self._entries_of(subcrit)))

	def total_score(self, crit: str) -> float:
		return float(sum(self.max_score(s) for s in self.subcriteria(crit)))

	def total_scores(self) -> Dict[str, float]:
		return {c: self.total_score(c) for c in self._crits}

	@classmethod
	def from_frame(cls, df: pd.DataFrame) -> "CriteriaTemplate":
		"""Build a template from a table with crit, subcrit, score[, weight, condition]."""
		if not isinstance(df, pd.DataFrame):
			raise InputContractError("template: has to be a DataFrame")
		for col in ("crit", "subcrit", "score"):
			if col not in df.columns:
				raise InputContractError(f"template: column {col!r} is missing")
		entries = []
		for row in df.to_dict("records"):
			weight = row.get("weight", 1.0)
			if weight is None or pd.isna(weight):
				weight = 1.0
			try:
				score = float(row["score"])
				weight = float(weight)
			except (TypeError, ValueError) as e:
				raise InputContractError(f"template: non-numeric score or weight for {row['subcrit']!r}") from e
			entries.append(TemplateEntry(
				crit=str(row["crit"]),
				subcrit=str(row["subcrit"]),
				score=score,
				weight=weight,
				condition=str(row.get("condition", "") or ""),
			))
		return cls(entries)

	def to_frame(self) -> pd.DataFrame:
		return pd.DataFrame(
			[(e.crit, e.subcrit, e.score, e.weight, e.condition) for e in self._entries],
			columns=list(self._COLUMNS),
		)

	def __repr__(self) -> str:
		return f"CriteriaTemplate(criteria={list(self._crits)}, entries={len(self._entries)})"


def default_template() -> CriteriaTemplate:
	"""
	Default rubric: C8 long-term trend, C9 sensitivity to pressures, C10
	robustness of the pressure response, C11 expert-scored management
	relevance. Returns a new instance on every call.
	"""
	E = TemplateEntry
	return CriteriaTemplate([
		E("C8", "C8", 0.0, 1.0, "no significant long-term trend"),
		E("C8", "C8", 1.0, 1.0, "significant long-term trend"),
		E("C9", "C9_1", 0.0, 1.0, "no significant response to the pressure"),
		E("C9", "C9_1", 1.0, 1.0, "significant response to the pressure"),
		E("C9", "C9_2", 0.0, 1.0, "explained deviance below the lower band"),
		E("C9", "C9_2", 1.0, 1.0, "explained deviance within the bands"),
		E("C9", "C9_2", 2.0, 1.0, "explained deviance above the upper band"),
		E("C10", "C10_1", 0.0, 1.0, "poor predictive performance on test data"),
		E("C10", "C10_1", 1.0, 1.0, "good predictive performance on test data"),
		E("C10", "C10_2", 0.0, 1.0, "temporal autocorrelation in residuals"),
		E("C10", "C10_2", 1.0, 1.0, "no temporal autocorrelation in residuals"),
		E("C10", "C10_3", 0.0, 1.0, "residuals deviate from normality"),
		E("C10", "C10_3", 1.0, 1.0, "residuals consistent with normality"),
		E("C11", "C11", 0.0, 1.0, "not relevant for management"),
		E("C11", "C11", 1.0, 1.0, "indirectly relevant for management"),
		E("C11", "C11", 2.0, 1.0, "directly relevant for management"),
	])
