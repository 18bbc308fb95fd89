"""
Typed score records.

A ScoreTable holds one IndicatorScore per indicator. Indicator-level
criteria (e.g. C8, C11) are a mapping on the indicator; pressure-specific
sub-criteria (e.g. C9_1 ... C10_3) live in an ordered collection of
PressureScore records. Which groups were scored is explicit, see
CriteriaPresence.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple
import re
import numpy as np
import pandas as pd

from indperform.errors import InputContractError
from indperform.frames import object_column

_CRIT_CODE = re.compile(r"^C\d+$")
_PRESS_ID_COLS = ("ind", "press", "id", "press_type")


class CriteriaPresence(Enum):
	"""Which criterion groups a score table carries."""
	NONE = "none"
	GENERAL = "general"
	PRESSURE = "pressure"
	BOTH = "both"


@dataclass(frozen=True)
class PressureScore:
	"""Sub-criterion scores of one indicator for one pressure."""
	press: str
	press_type: Optional[str]
	subscores: Mapping[str, float]

	@property
	def total(self) -> float:
		return float(sum(self.subscores.values()))


@dataclass(frozen=True)
class IndicatorScore:
	"""All scores of one indicator; None marks a group that was not scored."""
	ind: str
	criteria: Optional[Mapping[str, float]] = None
	press_spec: Optional[Tuple[PressureScore, ...]] = None


@dataclass(frozen=True)
class ScoreTable:
	"""
	Scores of all indicators.

	general_criteria : codes of the indicator-level criteria scored (may be empty)
	press_subcriteria : codes of the pressure-specific sub-criteria scored, or
		None when pressure-specific scoring was not run
	"""
	rows: Tuple[IndicatorScore, ...]
	general_criteria: Tuple[str, ...] = ()
	press_subcriteria: Optional[Tuple[str, ...]] = None

	def __post_init__(self) -> None:
		inds = [r.ind for r in self.rows]
		if len(set(inds)) != len(inds):
			raise InputContractError("scores: indicator names have to be unique")
		for r in self.rows:
			if self.general_criteria and (r.criteria is None or any(c not in r.criteria for c in self.general_criteria)):
				raise InputContractError(f"scores: indicator {r.ind!r} lacks indicator-level criterion scores")
			seen = set()
			for p in r.press_spec or ():
				if p.press in seen:
					raise InputContractError(f"scores: {r.ind!r} lists pressure {p.press!r} more than once")
				seen.add(p.press)
			if self.press_subcriteria is not None:
				for p in r.press_spec or ():
					missing = [s for s in self.press_subcriteria if s not in p.subscores]
					if missing:
						raise InputContractError(f"scores: {r.ind!r} / {p.press!r} lacks sub-criteria {missing}")

	@property
	def presence(self) -> CriteriaPresence:
		general = len(self.general_criteria) > 0
		pressure = self.press_subcriteria is not None
		if general and pressure:
			return CriteriaPresence.BOTH
		if general:
			return CriteriaPresence.GENERAL
		if pressure:
			return CriteriaPresence.PRESSURE
		return CriteriaPresence.NONE

	@property
	def inds(self) -> List[str]:
		return [r.ind for r in self.rows]

	def general_frame(self) -> pd.DataFrame:
		"""ind plus one column per indicator-level criterion."""
		data: Dict[str, list] = {"ind": self.inds}
		for c in self.general_criteria:
			data[c] = [float(r.criteria[c]) for r in self.rows]
		return pd.DataFrame(data, columns=["ind", *self.general_criteria])

	def pressure_long(self) -> pd.DataFrame:
		"""
		Expand the indicator -> pressure relation into one row per
		(indicator, pressure): ind, press, press_type, sub-criteria.
		"""
		subs = list(self.press_subcriteria or ())
		rows = []
		for r in self.rows:
			for p in r.press_spec or ():
				row = {"ind": r.ind, "press": p.press, "press_type": p.press_type}
				for s in subs:
					row[s] = float(p.subscores[s])
				rows.append(row)
		return pd.DataFrame(rows, columns=["ind", "press", "press_type", *subs])

	@classmethod
	def from_frame(cls, df: pd.DataFrame) -> "ScoreTable":
		"""
		Read the flat score table: an `ind` column, indicator-level criterion
		columns named by criterion code (C<n>) and, optionally, a
		`press_spec_sc` column holding per indicator a DataFrame (or a list of
		records) with press, [press_type,] and one column per sub-criterion.
		"""
		if not isinstance(df, pd.DataFrame):
			raise InputContractError("scores_tbl: has to be a DataFrame")
		if "ind" not in df.columns:
			raise InputContractError("scores_tbl: column 'ind' is missing")
		general = tuple(c for c in df.columns if isinstance(c, str) and _CRIT_CODE.match(c))
		for c in general:
			if not pd.api.types.is_numeric_dtype(df[c]) or pd.api.types.is_bool_dtype(df[c]):
				raise InputContractError(f"scores_tbl: criterion column {c!r} is not numeric")
		has_press = "press_spec_sc" in df.columns
		subs: Optional[List[str]] = [] if has_press else None
		rows = []
		for rec in df.to_dict("records"):
			ind = rec["ind"]
			if not isinstance(ind, str):
				raise InputContractError("scores_tbl: 'ind' has to hold indicator names (str)")
			crits = {c: float(rec[c]) for c in general} if general else None
			press_spec = None
			if has_press:
				press_spec = cls._read_press_spec(ind, rec["press_spec_sc"], subs)
			rows.append(IndicatorScore(ind=ind, criteria=crits, press_spec=press_spec))
		return cls(
			rows=tuple(rows),
			general_criteria=general,
			press_subcriteria=tuple(subs) if subs is not None else None,
		)

	@staticmethod
	def _read_press_spec(ind: str, cell, subs: List[str]) -> Tuple[PressureScore, ...]:
		if cell is None or (isinstance(cell, float) and np.isnan(cell)):
			return ()
		if isinstance(cell, pd.DataFrame):
			tbl = cell
		else:
			tbl = pd.DataFrame(list(cell))
		if tbl.shape[0] == 0:
			return ()
		if "press" not in tbl.columns:
			raise InputContractError(f"scores_tbl: press_spec_sc of {ind!r} lacks a 'press' column")
		for c in tbl.columns:
			if c in _PRESS_ID_COLS:
				continue
			if not pd.api.types.is_numeric_dtype(tbl[c]) or pd.api.types.is_bool_dtype(tbl[c]):
				raise InputContractError(f"scores_tbl: sub-criterion {c!r} of {ind!r} is not numeric")
			if c not in subs:
				subs.append(c)
		out = []
		for rec in tbl.to_dict("records"):
			pt = rec.get("press_type")
			if pt is not None and not isinstance(pt, str) and pd.isna(pt):
				pt = None
			sc = {c: float(rec[c]) for c in tbl.columns if c not in _PRESS_ID_COLS}
			out.append(PressureScore(press=str(rec["press"]), press_type=pt, subscores=sc))
		return tuple(out)

	def to_frame(self) -> pd.DataFrame:
		"""Inverse of from_frame."""
		data: Dict[str, object] = {"ind": self.inds}
		for c in self.general_criteria:
			data[c] = [float(r.criteria[c]) for r in self.rows]
		if self.press_subcriteria is not None:
			subs = list(self.press_subcriteria)
			cells = []
			for r in self.rows:
				recs = []
				for p in r.press_spec or ():
					rec = {"press": p.press, "press_type": p.press_type}
					rec.update({s: p.subscores[s] for s in subs})
					recs.append(rec)
				cells.append(pd.DataFrame(recs, columns=["press", "press_type", *subs]))
			data["press_spec_sc"] = object_column(cells)
		return pd.DataFrame(data)
