"""
Per-unit outcome envelopes for fitting batches.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Tuple
import pandas as pd


@dataclass(frozen=True)
class FitOutcome:
	"""Result of one unit: a value when ok, otherwise the error message."""
	key: Hashable
	ok: bool
	message: str
	value: Optional[object] = None


@dataclass(frozen=True)
class FitBatch:
	"""Outcomes of a batch, in the order the units were submitted."""
	outcomes: Tuple[FitOutcome, ...]

	@property
	def successes(self) -> Tuple[FitOutcome, ...]:
		return tuple(o for o in self.outcomes if o.ok)

	@property
	def failures(self) -> Tuple[FitOutcome, ...]:
		return tuple(o for o in self.outcomes if not o.ok)

	@property
	def all_failed(self) -> bool:
		return len(self.outcomes) > 0 and len(self.successes) == 0

	def value_of(self, key: Hashable) -> Optional[object]:
		for o in self.outcomes:
			if o.key == key:
				return o.value
		raise KeyError(key)

	def failure_frame(self, labels: Dict[Hashable, Dict[str, object]]) -> pd.DataFrame:
		"""
		Table of failed units: the identity columns from `labels[key]` plus
		`error_message`.
		"""
		rows = []
		for o in self.failures:
			row = dict(labels.get(o.key, {}))
			row["error_message"] = o.message
			rows.append(row)
		return pd.DataFrame(rows)
