"""Train/test partitioning of a time axis.

  • split_time: sequential (first round(train * n) steps) or seeded random split
  • train_na_mask: missing-value mask over the training time axis; with random
    splits the test steps lying inside the training period count as missing
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging
import numpy as np
import pandas as pd

from indperform.errors import InputContractError
from .base import BaseSplitUtils as U

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSplit:
	"""Disjoint, sorted train/test index arrays covering 0..n-1."""
	train: np.ndarray
	test: np.ndarray
	n: int
	random: bool = False

	@property
	def n_train(self) -> int:
		return int(self.train.shape[0])


def split_time(n: int, train: float, random: bool = False, seed: Optional[int] = None) -> TimeSplit:
	"""
	Split n time steps into training and test indices.
	"""
	n = int(n)
	if n < 0:
		raise InputContractError("n: number of time steps has to be >= 0")
	if train < 0.0 or train > 1.0:
		raise InputContractError("train: has to be between 0 and 1 (proportion of all time steps)")
	n_train = int(round(n * float(train)))
	if random:
		r = U.rng(seed)
		tr = np.sort(r.choice(n, size=n_train, replace=False)) if n_train > 0 else np.zeros(0, dtype=np.int64)
	else:
		tr = np.arange(n_train, dtype=np.int64)
	tr = U.to_1d_int(tr)
	te = U.complement(tr, n)
	logger.debug("split %d time steps: %d train, %d test (random=%s)", n, tr.shape[0], te.shape[0], random)
	return TimeSplit(train=tr, test=te, n=n, random=bool(random))


def train_na_mask(values: np.ndarray, time: np.ndarray, split: TimeSplit) -> pd.Series:
	"""
	Boolean missing mask over the training time axis, indexed by time.

	For random splits, test steps inside [min, max] of the training time are
	added as missing (they were not used for fitting but lie in range) and the
	mask is re-sorted by time.
	"""
	values = np.asarray(values, dtype=np.float64)
	time = np.asarray(time, dtype=np.float64)
	t_train = time[split.train]
	mask = pd.Series(np.isnan(values[split.train]), index=t_train, dtype=bool)
	if not split.random or split.n_train == 0 or split.test.shape[0] == 0:
		return mask
	t_test = time[split.test]
	inside = (t_test >= t_train.min()) & (t_test <= t_train.max())
	extra = pd.Series(np.ones(int(inside.sum()), dtype=bool), index=t_test[inside], dtype=bool)
	merged = pd.concat([mask, extra])
	order = np.argsort(merged.index.to_numpy(), kind="stable")
	return merged.iloc[order]
