from __future__ import annotations
from typing import Optional
import numpy as np

"""
BaseSplitUtils
--------------
NumPy-only helpers shared by the time splitters:

  • Seeded PRNG construction (PCG64) for reproducible draws
  • Stable 1-D int64 coercion for index vectors
  • Complement of an index set within 0..n-1

All helpers are side-effect free and return new arrays.
"""


class BaseSplitUtils:
	@staticmethod
	def rng(seed: Optional[int]) -> np.random.Generator:
		"""
		Return a NumPy Generator seeded with PCG64 (fresh entropy when seed is None).
		"""
		if seed is None:
			return np.random.Generator(np.random.PCG64())
		return np.random.Generator(np.random.PCG64(int(seed)))

	@staticmethod
	def to_1d_int(x) -> np.ndarray:
		"""
		Coerce an input array-like to a contiguous 1-D int64 array.
		"""
		a = np.asarray(x)
		if a.ndim != 1:
			a = a.reshape(-1)
		return a.astype(np.int64, copy=False)

	@staticmethod
	def complement(idx: np.ndarray, n: int) -> np.ndarray:
		"""
		Return the sorted indices of 0..n-1 that are not in `idx`.
		"""
		keep = np.ones(int(n), dtype=bool)
		keep[idx] = False
		return np.nonzero(keep)[0].astype(np.int64, copy=False)
