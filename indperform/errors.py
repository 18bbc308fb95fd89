"""
Error taxonomy shared by the fitting, metric and scoring layers.

  • InputContractError: malformed inputs, raised before any work starts
  • FitError: every unit of a batch failed
  • NormalizationError: zero or non-finite NRMSE denominator
  • PartialFitWarning: some (not all) units of a batch failed
"""

from __future__ import annotations


class InputContractError(ValueError):
	"""Raised when an argument violates the input contract (shape, type, range)."""


class FitError(RuntimeError):
	"""Raised when no unit of a fitting batch could be fitted."""


class NormalizationError(ArithmeticError):
	"""Raised when the NRMSE normalization denominator is zero or not finite."""


class PartialFitWarning(UserWarning):
	"""Emitted when some units of a fitting batch failed."""
