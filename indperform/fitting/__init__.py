"""
Model fitting: package re-exports

Public API:
  model_trend, ind_init, model_gam, GamFitter, GamFit, FitOutcome, FitBatch, run_batch
"""

from .outcome import FitBatch, FitOutcome
from .batch import raise_if_all_failed, report_failures, run_batch
from .gam import GamFit, GamFitter
from .trend import model_trend
from .pressure import ind_init, model_gam

__all__ = [
	"FitBatch",
	"FitOutcome",
	"GamFit",
	"GamFitter",
	"ind_init",
	"model_gam",
	"model_trend",
	"raise_if_all_failed",
	"report_failures",
	"run_batch",
]
