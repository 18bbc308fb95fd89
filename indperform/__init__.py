"""
Top-level re-exports of the indicator performance pipeline:

	model_trend / ind_init -> model_gam -> scoring -> summary_sc

with nrmse and the diagnostics extractors available on their own.
"""

from .errors import FitError, InputContractError, NormalizationError, PartialFitWarning
from .config import FitConfig, resolve_family
from .fitting import ind_init, model_gam, model_trend
from .diagnostics import extract_diagnostics, get_p_values, model_diagnostics
from .metrics import nrmse
from .scoring import (
	CriteriaPresence,
	CriteriaTemplate,
	ScoreSummary,
	ScoreTable,
	TemplateEntry,
	default_template,
	scoring,
	summary_sc,
)

__all__ = [
	"FitError", "InputContractError", "NormalizationError", "PartialFitWarning",
	"FitConfig", "resolve_family",
	"model_trend", "ind_init", "model_gam",
	"extract_diagnostics", "get_p_values", "model_diagnostics",
	"nrmse",
	"CriteriaPresence", "CriteriaTemplate", "ScoreSummary", "ScoreTable", "TemplateEntry",
	"default_template", "scoring", "summary_sc",
]
