"""
Criterion scoring and score summaries: package re-exports
"""

from .template import CriteriaTemplate, TemplateEntry, default_template
from .records import CriteriaPresence, IndicatorScore, PressureScore, ScoreTable
from .scorer import PRESSURE_SUBCRITERIA, scoring
from .summary import ScoreSummary, summary_sc

__all__ = [
	"CriteriaPresence",
	"CriteriaTemplate",
	"IndicatorScore",
	"PRESSURE_SUBCRITERIA",
	"PressureScore",
	"ScoreSummary",
	"ScoreTable",
	"TemplateEntry",
	"default_template",
	"scoring",
	"summary_sc",
]
