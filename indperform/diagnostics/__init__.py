"""
Model diagnostics: package re-exports
"""

from .extract import (
	DIAGNOSTIC_COLUMNS,
	extract_diagnostics,
	get_p_values,
	model_diagnostics,
	smooth_edf,
	smooth_p_value,
)

__all__ = [
	"DIAGNOSTIC_COLUMNS",
	"extract_diagnostics",
	"get_p_values",
	"model_diagnostics",
	"smooth_edf",
	"smooth_p_value",
]
