"""
Prediction error metrics: package re-exports
"""

from .nrmse import BACK_TRANSFORM_TARGETS, METHODS, nrmse
from .transforms import TRANSFORMATIONS, back_transform_function, parse_back_transform

__all__ = [
	"BACK_TRANSFORM_TARGETS",
	"METHODS",
	"TRANSFORMATIONS",
	"back_transform_function",
	"nrmse",
	"parse_back_transform",
]
