from .base import BaseSplitUtils
from .time_split import TimeSplit, split_time, train_na_mask

__all__ = [
	"BaseSplitUtils",
	"TimeSplit",
	"split_time",
	"train_na_mask",
]
