"""
Additive smooth-term model fitting around statsmodels' GLMGam.

The model for one unit is

	y ~ 1 [+ group] [+ x:group] + s(x, k)

with s a penalized cubic B-spline smooth (statsmodels BSplines). Complete
cases only are used. The penalty weight is chosen from a fixed grid by
minimum GCV so that refits are repeatable.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging
import warnings
import numpy as np
from statsmodels.gam.api import BSplines, GLMGam
from statsmodels.genmod import families

from indperform.config import FitConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GamFit:
	"""
	A fitted unit model.

	Attributes
	----------
	result : GLMGamResults
		The statsmodels results object.
	alpha : float
		Penalty weight selected by GCV.
	n_obs : int
		Number of complete observations used.
	levels : tuple | None
		Group levels seen in the training data (first one is the reference).
	interaction : bool
		Whether pressure x group terms were included.
	"""
	result: object
	alpha: float
	n_obs: int
	levels: Optional[Tuple[object, ...]] = None
	interaction: bool = False


def _family_support(family: families.Family) -> Tuple[str, float, float, bool]:
	"""Return (label, lower, upper, lower_open) of the response support."""
	if isinstance(family, (families.Gamma, families.InverseGaussian)):
		return ("strictly positive", 0.0, np.inf, True)
	if isinstance(family, (families.Poisson, families.NegativeBinomial, families.Tweedie)):
		return ("non-negative", 0.0, np.inf, False)
	if isinstance(family, families.Binomial):
		return ("within [0, 1]", 0.0, 1.0, False)
	return ("finite", -np.inf, np.inf, False)


class GamFitter:
	"""
	Fits and predicts one additive model per call; holds no per-fit state.
	"""

	def __init__(
		self,
		k: int,
		family: families.Family,
		alpha_grid: Sequence[float],
		ci_level: float = 0.95,
	) -> None:
		self.k = int(k)
		self.degree = min(3, self.k - 1)
		self.family = family
		self.alpha_grid = tuple(float(a) for a in alpha_grid)
		self.ci_level = float(ci_level)

	@classmethod
	def from_config(cls, cfg: FitConfig) -> "GamFitter":
		return cls(cfg.k, cfg.resolve_family(), cfg.alpha_grid, cfg.ci_level)

	def check_support(self, y: np.ndarray) -> None:
		"""Reject responses outside the support of the error family."""
		label, lo, hi, lo_open = _family_support(self.family)
		if lo_open:
			bad = np.any(y <= lo) or np.any(y > hi)
		else:
			bad = np.any(y < lo) or np.any(y > hi)
		if bad:
			name = type(self.family).__name__
			raise ValueError(f"response values have to be {label} for the {name} family")

	@staticmethod
	def _levels(group: np.ndarray) -> Tuple[object, ...]:
		return tuple(sorted(set(group.tolist()), key=lambda v: str(v)))

	@staticmethod
	def design(
		x: np.ndarray,
		group: Optional[np.ndarray],
		levels: Optional[Tuple[object, ...]],
		interaction: bool,
	) -> np.ndarray:
		"""
		Parametric design: intercept, non-reference group dummies and, with
		interaction, x times those dummies. Unknown levels map to the reference.
		"""
		n = x.shape[0]
		cols = [np.ones(n, dtype=np.float64)]
		if group is not None and levels is not None:
			dummies = []
			for lv in levels[1:]:
				dummies.append(np.asarray([g == lv for g in group], dtype=np.float64))
			cols.extend(dummies)
			if interaction:
				for d in dummies:
					cols.append(d * x)
		return np.column_stack(cols)

	def fit(
		self,
		y,
		x,
		group=None,
		interaction: bool = False,
		domain=None,
	) -> GamFit:
		"""
		Fit the unit model on complete cases.

		`domain` holds every x value the model will later be evaluated at; the
		outer spline knots are placed at its range.
		"""
		y = np.asarray(y, dtype=np.float64)
		x = np.asarray(x, dtype=np.float64)
		if y.shape != x.shape:
			raise ValueError("response and predictor lengths differ")
		ok = np.isfinite(y) & np.isfinite(x)
		g = None
		if group is not None:
			g = np.asarray(group, dtype=object)
		n_obs = int(ok.sum())
		if n_obs < self.k + 1:
			raise ValueError(f"only {n_obs} complete observations for a smooth term with k = {self.k}")
		yc = y[ok]
		xc = x[ok]
		self.check_support(yc)
		if np.ptp(xc) == 0.0:
			raise ValueError("the predictor is constant over the complete observations")
		dom = xc if domain is None else np.asarray(domain, dtype=np.float64)
		dom = dom[np.isfinite(dom)]
		lo = float(min(dom.min(), xc.min()))
		hi = float(max(dom.max(), xc.max()))

		levels = None
		gc = None
		if g is not None:
			gc = g[ok]
			levels = self._levels(gc)
		exog = self.design(xc, gc, levels, interaction)
		smoother = BSplines(
			xc[:, None],
			df=[self.k],
			degree=[self.degree],
			knot_kwds=[{"lower_bound": lo, "upper_bound": hi}],
		)

		best = None
		with warnings.catch_warnings():
			warnings.simplefilter("ignore")
			for alpha in self.alpha_grid:
				res = GLMGam(yc, exog=exog, smoother=smoother, alpha=alpha, family=self.family).fit()
				if not np.all(np.isfinite(res.params)):
					continue
				gcv = float(res.gcv)
				if not np.isfinite(gcv):
					continue
				if best is None or gcv < best[0]:
					best = (gcv, alpha, res)
		if best is None:
			raise FloatingPointError("no penalty weight produced a finite model fit")
		logger.debug("selected penalty weight %g (gcv %g, n=%d)", best[1], best[0], n_obs)
		return GamFit(result=best[2], alpha=float(best[1]), n_obs=n_obs, levels=levels, interaction=bool(interaction))

	def predict(self, fit: GamFit, x, group=None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
		"""
		Predicted mean with pointwise (ci_level) confidence limits on the
		response scale. Points with a missing predictor get NaN.
		"""
		x = np.asarray(x, dtype=np.float64)
		n = x.shape[0]
		pred = np.full(n, np.nan)
		ci_low = np.full(n, np.nan)
		ci_up = np.full(n, np.nan)
		ok = np.isfinite(x)
		if not np.any(ok):
			return pred, ci_low, ci_up
		g = None
		if group is not None:
			g = np.asarray(group, dtype=object)[ok]
		exog = self.design(x[ok], g, fit.levels, fit.interaction)
		with warnings.catch_warnings():
			warnings.simplefilter("ignore")
			frame = fit.result.get_prediction(exog=exog, exog_smooth=x[ok][:, None]).summary_frame(
				alpha=1.0 - self.ci_level
			)
		mean = frame["mean"].to_numpy(dtype=np.float64)
		a = frame["mean_ci_lower"].to_numpy(dtype=np.float64)
		b = frame["mean_ci_upper"].to_numpy(dtype=np.float64)
		# decreasing links swap the limits
		pred[ok] = mean
		ci_low[ok] = np.minimum(np.minimum(a, b), mean)
		ci_up[ok] = np.maximum(np.maximum(a, b), mean)
		return pred, ci_low, ci_up
