"""
Fitting configuration and error-family resolution.

FitConfig validates every scalar parameter at construction so that a bad
argument fails before any data is split or any model is fitted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union
import copy
import numpy as np
from statsmodels.genmod import families
from statsmodels.genmod.families import links

from indperform.errors import InputContractError


FAMILIES = {
	"gaussian": families.Gaussian,
	"poisson": families.Poisson,
	"gamma": families.Gamma,
	"binomial": families.Binomial,
	"negative_binomial": families.NegativeBinomial,
	"inverse_gaussian": families.InverseGaussian,
	"tweedie": families.Tweedie,
}

LINKS = {
	"identity": links.Identity,
	"log": links.Log,
	"logit": links.Logit,
	"probit": links.Probit,
	"cloglog": links.CLogLog,
	"inverse_power": links.InversePower,
	"inverse_squared": links.InverseSquared,
	"sqrt": links.Sqrt,
}

FamilySpec = Union[str, families.Family]


def _default_alpha_grid() -> Tuple[float, ...]:
	return tuple(float(a) for a in 10.0 ** np.linspace(-3.0, 3.0, 13))


def resolve_family(family: FamilySpec, link: Optional[str] = None) -> families.Family:
	"""
	Return a fresh statsmodels Family for a name or a Family instance.
	"""
	if isinstance(family, families.Family):
		if link is not None:
			raise InputContractError("family: pass the link inside the Family object, not as link=")
		return copy.deepcopy(family)
	if not isinstance(family, str) or family.lower() not in FAMILIES:
		raise InputContractError(
			f"family: {family!r} is not a family object or one of {sorted(FAMILIES)}"
		)
	cls = FAMILIES[family.lower()]
	if link is None:
		return cls()
	if not isinstance(link, str) or link.lower() not in LINKS:
		raise InputContractError(f"link: {link!r} is not one of {sorted(LINKS)}")
	return cls(link=LINKS[link.lower()]())


@dataclass(frozen=True)
class FitConfig:
	"""
	Parameters shared by the trend and pressure-response fitters.

	train : float
		Proportion of time steps used for fitting, in [0, 1].
	random : bool
		Draw the training steps at random (seeded) instead of the first ones.
	seed : int | None
		Seed for the random split; None draws fresh entropy.
	k : int
		Basis dimension of the smooth term (>= 3).
	family, link :
		Error distribution and link, see resolve_family.
	alpha_grid : tuple[float, ...]
		Candidate penalty weights; the one with minimum GCV is kept.
	ci_level : float
		Coverage of the pointwise prediction intervals.
	n_jobs : int
		1 fits in-process; >1 fans out over a process pool.
	"""
	train: float = 1.0
	random: bool = False
	seed: Optional[int] = None
	k: int = 4
	family: FamilySpec = "gaussian"
	link: Optional[str] = None
	alpha_grid: Tuple[float, ...] = field(default_factory=_default_alpha_grid)
	ci_level: float = 0.95
	n_jobs: int = 1

	def __post_init__(self) -> None:
		if isinstance(self.train, bool) or not isinstance(self.train, (int, float, np.integer, np.floating)):
			raise InputContractError("train: has to be a number between 0 and 1")
		if not np.isfinite(self.train) or self.train < 0.0 or self.train > 1.0:
			raise InputContractError("train: has to be between 0 and 1 (proportion of all time steps)")
		if isinstance(self.k, bool) or not isinstance(self.k, (int, np.integer)) or self.k < 3:
			raise InputContractError("k: the basis dimension has to be an integer >= 3")
		if len(self.alpha_grid) == 0:
			raise InputContractError("alpha_grid: needs at least one penalty weight")
		for a in self.alpha_grid:
			if not np.isfinite(a) or a < 0.0:
				raise InputContractError("alpha_grid: penalty weights have to be finite and >= 0")
		if not 0.0 < float(self.ci_level) < 1.0:
			raise InputContractError("ci_level: has to be strictly between 0 and 1")
		if isinstance(self.n_jobs, bool) or not isinstance(self.n_jobs, (int, np.integer)) or self.n_jobs < 1:
			raise InputContractError("n_jobs: has to be a positive integer")
		# fail fast on unknown family or link names
		resolve_family(self.family, self.link)

	def resolve_family(self) -> families.Family:
		return resolve_family(self.family, self.link)
