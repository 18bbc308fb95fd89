"""
Back-transformations for series that were transformed before modeling.

Named transformations map to fixed NumPy inverses; "other" takes a SymPy
parseable expression in x (e.g. "exp(x) - 1") which is lambdified once.
"""

from __future__ import annotations
from typing import Callable, Dict, Optional
import re
import numpy as np
import sympy as sp

from indperform.errors import InputContractError


BackTransform = Callable[[np.ndarray], np.ndarray]

_NAMED: Dict[str, BackTransform] = {
	"none": lambda x: x,
	"sqrt": lambda x: x ** 2,
	"4thrt": lambda x: x ** 4,
	"log": np.exp,
	"log10": lambda x: 10.0 ** x,
	"log2": lambda x: 2.0 ** x,
	"log1p": np.expm1,
	"arcsine": lambda x: np.sin(x) ** 2,
}

TRANSFORMATIONS = tuple(_NAMED) + ("other",)

_ALLOWED_FUNCS: Dict[str, object] = {
	"exp": sp.exp, "log": sp.log, "sqrt": sp.sqrt, "sin": sp.sin, "cos": sp.cos,
	"tan": sp.tan, "asin": sp.asin, "acos": sp.acos, "atan": sp.atan,
	"sinh": sp.sinh, "cosh": sp.cosh, "tanh": sp.tanh, "Abs": sp.Abs, "abs": sp.Abs,
	"pi": sp.pi, "E": sp.E,
}


def parse_back_transform(text: str) -> BackTransform:
	"""
	Parse a back-transform expression in the single variable x and return a
	vectorized NumPy callable. Unknown function heads or free symbols other
	than x are rejected.
	"""
	s = (text or "").strip().replace("^", "**")
	if s == "":
		raise InputContractError("trans_function: an expression in x is required for transformation='other'")
	x = sp.Symbol("x", real=True)
	local: Dict[str, object] = dict(_ALLOWED_FUNCS)
	local["x"] = x
	for head in set(re.findall(r"([A-Za-z_][A-Za-z_0-9]*)\s*\(", s)):
		if head not in _ALLOWED_FUNCS:
			raise InputContractError(f"trans_function: function not allowed: {head}")
	try:
		expr = sp.sympify(s, locals=local, convert_xor=True)
	except Exception as e:
		raise InputContractError(f"trans_function: cannot parse {text!r}: {e}") from e
	if not isinstance(expr, sp.Expr):
		raise InputContractError(f"trans_function: {text!r} is not an expression")
	extra = expr.free_symbols - {x}
	if extra:
		names = ", ".join(sorted(str(v) for v in extra))
		raise InputContractError(f"trans_function: only x may appear as variable, found {names}")
	f = sp.lambdify(x, expr, modules="numpy")

	def back(v: np.ndarray) -> np.ndarray:
		out = np.asarray(f(np.asarray(v, dtype=np.float64)), dtype=np.float64)
		return np.broadcast_to(out, np.shape(v)).astype(np.float64)

	return back


def back_transform_function(transformation: str = "none", trans_function: Optional[str] = None) -> BackTransform:
	"""Return the inverse of a named transformation (or of a custom one)."""
	if transformation not in TRANSFORMATIONS:
		raise InputContractError(f"transformation: {transformation!r} is not one of {list(TRANSFORMATIONS)}")
	if transformation == "other":
		return parse_back_transform(trans_function or "")
	return _NAMED[transformation]
