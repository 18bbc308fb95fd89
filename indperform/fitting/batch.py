"""
Fan-out/fan-in over independent fitting units.

Every unit runs inside its own try/except so that one failing model never
aborts or corrupts its siblings. With n_jobs > 1 the units are dispatched to
a spawn-context process pool; completions arrive in any order and are
re-associated with their unit key.
"""

from __future__ import annotations
from typing import Callable, Dict, Hashable, List, Sequence, Tuple
import logging
import multiprocessing as mp
import warnings

from indperform.errors import FitError, PartialFitWarning
from .outcome import FitBatch, FitOutcome

logger = logging.getLogger(__name__)


def _error_text(e: Exception) -> str:
	msg = str(e).strip()
	if msg == "":
		return type(e).__name__
	return f"{type(e).__name__}: {msg}"


def run_unit(func: Callable[[object], object], key: Hashable, payload: object) -> FitOutcome:
	"""Run one unit and always return an outcome."""
	logger.debug("fitting unit %s", key)
	try:
		value = func(payload)
	except Exception as e:
		logger.debug("unit %s failed: %s", key, e)
		return FitOutcome(key=key, ok=False, message=_error_text(e), value=None)
	return FitOutcome(key=key, ok=True, message="ok", value=value)


def _run_packed(args: Tuple[Callable[[object], object], Hashable, object]) -> FitOutcome:
	return run_unit(*args)


def run_batch(
	func: Callable[[object], object],
	units: Sequence[Tuple[Hashable, object]],
	n_jobs: int = 1,
) -> FitBatch:
	"""
	Apply `func` to every (key, payload) unit and collect the outcomes in
	submission order. `func` has to be picklable when n_jobs > 1.
	"""
	keys = [k for k, _ in units]
	if len(set(keys)) != len(keys):
		raise ValueError("unit keys have to be unique")
	outs: List[FitOutcome] = []
	if int(n_jobs) <= 1 or len(units) <= 1:
		for key, payload in units:
			outs.append(run_unit(func, key, payload))
	else:
		ctx = mp.get_context("spawn")
		procs = min(int(n_jobs), len(units))
		with ctx.Pool(processes=procs) as pool:
			packed = [(func, key, payload) for key, payload in units]
			for o in pool.imap_unordered(_run_packed, packed):
				outs.append(o)
	by_key: Dict[Hashable, FitOutcome] = {}
	for o in outs:
		by_key[o.key] = o
	batch = FitBatch(tuple(by_key[k] for k in keys))
	logger.info("fitted %d units, %d failed", len(keys), len(batch.failures))
	return batch


def raise_if_all_failed(batch: FitBatch, message: str) -> None:
	"""Total failure of a batch is fatal."""
	if batch.all_failed:
		first = batch.outcomes[0].message
		raise FitError(f"{message} First error: {first}")


def report_failures(batch: FitBatch, labels: Dict[Hashable, Dict[str, object]], what: str) -> None:
	"""
	Log and warn about partially failed batches, one entry per failed unit.
	"""
	if len(batch.failures) == 0:
		return
	lines = []
	for o in batch.failures:
		ident = ", ".join(f"{k}={v}" for k, v in labels.get(o.key, {}).items())
		lines.append(f"{ident}: {o.message}")
		logger.warning("fitting failed for %s (%s)", ident, o.message)
	text = f"For the following {what} the fitting procedure failed:\n" + "\n".join(lines)
	warnings.warn(text, PartialFitWarning, stacklevel=3)
