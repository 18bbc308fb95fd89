"""Shared fixtures: small synthetic indicator/pressure series and score tables."""

import numpy as np
import pandas as pd
import pytest

from indperform.scoring import default_template

# a short penalty grid keeps the model tests fast
FAST_GRID = (0.01, 1.0, 100.0)


@pytest.fixture
def years():
	return np.arange(1991, 2021, dtype=np.float64)


@pytest.fixture
def ind_tbl(years):
	rng = np.random.default_rng(42)
	t = years - years[0]
	return pd.DataFrame({
		"cod": 5.0 + 0.2 * t + rng.normal(0.0, 0.3, t.shape[0]),
		"herring": 10.0 + 2.0 * np.sin(t / 5.0) + rng.normal(0.0, 0.3, t.shape[0]),
	})


@pytest.fixture
def press_tbl(years):
	rng = np.random.default_rng(7)
	t = years - years[0]
	return pd.DataFrame({
		"fishing": 1.0 + 0.1 * t + rng.normal(0.0, 0.05, t.shape[0]),
		"temp": 8.0 + rng.normal(0.0, 1.0, t.shape[0]),
	})


@pytest.fixture
def template():
	return default_template()


def press_frame(rows):
	"""Per-pressure sub-score table of one indicator."""
	return pd.DataFrame(rows, columns=["press", "press_type", "C9_1", "C9_2", "C10_1", "C10_2", "C10_3"])


@pytest.fixture
def general_scores():
	return pd.DataFrame({
		"ind": ["cod", "herring", "sprat"],
		"C8": [1.0, 0.0, 1.0],
		"C11": [2.0, 1.0, 0.0],
	})


@pytest.fixture
def pressure_cells():
	return [
		press_frame([
			("fishing", "Fishing", 1.0, 2.0, 1.0, 1.0, 1.0),
			("temp", "Climate", 1.0, 1.0, 0.0, 1.0, 0.0),
			("salinity", "Climate", 0.0, 0.0, 0.0, 0.0, 0.0),
		]),
		press_frame([
			("fishing", "Fishing", 0.0, 0.0, 0.0, 0.0, 0.0),
			("temp", "Climate", 1.0, 0.0, 1.0, 0.0, 1.0),
			("salinity", "Climate", 0.0, 0.0, 0.0, 0.0, 0.0),
		]),
		press_frame([
			("fishing", "Fishing", 0.0, 0.0, 0.0, 0.0, 0.0),
			("temp", "Climate", 0.0, 0.0, 0.0, 0.0, 0.0),
			("salinity", "Climate", 0.0, 0.0, 0.0, 0.0, 0.0),
		]),
	]


@pytest.fixture
def both_scores(general_scores, pressure_cells):
	df = general_scores.copy()
	cells = np.empty(len(pressure_cells), dtype=object)
	for i, c in enumerate(pressure_cells):
		cells[i] = c
	df["press_spec_sc"] = cells
	return df


@pytest.fixture
def pressure_scores(both_scores):
	return both_scores[["ind", "press_spec_sc"]].copy()
