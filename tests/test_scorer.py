import numpy as np
import pandas as pd
import pytest

from indperform.errors import InputContractError
from indperform.scoring import CriteriaPresence, CriteriaTemplate, TemplateEntry, scoring


@pytest.fixture
def trend_tbl():
	return pd.DataFrame({"ind": ["cod", "herring"], "p_val": [0.001, 0.3]})


@pytest.fixture
def mod_tbl():
	return pd.DataFrame({
		"ind": ["cod", "cod", "herring", "herring"],
		"press": ["fishing", "temp", "fishing", "temp"],
		"p_val": [0.001, 0.2, 0.04, np.nan],
		"expl_dev": [0.7, 0.9, 0.3, np.nan],
		"nrmse": [0.5, 0.1, 1.2, np.nan],
		"tac": pd.array([False, False, True, pd.NA], dtype="boolean"),
		"ks_p": [0.6, 0.9, 0.01, np.nan],
	})


def _press(table, ind, press):
	row = next(r for r in table.rows if r.ind == ind)
	return next(p for p in row.press_spec if p.press == press)


class TestScoring:
	def test_trend_criterion(self, template, trend_tbl):
		tbl = scoring(template, trend_tbl=trend_tbl)
		assert tbl.presence is CriteriaPresence.GENERAL
		assert [r.criteria["C8"] for r in tbl.rows] == [1.0, 0.0]

	def test_pressure_subscores(self, template, mod_tbl):
		tbl = scoring(template, mod_tbl=mod_tbl, press_type={"fishing": "Fishing", "temp": "Climate"})
		assert tbl.presence is CriteriaPresence.PRESSURE
		cf = _press(tbl, "cod", "fishing")
		assert cf.press_type == "Fishing"
		assert dict(cf.subscores) == {"C9_1": 1.0, "C9_2": 2.0, "C10_1": 1.0, "C10_2": 1.0, "C10_3": 1.0}
		hf = _press(tbl, "herring", "fishing")
		assert dict(hf.subscores) == {"C9_1": 1.0, "C9_2": 1.0, "C10_1": 0.0, "C10_2": 0.0, "C10_3": 0.0}

	def test_non_significant_pressure_is_all_zero(self, template, mod_tbl):
		tbl = scoring(template, mod_tbl=mod_tbl)
		assert _press(tbl, "cod", "temp").total == 0.0
		# failed model
		assert _press(tbl, "herring", "temp").total == 0.0

	def test_expert_scores(self, template, trend_tbl, mod_tbl):
		experts = pd.DataFrame({"ind": ["cod", "herring"], "C11": [2, 0]})
		tbl = scoring(template, trend_tbl=trend_tbl, mod_tbl=mod_tbl, expert_scores=experts)
		assert tbl.presence is CriteriaPresence.BOTH
		assert tbl.general_criteria == ("C8", "C11")
		assert tbl.rows[0].criteria == {"C8": 1.0, "C11": 2.0}

	def test_expert_mapping(self, template):
		tbl = scoring(template, expert_scores={"a": {"C11": 1}, "b": {"C11": 2}})
		assert tbl.inds == ["a", "b"]
		assert tbl.general_criteria == ("C11",)

	def test_undefined_expert_score(self, template):
		with pytest.raises(InputContractError, match="C11"):
			scoring(template, expert_scores={"a": {"C11": 5}})

	def test_missing_expert_score(self, template, trend_tbl):
		with pytest.raises(InputContractError, match="herring"):
			scoring(template, trend_tbl=trend_tbl, expert_scores={"cod": {"C11": 1}})

	def test_nothing_scored(self, template):
		assert scoring(template).presence is CriteriaPresence.NONE

	def test_flat_frame_contract(self, template, trend_tbl, mod_tbl):
		df = scoring(template, trend_tbl=trend_tbl, mod_tbl=mod_tbl).to_frame()
		assert df.columns.tolist() == ["ind", "C8", "press_spec_sc"]
		cell = df.loc[0, "press_spec_sc"]
		assert cell.columns.tolist() == ["press", "press_type", "C9_1", "C9_2", "C10_1", "C10_2", "C10_3"]


class TestTemplateDriven:
	def test_weights_and_clamping(self, mod_tbl):
		t = CriteriaTemplate([
			TemplateEntry("C9", "C9_1", 0.0, 2.0),
			TemplateEntry("C9", "C9_1", 1.0, 2.0),
			TemplateEntry("C9", "C9_2", 0.0),
			TemplateEntry("C9", "C9_2", 1.0),
		])
		tbl = scoring(t, mod_tbl=mod_tbl)
		assert tbl.press_subcriteria == ("C9_1", "C9_2")
		# level 2 of C9_2 is clamped to the highest defined score
		assert dict(_press(tbl, "cod", "fishing").subscores) == {"C9_1": 2.0, "C9_2": 1.0}

	def test_template_without_pressure_criteria(self, mod_tbl):
		t = CriteriaTemplate([TemplateEntry("C8", "C8", 0.0), TemplateEntry("C8", "C8", 1.0)])
		with pytest.raises(InputContractError, match="pressure-specific"):
			scoring(t, mod_tbl=mod_tbl)

	def test_mod_tbl_columns(self, template):
		with pytest.raises(InputContractError, match="nrmse"):
			scoring(template, mod_tbl=pd.DataFrame({"ind": ["a"], "press": ["p"], "p_val": [0.1]}))
