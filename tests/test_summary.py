import numpy as np
import pandas as pd
import pytest

from indperform.errors import InputContractError
from indperform.frames import percent_of_max
from indperform.scoring import CriteriaPresence, ScoreTable, summary_sc

from conftest import press_frame


class TestStateA:
	def test_overview_is_input_plus_percentages(self, general_scores, template):
		s = summary_sc(general_scores, template)
		assert s.presence is CriteriaPresence.GENERAL
		expected = general_scores.assign(**{"C8_in%": [100.0, 0.0, 100.0], "C11_in%": [100.0, 50.0, 0.0]})
		pd.testing.assert_frame_equal(s.overview, expected)

	def test_no_pressure_views(self, general_scores, template):
		s = summary_sc(general_scores, template)
		assert s.subcriteria_per_press is None
		assert s.scores_matrix.columns.tolist() == ["C8", "C11"]
		assert s.scores_matrix.index.tolist() == ["cod", "herring", "sprat"]
		assert s.scores_matrix.index.name == "ind"


class TestStateB:
	def test_averages_over_significant_pressures(self, pressure_scores, template):
		s = summary_sc(pressure_scores, template)
		assert s.presence is CriteriaPresence.PRESSURE
		ov = s.overview.set_index("ind")
		assert ov.columns.tolist() == ["nr_sign_press", "C9", "C10", "C9_in%", "C10_in%"]
		assert ov["nr_sign_press"].tolist() == [2, 1, 0]
		assert ov.loc["cod", "C9"] == 2.5
		assert ov.loc["cod", "C10"] == 2.0
		assert ov.loc["cod", "C9_in%"] == 83.0
		assert ov.loc["herring", "C9"] == 1.0
		assert ov.loc["herring", "C10_in%"] == 67.0

	def test_zero_fill(self, pressure_scores, template):
		ov = summary_sc(pressure_scores, template).overview.set_index("ind")
		assert ov.loc["sprat"].tolist() == [0, 0.0, 0.0, 0.0, 0.0]

	def test_missing_policy(self, pressure_scores, template):
		ov = summary_sc(pressure_scores, template, missing_press="missing").overview.set_index("ind")
		assert ov.loc["sprat", "nr_sign_press"] == 0
		assert np.isnan(ov.loc["sprat", "C9"])
		assert np.isnan(ov.loc["sprat", "C10_in%"])

	def test_matrix_has_only_pressure_columns(self, pressure_scores, template):
		m = summary_sc(pressure_scores, template).scores_matrix
		assert m.columns.tolist() == [
			"fishing_C9", "fishing_C10", "temp_C9", "temp_C10", "salinity_C9", "salinity_C10",
		]


class TestStateC:
	def test_column_order(self, both_scores, template):
		ov = summary_sc(both_scores, template).overview
		assert ov.columns.tolist() == [
			"ind", "nr_sign_press", "C8", "C9", "C10", "C11",
			"C8_in%", "C9_in%", "C10_in%", "C11_in%",
		]

	def test_indicator_without_significant_pressure_is_kept(self, both_scores, template):
		ov = summary_sc(both_scores, template).overview
		assert ov["ind"].tolist() == ["cod", "herring", "sprat"]
		sprat = ov.set_index("ind").loc["sprat"]
		assert sprat["nr_sign_press"] == 0
		assert sprat["C9"] == 0.0 and sprat["C10"] == 0.0
		assert sprat["C9_in%"] == 0.0 and sprat["C10_in%"] == 0.0
		assert sprat["C8"] == 1.0 and sprat["C8_in%"] == 100.0

	def test_per_pressure_view(self, both_scores, template):
		pp = summary_sc(both_scores, template).subcriteria_per_press
		assert list(zip(pp["ind"], pp["press"])) == [("cod", "fishing"), ("cod", "temp"), ("herring", "temp")]
		assert pp.columns.tolist() == [
			"ind", "press", "press_type", "C9_1", "C9_2", "C10_1", "C10_2", "C10_3",
			"C9", "C10", "C9_in%", "C10_in%",
		]
		row = pp.iloc[1]
		assert row["C9"] == 2.0 and row["C9_in%"] == 67.0
		assert row["C10"] == 1.0 and row["C10_in%"] == 33.0

	def test_matrix(self, both_scores, template):
		m = summary_sc(both_scores, template).scores_matrix
		assert m.index.tolist() == ["cod", "herring", "sprat"]
		assert m.columns.tolist()[:2] == ["C8", "C11"]
		assert m.loc["cod", "fishing_C9"] == 3.0
		assert m.loc["herring", "fishing_C9"] == 0.0
		assert m.loc["herring", "temp_C10"] == 2.0

	def test_untested_pressure_stays_missing(self, template):
		df = pd.DataFrame({"ind": ["a", "b"], "C8": [1.0, 0.0]})
		cells = np.empty(2, dtype=object)
		cells[0] = press_frame([
			("p1", "Fishing", 1.0, 1.0, 1.0, 1.0, 1.0),
			("p2", "Climate", 1.0, 0.0, 0.0, 0.0, 0.0),
		])
		cells[1] = press_frame([("p1", "Fishing", 0.0, 0.0, 0.0, 0.0, 0.0)])
		df["press_spec_sc"] = cells
		for policy in ("zero", "missing"):
			m = summary_sc(df, template, missing_press=policy).scores_matrix
			assert m.loc["b", "p1_C9"] == 0.0
			assert np.isnan(m.loc["b", "p2_C9"])
			assert np.isnan(m.loc["b", "p2_C10"])

	def test_missing_indicator_level_score_zero_filled(self, both_scores, template):
		df = both_scores.copy()
		df.loc[1, "C8"] = np.nan
		ov = summary_sc(df, template).overview.set_index("ind")
		assert ov.loc["herring", "C8"] == 0.0
		assert ov.loc["herring", "C8_in%"] == 0.0
		kept = summary_sc(df, template, missing_press="missing").overview.set_index("ind")
		assert np.isnan(kept.loc["herring", "C8"])

	def test_repeated_pressure_rejected(self, template):
		df = pd.DataFrame({"ind": ["a"]})
		cells = np.empty(1, dtype=object)
		cells[0] = press_frame([
			("p1", "Fishing", 1.0, 1.0, 1.0, 1.0, 1.0),
			("p1", "Fishing", 1.0, 0.0, 0.0, 0.0, 0.0),
		])
		df["press_spec_sc"] = cells
		with pytest.raises(InputContractError, match="more than once"):
			summary_sc(df, template)

	def test_recomputed_per_call(self, both_scores, template):
		a = summary_sc(both_scores, template)
		b = summary_sc(both_scores, template)
		pd.testing.assert_frame_equal(a.overview, b.overview)
		assert a.overview is not b.overview

	def test_accepts_score_table(self, both_scores, template):
		s = summary_sc(ScoreTable.from_frame(both_scores), template)
		pd.testing.assert_frame_equal(s.overview, summary_sc(both_scores, template).overview)


class TestEdgeCases:
	def test_no_criteria(self, template):
		s = summary_sc(pd.DataFrame({"ind": ["a", "b"]}), template)
		assert s.presence is CriteriaPresence.NONE
		assert s.overview.columns.tolist() == ["ind"]
		assert s.subcriteria_per_press is None
		assert s.scores_matrix.shape == (2, 0)

	def test_percent_above_maximum_is_reported(self, template):
		s = summary_sc(pd.DataFrame({"ind": ["a"], "C8": [2.0]}), template)
		assert s.overview.loc[0, "C8_in%"] == 200.0

	def test_percent_rounds_half_to_even(self):
		assert percent_of_max(1.0, 8.0) == 12.0
		assert percent_of_max(3.0, 8.0) == 38.0

	def test_unknown_criterion(self, template):
		with pytest.raises(InputContractError, match="C12"):
			summary_sc(pd.DataFrame({"ind": ["a"], "C12": [1.0]}), template)

	def test_unknown_policy(self, general_scores, template):
		with pytest.raises(InputContractError, match="missing_press"):
			summary_sc(general_scores, template, missing_press="drop")

	def test_template_required(self, general_scores):
		with pytest.raises(InputContractError, match="template"):
			summary_sc(general_scores, None)
