import numpy as np
import pandas as pd
import pytest

from indperform.config import FitConfig, resolve_family
from indperform.errors import InputContractError
from indperform.validation import check_ind_press, check_input_vec, check_lengths, sanitize_name, unique_names


class TestNames:
	@pytest.mark.parametrize(
		"raw, expected",
		[
			("cod biomass", "cod_biomass"),
			("1st.index", "x1st_index"),
			("_hidden", "x_hidden"),
			("", "x"),
			("TZA-round", "TZA_round"),
		],
	)
	def test_sanitize(self, raw, expected):
		assert sanitize_name(raw) == expected

	def test_unique_suffixes_duplicates(self):
		assert unique_names(["a b", "a.b", "c"]) == ["a_b", "a_b_2", "c"]


class TestCheckIndPress:
	def test_dataframe(self):
		df = check_ind_press(pd.DataFrame({"a b": [1, 2, 3]}))
		assert df.columns.tolist() == ["a_b"]
		assert df.dtypes.iloc[0] == np.float64

	def test_vector_gets_default_name(self):
		df = check_ind_press([1.0, 2.0], "press_tbl", "press")
		assert df.columns.tolist() == ["press"]

	def test_matrix(self):
		df = check_ind_press(np.ones((4, 2)))
		assert df.columns.tolist() == ["ind1", "ind2"]

	def test_non_numeric(self):
		with pytest.raises(InputContractError, match="not numeric"):
			check_ind_press(pd.DataFrame({"a": ["x", "y"]}))

	def test_missing(self):
		with pytest.raises(InputContractError, match="missing"):
			check_ind_press(None)

	def test_does_not_modify_input(self):
		df = pd.DataFrame({"a b": [1, 2]})
		check_ind_press(df)
		assert df.columns.tolist() == ["a b"]


class TestVectors:
	def test_time_with_nan(self):
		with pytest.raises(InputContractError, match="time"):
			check_input_vec([2000.0, np.nan])

	def test_length_mismatch_names_argument(self):
		tbl = check_ind_press(pd.DataFrame({"a": [1.0, 2.0, 3.0]}))
		with pytest.raises(InputContractError, match="time"):
			check_lengths(tbl, np.arange(4.0))


class TestFitConfig:
	@pytest.mark.parametrize("train", [-0.5, 1.01])
	def test_train_range(self, train):
		with pytest.raises(InputContractError, match="train"):
			FitConfig(train=train)

	def test_small_k(self):
		with pytest.raises(InputContractError, match="k"):
			FitConfig(k=2)

	def test_unknown_family(self):
		with pytest.raises(InputContractError, match="family"):
			FitConfig(family="lognormal")

	def test_unknown_link(self):
		with pytest.raises(InputContractError):
			FitConfig(family="poisson", link="loglog")

	def test_family_is_fresh(self):
		a = resolve_family("poisson", "log")
		b = resolve_family("poisson", "log")
		assert a is not b
		assert type(a).__name__ == "Poisson"
