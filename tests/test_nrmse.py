import numpy as np
import pytest

from indperform.errors import InputContractError, NormalizationError
from indperform.metrics import back_transform_function, nrmse, parse_back_transform


OBS = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
PRED = np.array([1.5, 2.0, 2.5, 4.0, 5.5])


class TestMethods:
	def test_sd(self):
		rmse = np.sqrt(np.mean((PRED - OBS) ** 2))
		assert nrmse(PRED, OBS, "sd") == pytest.approx(rmse / np.std(OBS, ddof=1))

	def test_mean(self):
		rmse = np.sqrt(np.mean((PRED - OBS) ** 2))
		assert nrmse(PRED, OBS, "mean") == pytest.approx(rmse / 3.0)

	def test_maxmin(self):
		rmse = np.sqrt(np.mean((PRED - OBS) ** 2))
		assert nrmse(PRED, OBS, "maxmin") == pytest.approx(rmse / 4.0)

	def test_iq(self):
		rmse = np.sqrt(np.mean((PRED - OBS) ** 2))
		assert nrmse(PRED, OBS, "iq") == pytest.approx(rmse / 2.0)

	def test_perfect_prediction_is_zero(self):
		assert nrmse(OBS, OBS) == 0.0


class TestMissingValues:
	def test_incomplete_pairs_dropped(self):
		p = np.array([1.0, np.nan, 3.0, 4.0])
		o = np.array([1.0, 2.0, np.nan, 5.0])
		expected = np.sqrt(np.mean(np.array([0.0, 1.0]))) / np.std([1.0, 5.0], ddof=1)
		assert nrmse(p, o) == pytest.approx(expected)

	def test_no_complete_pair(self):
		assert np.isnan(nrmse([np.nan, 1.0], [2.0, np.nan]))

	def test_single_pair_sd(self):
		assert np.isnan(nrmse([1.0], [2.0], "sd"))


class TestErrors:
	def test_zero_denominator(self):
		with pytest.raises(NormalizationError):
			nrmse([1.0, 2.0, 3.0], [2.0, 2.0, 2.0], "sd")

	def test_zero_mean(self):
		with pytest.raises(NormalizationError):
			nrmse([1.0, -1.0], [1.0, -1.0], "mean")

	def test_length_mismatch(self):
		with pytest.raises(InputContractError, match="length"):
			nrmse([1.0, 2.0], [1.0, 2.0, 3.0])

	def test_unknown_method(self):
		with pytest.raises(InputContractError, match="method"):
			nrmse(PRED, OBS, "median")

	def test_unknown_transformation(self):
		with pytest.raises(InputContractError, match="transformation"):
			nrmse(PRED, OBS, transformation="boxcox")

	def test_other_requires_expression(self):
		with pytest.raises(InputContractError, match="trans_function"):
			nrmse(PRED, OBS, transformation="other")


class TestBackTransform:
	def test_log_both(self):
		lo, lp = np.log(OBS), np.log(PRED)
		assert nrmse(lp, lo, transformation="log") == pytest.approx(nrmse(PRED, OBS))

	def test_obs_only(self):
		lo = np.log(OBS)
		assert nrmse(PRED, lo, transformation="log", back_transform="obs") == pytest.approx(nrmse(PRED, OBS))

	def test_pred_only(self):
		sp_ = np.sqrt(PRED)
		assert nrmse(sp_, OBS, transformation="sqrt", back_transform="pred") == pytest.approx(nrmse(PRED, OBS))

	def test_custom_expression_matches_named(self):
		x = np.array([0.1, 0.5, 2.0])
		np.testing.assert_allclose(parse_back_transform("exp(x) - 1")(x), back_transform_function("log1p")(x))

	@pytest.mark.parametrize("method", ["sd", "mean", "maxmin", "iq"])
	def test_scale_invariance(self, method):
		# rescaling both series leaves the normalized error unchanged
		a = nrmse(PRED, OBS, method)
		b = nrmse(PRED, OBS, method, transformation="other", trans_function="10*x")
		assert b == pytest.approx(a)

	def test_constant_expression_broadcasts(self):
		out = parse_back_transform("2")(np.array([1.0, 2.0, 3.0]))
		assert out.tolist() == [2.0, 2.0, 2.0]

	@pytest.mark.parametrize("text", ["__import__('os')", "y + 1", "x +"])
	def test_rejected_expressions(self, text):
		with pytest.raises(InputContractError):
			parse_back_transform(text)
