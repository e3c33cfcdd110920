import math

import pytest

from bayesnet.htest import create_htest


def test_basic_fields():
    result = create_htest(1.5, "mi", 0.2, 3, None)
    assert result.statistic == 1.5
    assert result.test == "mi"
    assert result.p_value == 0.2
    assert result.null_value == 0.0
    assert result.method == ""
    assert result.data_name == ""
    assert result.parameter == {"df": 3.0}


@pytest.mark.parametrize(
    "test", ["cor", "mc-cor", "smc-cor", "zf", "mc-zf", "smc-zf", "jt", "mc-jt", "smc-jt"]
)
def test_two_sided_tests(test):
    assert create_htest(0.1, test, 0.5, 1, None).alternative == "two.sided"


@pytest.mark.parametrize("test", ["mi", "x2", "mc-mi", "sp-mi"])
def test_one_sided_tests(test):
    assert create_htest(0.1, test, 0.5, 1, None).alternative == "greater"


def test_monte_carlo_without_df():
    result = create_htest(2.0, "mc-mi", 0.01, math.nan, 100)
    assert result.parameter == {"Monte Carlo samples": 100.0}


def test_no_parameters():
    assert create_htest(2.0, "mc-cor", 0.01, None, None).parameter is None
    assert create_htest(2.0, "mc-cor", 0.01, math.nan, None).parameter is None


def test_df_and_monte_carlo():
    result = create_htest(2.0, "sp-mi", 0.01, 4.5, 200)
    assert result.parameter == {"df": 4.5, "Monte Carlo samples": 200.0}
    assert list(result.parameter) == ["df", "Monte Carlo samples"]