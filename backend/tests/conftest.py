import pytest

from stockllm.services.report_sections import PORTFOLIO_REPORT_7, PORTFOLIO_REPORT_8


CANONICAL_REPORT = """1. *Summary & Portfolio Characteristics*
The portfolio is concentrated in large-cap Indian equities with a small gold sleeve.

2. *Goal Alignment Grade*
B+
3. *Goal Alignment Percentage*
78%
4. *Risk Meter*
Moderate
5. *Estimated 5-Year Return*
9-11% CAGR under base-case assumptions.
6. *Where You Are Strong*
Good diversification across index funds.
7. *Where You Need to Improve*
Add a debt allocation for stability.
8. *Asset Allocation Breakdown*
Asset Name | Type | Amount Invested | Current Value
---- | ---- | ---- | ----
NIFTYIETF-EQ | Stock | 10000 | 12000
GOLDBEES-EQ | Gold | 5000 | 5400"""


@pytest.fixture
def canonical_report():
    """A well-formed eight section report."""
    return CANONICAL_REPORT


@pytest.fixture
def report_format_7():
    return PORTFOLIO_REPORT_7


@pytest.fixture
def report_format_8():
    return PORTFOLIO_REPORT_8
