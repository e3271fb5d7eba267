import pytest

from fintech_index import analytics
from fintech_index.defaults import default_dataset


@pytest.fixture
def records():
    return default_dataset()


class TestDashboardStats():
    def test_stats_for_latest_year(self, records):
        stats = analytics.dashboard_stats(records, 2024)
        assert stats.total_countries == 8
        assert stats.top_performer == "South Africa"
        assert stats.total_fintech_companies == 451
        assert stats.average_score == pytest.approx(67.83, abs=0.01)
        assert stats.average_fintech_companies == pytest.approx(56.38, abs=0.01)

    def test_year_over_year_change(self, records):
        stats = analytics.dashboard_stats(records, 2024)
        # 2023 average is 64.99
        assert stats.year_over_year_change == pytest.approx(4.4, abs=0.05)

    def test_no_previous_year(self, records):
        assert analytics.dashboard_stats(records, 2023).year_over_year_change == 0.0

    def test_empty_year(self, records):
        stats = analytics.dashboard_stats(records, 1999)
        assert stats.total_countries == 0
        assert stats.top_performer == "N/A"


class TestSubComponents():
    def test_three_components_ranked(self, records):
        cards = analytics.sub_components(records, 2024)
        assert [c.name for c in cards] == ["Financial Literacy", "Digital Infrastructure", "Investment"]
        literacy = cards[0]
        assert literacy.countries[0].name == "South Africa"
        assert literacy.countries[0].rank == 1
        assert len(literacy.countries) == 8
        investment = cards[2]
        assert investment.countries[0].name == "Nigeria"
        assert investment.change > 0


def test_yearly_trends_ascending(records):
    trends = analytics.yearly_trends(records)
    assert [t.year for t in trends] == [2023, 2024]
    assert trends[1].total_countries == 8
    assert trends[0].total_fintech_companies == 401


def test_available_years(records):
    assert analytics.available_years(records) == [2024, 2023]
