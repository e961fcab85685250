"""
NHL provider adapters against canned HTTP responses
"""
from unittest.mock import MagicMock, patch

import pytest
import requests

from app.nhl_client import (
    LegacyRosterProvider,
    ProviderError,
    SearchApiProvider,
    get_stats_provider,
)


def mock_response(payload=None, status=200, json_error=None):
    response = MagicMock()
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


SEARCH_PAYLOAD = [
    {"playerId": "8478402", "name": "Connor McDavid", "active": True},
    {"playerId": 8477934, "name": "Leon Draisaitl"},
    {"playerId": None, "name": "Broken Row"},
    "garbage",
]

STATS_PAYLOAD = {
    "stats": [{
        "type": {"displayName": "statsSingleSeason"},
        "splits": [{
            "season": "20242025",
            "stat": {"games": 20, "goals": 9, "assists": 21, "shots": 70},
        }],
    }],
}

LEGACY_TEAMS_PAYLOAD = {
    "teams": [
        {"id": 22, "roster": {"roster": [
            {"person": {"id": 8478402, "fullName": "Connor McDavid"}},
            {"person": {"id": 8477934, "fullName": "Leon Draisaitl"}},
        ]}},
        {"id": 10, "roster": {"roster": [
            {"person": {"id": 8479318, "fullName": "Auston Matthews"}},
        ]}},
        {"id": 99},
    ]
}


class TestSearchApiProvider:

    @patch("app.nhl_client.requests.get")
    def test_fetch_roster(self, mock_get):
        mock_get.return_value = mock_response(SEARCH_PAYLOAD)
        provider = SearchApiProvider(search_url="https://search.test/api/v1", limit=100)

        roster = provider.fetch_roster()

        assert [(e.id, e.name) for e in roster] == [
            (8478402, "Connor McDavid"),
            (8477934, "Leon Draisaitl"),
        ]
        url = mock_get.call_args[0][0]
        params = mock_get.call_args[1]["params"]
        assert url == "https://search.test/api/v1/search/player"
        assert params == {"culture": "en-us", "limit": 100, "q": "*"}

    @patch("app.nhl_client.requests.get")
    def test_fetch_roster_rejects_non_list(self, mock_get):
        mock_get.return_value = mock_response({"error": "nope"})
        with pytest.raises(ProviderError):
            SearchApiProvider().fetch_roster()

    @patch("app.nhl_client.requests.get")
    def test_http_error_becomes_provider_error(self, mock_get):
        mock_get.return_value = mock_response(status=503)
        with pytest.raises(ProviderError):
            SearchApiProvider().fetch_roster()

    @patch("app.nhl_client.requests.get")
    def test_network_error_becomes_provider_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("no route")
        with pytest.raises(ProviderError):
            SearchApiProvider().fetch_player_season_stats(1, "20242025")

    @patch("app.nhl_client.requests.get")
    def test_bad_json_becomes_provider_error(self, mock_get):
        mock_get.return_value = mock_response(json_error=ValueError("Expecting value"))
        with pytest.raises(ProviderError):
            SearchApiProvider().fetch_player_season_stats(1, "20242025")

    @patch("app.nhl_client.requests.get")
    def test_season_stats_are_normalized(self, mock_get):
        mock_get.return_value = mock_response(STATS_PAYLOAD)
        provider = SearchApiProvider(stats_url="https://stats.test/api/v1/")

        line = provider.fetch_player_season_stats(8478402, "20242025")

        assert line == {
            "name": None, "games": 20, "goals": 9, "assists": 21, "points": 30, "shots": 70,
        }
        assert mock_get.call_args[0][0] == "https://stats.test/api/v1/people/8478402/stats"
        assert mock_get.call_args[1]["params"] == {
            "stats": "statsSingleSeason", "season": "20242025",
        }

    @patch("app.nhl_client.requests.get")
    def test_missing_season_block_returns_none(self, mock_get):
        mock_get.return_value = mock_response({"stats": [{"splits": []}]})
        assert SearchApiProvider().fetch_player_season_stats(1, "20242025") is None

        mock_get.return_value = mock_response({})
        assert SearchApiProvider().fetch_player_season_stats(1, "20242025") is None


class TestLegacyRosterProvider:

    @patch("app.nhl_client.requests.get")
    def test_fetch_roster_flattens_teams(self, mock_get):
        mock_get.return_value = mock_response(LEGACY_TEAMS_PAYLOAD)

        roster = LegacyRosterProvider(stats_url="https://stats.test").fetch_roster()

        assert [e.id for e in roster] == [8478402, 8477934, 8479318]
        assert mock_get.call_args[1]["params"] == {"expand": "team.roster"}

    @patch("app.nhl_client.requests.get")
    def test_person_stats_pick_matching_season(self, mock_get):
        mock_get.return_value = mock_response({
            "people": [{
                "id": 8478402,
                "fullName": "Connor McDavid",
                "stats": [{"splits": [
                    {"season": "20232024", "stat": {"games": 76, "points": 132, "shots": 260}},
                    {"season": "20242025", "stat": {"games": 12, "points": 15, "shots": 38}},
                ]}],
            }]
        })

        line = LegacyRosterProvider().fetch_player_season_stats(8478402, "20242025")

        assert line["name"] == "Connor McDavid"
        assert (line["games"], line["points"], line["shots"]) == (12, 15, 38)

    @patch("app.nhl_client.requests.get")
    def test_no_people_returns_none(self, mock_get):
        mock_get.return_value = mock_response({"people": []})
        assert LegacyRosterProvider().fetch_player_season_stats(1, "20242025") is None


def test_get_stats_provider():
    assert isinstance(get_stats_provider("search"), SearchApiProvider)
    assert isinstance(get_stats_provider("legacy"), LegacyRosterProvider)
    with pytest.raises(ValueError):
        get_stats_provider("espn")


class TestMalformedPayloads:
    """Valid JSON with the wrong structure surfaces as ProviderError."""

    @pytest.mark.parametrize("payload", [
        {"stats": [None]},
        {"stats": {"splits": []}},
        {"stats": [{"splits": ["oops"]}]},
        {"stats": [{"splits": [{"stat": ["games", 3]}]}]},
        {"stats": [{"splits": [{"stat": {}}]}], "people": "Connor"},
    ])
    @patch("app.nhl_client.requests.get")
    def test_search_api_season_stats(self, mock_get, payload):
        mock_get.return_value = mock_response(payload)
        with pytest.raises(ProviderError):
            SearchApiProvider().fetch_player_season_stats(1, "20242025")

    @pytest.mark.parametrize("payload", [
        {"teams": ["oops"]},
        {"teams": [{"roster": ["oops"]}]},
        {"teams": [{"roster": {"roster": [None]}}]},
    ])
    @patch("app.nhl_client.requests.get")
    def test_legacy_roster(self, mock_get, payload):
        mock_get.return_value = mock_response(payload)
        with pytest.raises(ProviderError):
            LegacyRosterProvider().fetch_roster()

    @pytest.mark.parametrize("payload", [
        {"people": [None]},
        {"people": {"id": 1}},
        {"people": [{"stats": [{"splits": [7]}]}]},
    ])
    @patch("app.nhl_client.requests.get")
    def test_legacy_person_stats(self, mock_get, payload):
        mock_get.return_value = mock_response(payload)
        with pytest.raises(ProviderError):
            LegacyRosterProvider().fetch_player_season_stats(1, "20242025")
