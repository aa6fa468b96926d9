from __future__ import annotations

from chpp_snapshot.db.enums import EntityKind
from chpp_snapshot.ingestion.world import flag_emoji, flatten_world_details, parse_rate

LEAGUES = [
    {
        "LeagueID": "1",
        "LeagueName": "Sverige",
        "ShortName": "Sverige",
        "Continent": "Europe",
        "ZoneName": "Central Europe",
        "EnglishName": "Sweden",
        "Season": "91",
        "SeasonOffset": "0",
        "MatchRound": "7",
        "LanguageId": "2",
        "LanguageName": "Svenska",
        "NumberOfLevels": "8",
        "Country": {
            "CountryID": "1",
            "CountryName": "Sverige",
            "CurrencyName": "Kronor",
            "CurrencyRate": "1,0",
            "CountryCode": "se",
            "DateFormat": "yyyy-MM-dd",
            "TimeFormat": "HH:mm",
        },
    },
    {
        "LeagueID": "2",
        "LeagueName": "England",
        "LanguageID": "2",
        "LanguageName": "Svenska",
        "Country": {"CountryID": "2", "CountryName": "England", "CountryCode": "GB"},
    },
    {"LeagueID": "1", "LeagueName": "Duplicate", "Country": {}},
]


def test_flatten_world_details_builds_deduplicated_batches() -> None:
    batches = flatten_world_details(LEAGUES)

    assert batches[EntityKind.LANGUAGE] == [{"id": 2, "name": "Svenska"}]
    assert batches[EntityKind.CURRENCY] == [
        {"id": 1, "name": "Kronor", "rate": 1.0, "symbol": "Kronor"}
    ]

    countries = {c["id"]: c for c in batches[EntityKind.COUNTRY]}
    assert countries[1]["currency_id"] == 1
    assert countries[1]["flag"] == "\U0001f1f8\U0001f1ea"
    assert countries[2]["currency_id"] is None
    assert countries[2]["flag"] == "\U0001f1ec\U0001f1e7"

    leagues = batches[EntityKind.LEAGUE]
    assert [(lg["id"], lg["name"]) for lg in leagues] == [(1, "Sverige"), (2, "England")]
    assert leagues[0]["season"] == 91
    assert leagues[0]["language_id"] == 2
    assert leagues[0]["country_id"] == 1


def test_flag_emoji_rejects_bad_codes() -> None:
    assert flag_emoji("SE") == "\U0001f1f8\U0001f1ea"
    assert flag_emoji(None) is None
    assert flag_emoji("SWE") is None
    assert flag_emoji("1A") is None


def test_parse_rate_accepts_comma_decimals() -> None:
    assert parse_rate("2,5") == 2.5
    assert parse_rate("2.5") == 2.5
    assert parse_rate("") is None
    assert parse_rate("n/a") is None
