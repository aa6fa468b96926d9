from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from chpp_snapshot.db.enums import EntityKind

ApiItem = dict[str, Any]

# Regional indicator A (U+1F1E6) minus ord("A").
_REGIONAL_INDICATOR_OFFSET = 127397


def flag_emoji(country_code: str | None) -> str | None:
    """Two-letter country code -> flag emoji made of two regional indicator symbols."""

    if not country_code or len(country_code) != 2:
        return None
    code = country_code.upper()
    if not all("A" <= c <= "Z" for c in code):
        return None
    return "".join(chr(ord(c) + _REGIONAL_INDICATOR_OFFSET) for c in code)


def parse_rate(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, int | float):
        return float(value)
    text = str(value).strip().replace(",", ".")
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def flatten_world_details(leagues: Iterable[ApiItem]) -> dict[EntityKind, list[ApiItem]]:
    """
    Expand a world-details league list into reference batches.

    Each league item carries its country, the country's currency and the league
    language inline. Currencies have no id of their own; the country id is used.
    Every batch is de-duplicated by natural id (first occurrence wins).
    """

    languages: dict[int, ApiItem] = {}
    currencies: dict[int, ApiItem] = {}
    countries: dict[int, ApiItem] = {}
    out_leagues: dict[int, ApiItem] = {}

    for item in leagues:
        league_id = _as_int(item.get("LeagueID"))
        if league_id is None:
            continue

        # CHPP spells it both ways depending on the endpoint version.
        language_id = _as_int(item.get("LanguageId", item.get("LanguageID")))
        language_name = _as_str(item.get("LanguageName"))
        if language_id is not None and language_name is not None:
            languages.setdefault(language_id, {"id": language_id, "name": language_name})

        country = item.get("Country") or {}
        country_id = _as_int(country.get("CountryID"))
        currency_name = _as_str(country.get("CurrencyName"))

        currency_id: int | None = None
        if country_id is not None and currency_name is not None and "CurrencyRate" in country:
            currency_id = country_id
            currencies.setdefault(
                currency_id,
                {
                    "id": currency_id,
                    "name": currency_name,
                    "rate": parse_rate(country.get("CurrencyRate")),
                    "symbol": currency_name,
                },
            )

        if country_id is not None:
            code = _as_str(country.get("CountryCode"))
            countries.setdefault(
                country_id,
                {
                    "id": country_id,
                    "name": _as_str(country.get("CountryName")) or "",
                    "currency_id": currency_id,
                    "country_code": code,
                    "date_format": _as_str(country.get("DateFormat")),
                    "time_format": _as_str(country.get("TimeFormat")),
                    "flag": flag_emoji(code),
                },
            )

        out_leagues.setdefault(
            league_id,
            {
                "id": league_id,
                "name": _as_str(item.get("LeagueName")) or "",
                "country_id": country_id,
                "language_id": language_id,
                "short_name": _as_str(item.get("ShortName")),
                "english_name": _as_str(item.get("EnglishName")),
                "continent": _as_str(item.get("Continent")),
                "zone_name": _as_str(item.get("ZoneName")),
                "season": _as_int(item.get("Season")),
                "season_offset": _as_int(item.get("SeasonOffset")),
                "match_round": _as_int(item.get("MatchRound")),
                "national_team_id": _as_int(item.get("NationalTeamId")),
                "u20_team_id": _as_int(item.get("U20TeamId")),
                "active_teams": _as_int(item.get("ActiveTeams")),
                "active_users": _as_int(item.get("ActiveUsers")),
                "number_of_levels": _as_int(item.get("NumberOfLevels")),
            },
        )

    return {
        EntityKind.LANGUAGE: list(languages.values()),
        EntityKind.CURRENCY: list(currencies.values()),
        EntityKind.COUNTRY: list(countries.values()),
        EntityKind.LEAGUE: list(out_leagues.values()),
    }
