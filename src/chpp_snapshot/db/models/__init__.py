from chpp_snapshot.db.models.ingestion.current_download import CurrentDownload
from chpp_snapshot.db.models.ingestion.download import Download
from chpp_snapshot.db.models.ingestion.download_entry import DownloadEntry
from chpp_snapshot.db.models.reference.country import Country
from chpp_snapshot.db.models.reference.cup import Cup
from chpp_snapshot.db.models.reference.currency import Currency
from chpp_snapshot.db.models.reference.language import Language
from chpp_snapshot.db.models.reference.league import League
from chpp_snapshot.db.models.reference.region import Region
from chpp_snapshot.db.models.reference.user import User
from chpp_snapshot.db.models.roster.avatar import Avatar
from chpp_snapshot.db.models.roster.player import Player
from chpp_snapshot.db.models.roster.team import Team

__all__ = [
    "Avatar",
    "Country",
    "Cup",
    "Currency",
    "CurrentDownload",
    "Download",
    "DownloadEntry",
    "Language",
    "League",
    "Player",
    "Region",
    "Team",
    "User",
]
