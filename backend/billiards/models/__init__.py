# Import models here so SQLAlchemy registers them before create_all
from billiards.models.players import Player  # noqa: F401
from billiards.models.matches import Match  # noqa: F401
from billiards.models.match_stats import MatchStat  # noqa: F401
from billiards.models.payer_rotation import PayerRotation  # noqa: F401
from billiards.models.badges import Badge, PlayerBadge  # noqa: F401
