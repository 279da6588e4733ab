from sqlalchemy.orm import Session

from billiards.models.match_stats import MatchStat


def upsert_match_stats(db: Session, match_id: str, rows: list[dict]) -> dict:
    """Insert or overwrite one stat row per player for a match.

    Only flushes; the caller owns the transaction.
    """
    created = 0
    updated = 0

    # Deduplicate within the batch, last entry for a player wins
    uniq: dict[int, dict] = {}
    for r in rows:
        uniq[r["player_id"]] = r

    for pid, r in uniq.items():
        row = (
            db.query(MatchStat)
            .filter(
                MatchStat.match_id == match_id,
                MatchStat.player_id == pid,
            )
            .one_or_none()
        )

        if row is None:
            row = MatchStat(match_id=match_id, player_id=pid)
            db.add(row)
            created += 1
        else:
            updated += 1

        row.wins = int(r.get("wins") or 0)
        row.losses = int(r.get("losses") or 0)

    db.flush()
    return {"created": created, "updated": updated, "total": len(uniq)}
