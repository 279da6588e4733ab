from billiards.core.errors import (
    STATUS_BY_KIND,
    ErrorKind,
    business_rule,
    database_error,
    duplicate,
    no_players_available,
    not_found,
)


def test_every_kind_has_a_status():
    assert set(STATUS_BY_KIND) == set(ErrorKind)


def test_helpers_carry_kind_and_status():
    assert not_found("Player", 7).status_code == 404
    assert not_found("Player", 7).message == "Player not found with identifier: 7"
    assert duplicate("Player", "name", "A").status_code == 409
    assert business_rule("nope", rule="x").status_code == 422
    assert no_players_available().kind == ErrorKind.NO_PLAYERS_AVAILABLE

    err = database_error("insert", ValueError("boom"))
    assert err.status_code == 500
    assert err.details["original_error"] == "boom"
