import pytest

from orm_study.exceptions import EntityNotFoundError
from orm_study.orm.repository import GenericRepository, repository_context
from orm_study.orm.schema import Team


@pytest.fixture
def team_repository(db_session):
    return GenericRepository(db_session, Team)


def test_add_and_get_by_id(team_repository, db_session):
    team = team_repository.add(Team(name="teamA"))
    db_session.flush()

    assert team_repository.get_by_id(team.id) is team
    assert team_repository.exists(team.id)


def test_find_by_id_not_found(team_repository):
    with pytest.raises(EntityNotFoundError) as exc_info:
        team_repository.find_by_id(999999)

    assert exc_info.value.entity_name == "Team"
    assert "999999" in str(exc_info.value)


def test_get_all_orders_by_primary_key(team_repository, db_session):
    team_repository.add_all([Team(name="teamA"), Team(name="teamB"), Team(name="teamC")])
    db_session.flush()

    assert [team.name for team in team_repository.get_all()] == ["teamA", "teamB", "teamC"]
    assert [team.name for team in team_repository.get_all(limit=1, offset=1)] == ["teamB"]


def test_count_and_delete_by_id(team_repository, db_session):
    teams = team_repository.add_all([Team(name="teamA"), Team(name="teamB")])
    db_session.flush()

    assert team_repository.count() == 2
    assert team_repository.delete_by_id(teams[0].id) is True
    assert team_repository.delete_by_id(999999) is False
    db_session.flush()
    assert team_repository.count() == 1


def test_update_merges_detached_entity(team_repository, db_session):
    team = team_repository.add(Team(name="teamA"))
    db_session.flush()
    db_session.expunge(team)
    team.name = "renamed"

    merged = team_repository.update(team)
    db_session.flush()

    assert merged is not team
    assert team_repository.get_by_id(team.id).name == "renamed"


def test_repository_context_commits(session_factory, db_engine):
    with repository_context(session_factory, Team) as (repo, uow):
        repo.add(Team(name="teamA"))
        uow.commit()

    with repository_context(session_factory, Team) as (repo, _):
        assert [team.name for team in repo.get_all()] == ["teamA"]


def test_repository_context_rolls_back_on_error(session_factory, db_engine):
    with pytest.raises(RuntimeError), repository_context(session_factory, Team) as (repo, uow):
        repo.add(Team(name="teamA"))
        uow.flush()
        raise RuntimeError

    with repository_context(session_factory, Team) as (repo, _):
        assert repo.count() == 0
