import pytest

from orm_study.exceptions import EntityNotFoundError
from orm_study.orm.repository.member import MemberRepository
from orm_study.orm.schema import Member, Team
from orm_study.orm.search import AgeStatistics, MemberDTO, MemberSearchCondition, Pageable, UserDTO


@pytest.fixture
def member_repository(db_session):
    return MemberRepository(db_session)


def _usernames(rows) -> list:
    return [row.username for row in rows]


class TestSearch:
    def test_search_by_team_name(self, member_repository, sample_members):
        rows = member_repository.search(MemberSearchCondition(team_name="teamA"))

        assert _usernames(rows) == ["member1", "member2"]
        assert {row.team_name for row in rows} == {"teamA"}
        assert rows[0].member_id == sample_members[0].id
        assert rows[0].team_id == sample_members[0].team.id

    def test_search_by_age_goe(self, member_repository, sample_members):
        rows = member_repository.search(MemberSearchCondition(age_goe=25))

        assert _usernames(rows) == ["member3", "member4"]

    def test_search_by_username(self, member_repository, sample_members):
        rows = member_repository.search(MemberSearchCondition(username="member3"))

        assert _usernames(rows) == ["member3"]
        assert rows[0].team_name == "teamB"

    def test_search_by_age_loe(self, member_repository, sample_members):
        rows = member_repository.search(MemberSearchCondition(age_loe=20))

        assert _usernames(rows) == ["member1", "member2"]

    def test_search_combined_condition(self, member_repository, sample_members):
        condition = MemberSearchCondition(team_name="teamB", age_goe=35, age_loe=40)

        assert _usernames(member_repository.search(condition)) == ["member4"]

    def test_empty_condition_returns_every_member(self, member_repository, sample_members):
        rows = member_repository.search(MemberSearchCondition())

        assert _usernames(rows) == ["member1", "member2", "member3", "member4"]

    def test_member_without_team_is_kept(self, member_repository, sample_members, db_session):
        db_session.add(Member("loner", 50))
        db_session.flush()

        rows = member_repository.search(MemberSearchCondition(age_goe=50))

        assert len(rows) == 1
        assert rows[0].username == "loner"
        assert rows[0].team_id is None
        assert rows[0].team_name is None

    def test_search_is_idempotent(self, member_repository, sample_members):
        condition = MemberSearchCondition(team_name="teamA", age_loe=20)

        assert member_repository.search(condition) == member_repository.search(condition)


class TestSearchPage:
    @pytest.mark.parametrize("method", ["search_page_simple", "search_page_complex"])
    def test_first_page(self, member_repository, sample_members, method):
        page = getattr(member_repository, method)(MemberSearchCondition(), Pageable(offset=0, page_size=3))

        assert _usernames(page.content) == ["member1", "member2", "member3"]
        assert page.total_elements == 4

    @pytest.mark.parametrize("method", ["search_page_simple", "search_page_complex"])
    def test_pages_cover_every_row_once(self, member_repository, sample_members, method):
        search = getattr(member_repository, method)
        pageable = Pageable(offset=0, page_size=3)
        collected = []
        while True:
            page = search(MemberSearchCondition(), pageable)
            collected.extend(page.content)
            if not page.has_next:
                break
            pageable = pageable.next()

        assert _usernames(collected) == ["member1", "member2", "member3", "member4"]

    @pytest.mark.parametrize(
        ("condition", "expected_total"),
        [
            (MemberSearchCondition(), 4),
            (MemberSearchCondition(team_name="teamB"), 2),
            (MemberSearchCondition(age_loe=25), 2),
            (MemberSearchCondition(username="member3"), 1),
            (MemberSearchCondition(team_name="teamA", age_goe=15), 1),
            (MemberSearchCondition(username="nobody"), 0),
        ],
        ids=["all", "team_name", "age_loe", "username", "team_and_age", "no_match"],
    )
    @pytest.mark.parametrize(
        ("offset", "page_size"),
        [(0, 1), (0, 3), (0, 4), (0, 10), (1, 2), (2, 2), (3, 3), (4, 2), (8, 2)],
    )
    def test_simple_and_complex_agree(
        self, member_repository, sample_members, condition, expected_total, offset, page_size
    ):
        pageable = Pageable(offset=offset, page_size=page_size)

        simple = member_repository.search_page_simple(condition, pageable)
        complex_ = member_repository.search_page_complex(condition, pageable)

        assert simple.content == complex_.content
        assert simple.total_elements == complex_.total_elements == expected_total

    def test_filtered_total(self, member_repository, sample_members):
        page = member_repository.search_page_simple(MemberSearchCondition(team_name="teamB"), Pageable(page_size=1))

        assert _usernames(page.content) == ["member3"]
        assert page.total_elements == 2


class TestFetches:
    def test_find_one_by_username(self, member_repository, sample_members):
        assert member_repository.find_one_by_username("member2").age == 20

    def test_find_one_by_username_not_found(self, member_repository, sample_members):
        with pytest.raises(EntityNotFoundError):
            member_repository.find_one_by_username("nobody")

    def test_get_by_username_missing_returns_none(self, member_repository, sample_members):
        assert member_repository.get_by_username("nobody") is None

    def test_get_first(self, member_repository, sample_members):
        assert member_repository.get_first().username == "member1"

    def test_fetch_results(self, member_repository, sample_members):
        members, total = member_repository.fetch_results(offset=1, limit=2)

        assert _usernames(members) == ["member2", "member3"]
        assert total == 4


class TestSortingAndPaging:
    def test_sort_with_nulls_last(self, member_repository, db_session):
        db_session.add_all([Member(None, 100), Member("member5", 100), Member("member6", 100)])
        db_session.flush()

        assert _usernames(member_repository.get_by_age_sorted(100)) == ["member5", "member6", None]

    def test_page_by_username_desc(self, member_repository, sample_members):
        assert _usernames(member_repository.get_page_by_username_desc(1, 2)) == ["member3", "member2"]


class TestAggregation:
    def test_age_statistics(self, member_repository, sample_members):
        assert member_repository.age_statistics() == AgeStatistics(count=4, sum=100, avg=25.0, max=40, min=10)

    def test_average_age_by_team(self, member_repository, sample_members):
        assert member_repository.average_age_by_team() == [("teamA", 15.0), ("teamB", 35.0)]


class TestJoins:
    def test_get_by_team_name(self, member_repository, sample_members):
        assert _usernames(member_repository.get_by_team_name("teamA")) == ["member1", "member2"]

    def test_join_on_filter_keeps_every_member(self, member_repository, sample_members):
        rows = member_repository.get_with_team_name_on_filter("teamA")

        assert [member.username for member, _ in rows] == ["member1", "member2", "member3", "member4"]
        assert [None if team is None else team.name for _, team in rows] == ["teamA", "teamA", None, None]

    def test_theta_join(self, member_repository, sample_members, db_session):
        db_session.add_all([Member("teamA"), Member("teamB"), Member("teamC")])
        db_session.flush()

        assert _usernames(member_repository.get_theta_join_by_team_name()) == ["teamA", "teamB"]

    def test_outer_join_unrelated(self, member_repository, sample_members, db_session):
        db_session.add(Member("teamA"))
        db_session.flush()

        rows = member_repository.get_outer_join_unrelated()

        assert len(rows) == 5
        assert [team for _, team in rows[:4]] == [None, None, None, None]
        assert rows[4][1].name == "teamA"

    def test_get_with_team_loads_team(self, member_repository, sample_members, db_session):
        db_session.expunge_all()

        member = member_repository.get_with_team("member1")

        assert "team" in member.__dict__
        assert member.team.name == "teamA"


class TestSubqueries:
    def test_oldest(self, member_repository, sample_members):
        assert _usernames(member_repository.get_oldest()) == ["member4"]

    def test_at_or_above_average(self, member_repository, sample_members):
        assert _usernames(member_repository.get_at_or_above_average_age()) == ["member3", "member4"]

    def test_older_than(self, member_repository, sample_members):
        assert _usernames(member_repository.get_older_than(10)) == ["member2", "member3", "member4"]

    def test_usernames_with_average(self, member_repository, sample_members):
        rows = member_repository.get_usernames_with_average_age()

        assert [username for username, _ in rows] == ["member1", "member2", "member3", "member4"]
        assert {avg for _, avg in rows} == {25.0}


class TestCaseConstantConcat:
    def test_age_labels(self, member_repository, sample_members):
        assert member_repository.get_age_labels() == ["ten", "twenty", "other", "other"]

    def test_age_range_labels(self, member_repository, sample_members):
        assert member_repository.get_age_range_labels() == ["0-20", "0-20", "21-30", "other"]

    def test_constant(self, member_repository, sample_members):
        rows = member_repository.get_usernames_with_constant("A")

        assert rows[0] == ("member1", "A")
        assert {value for _, value in rows} == {"A"}

    def test_concat(self, member_repository, sample_members):
        assert member_repository.get_username_age_strings("member1") == ["member1_10"]


class TestProjections:
    def test_usernames(self, member_repository, sample_members):
        assert member_repository.get_usernames() == ["member1", "member2", "member3", "member4"]

    def test_tuples(self, member_repository, sample_members):
        assert member_repository.get_username_age_tuples()[1] == ("member2", 20)

    def test_member_dtos(self, member_repository, sample_members):
        assert member_repository.get_member_dtos()[0] == MemberDTO(username="member1", age=10)

    def test_user_dtos_use_alias_and_subquery(self, member_repository, sample_members):
        dtos = member_repository.get_user_dtos()

        assert dtos[0] == UserDTO(name="member1", age=40)
        assert len(dtos) == 4


class TestDynamicFilters:
    @pytest.mark.parametrize("method", ["search_by_username_age", "search_by_where_params"])
    @pytest.mark.parametrize(
        ("username", "age", "expected"),
        [
            ("member1", 10, ["member1"]),
            ("member1", None, ["member1"]),
            (None, 30, ["member3"]),
            (None, None, ["member1", "member2", "member3", "member4"]),
            ("member1", 20, []),
        ],
    )
    def test_dynamic_filter(self, member_repository, sample_members, method, username, age, expected):
        assert _usernames(getattr(member_repository, method)(username, age)) == expected


class TestBulkStatements:
    def test_bulk_update_refreshes_loaded_members(self, member_repository, sample_members):
        updated = member_repository.bulk_update_username_for_age_lt(28, "unregistered")

        assert updated == 2
        assert sample_members[0].username == "unregistered"
        assert sample_members[1].username == "unregistered"
        assert sample_members[2].username == "member3"

    def test_bulk_delete(self, member_repository, sample_members):
        deleted = member_repository.bulk_delete_age_lt(18)

        assert deleted == 1
        assert member_repository.count() == 3
        assert member_repository.get_by_username("member1") is None

    def test_bulk_update_without_match(self, member_repository, sample_members):
        assert member_repository.bulk_update_username_for_age_lt(0, "nobody") == 0


def test_team_members_follow_insertion_order(db_session, sample_members):
    team = db_session.get(Team, sample_members[0].team.id)

    assert [member.username for member in team.members] == ["member1", "member2"]
