"""Unit tests for UserRepository."""

import pytest

from cmdb.models.role import Role
from cmdb.repositories.user import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs the lookups authentication relies on."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    def test_get_by_username(self, repo):
        user = UserFactory(username="alice")

        fetched = repo.get_by_username("alice")
        assert fetched is not None
        assert fetched.id == user.id

    def test_get_by_username_ignores_surrounding_whitespace(self, repo):
        UserFactory(username="bob")
        assert repo.get_by_username("  bob ") is not None

    def test_get_by_username_is_case_sensitive(self, repo):
        UserFactory(username="carol")
        assert repo.get_by_username("Carol") is None

    def test_exists_by_username(self, repo):
        UserFactory(username="dave")
        assert repo.exists_by_username("dave")
        assert not repo.exists_by_username("nobody")

    def test_list_sorts_and_filters(self, repo):
        UserFactory(username="zed", role=Role.ADMIN)
        UserFactory(username="amy", role=Role.VIEWER)
        UserFactory(username="max", role=Role.ADMIN)

        names = [u.username for u in repo.list(sort=["-username"])]
        assert names[:3] == ["zed", "max", "amy"]

        admins = repo.list(filters={"role": Role.ADMIN}, sort=["username"])
        assert [u.username for u in admins] == ["max", "zed"]

    def test_list_ignores_unknown_sort_keys_and_paginates(self, repo):
        for name in ("u1", "u2", "u3"):
            UserFactory(username=name)

        page = repo.list(sort=["password_hash", "username"], limit=2, offset=1)
        assert [u.username for u in page] == ["u2", "u3"]
