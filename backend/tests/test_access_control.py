"""
StoreRate Backend — Access Control Unit Tests
==============================================

What:  Tests for the pure authorize() decision function.
How:   Plain model instances, never added to a session. No database needed.
"""

from uuid import uuid4

import pytest

from storerate.exceptions import InsufficientRoleError, NotOwnerError
from storerate.models import Rating, Store, User, UserRole
from storerate.services.access_control import (
    Action,
    Allow,
    Deny,
    DenyReason,
    authorize,
    ensure_allowed,
    store_listing_scope,
)


def _user(role: UserRole) -> User:
    return User(id=uuid4(), name="x", email=f"{uuid4().hex}@example.com", password_hash="h", role=role)


class TestAdministrator:
    def setup_method(self):
        self.admin = _user(UserRole.SYSTEM_ADMINISTRATOR)
        self.other_owner = _user(UserRole.STORE_OWNER)

    @pytest.mark.parametrize("action", list(Action))
    def test_admin_is_allowed_everything(self, action):
        store = Store(id=uuid4(), name="S", owner_id=self.other_owner.id)
        assert authorize(self.admin, action, store) == Allow()

    def test_admin_may_update_rating_whose_rater_was_deleted(self):
        orphan = Rating(id=uuid4(), rater_id=None, store_id=uuid4(), value=3)
        assert isinstance(authorize(self.admin, Action.RATING_UPDATE, orphan), Allow)


class TestStoreRules:
    def setup_method(self):
        self.owner = _user(UserRole.STORE_OWNER)
        self.other_owner = _user(UserRole.STORE_OWNER)
        self.normal = _user(UserRole.NORMAL_USER)
        self.store = Store(id=uuid4(), name="Cafe X", owner_id=self.owner.id)

    def test_owner_may_update_and_delete_own_store(self):
        assert isinstance(authorize(self.owner, Action.STORE_UPDATE, self.store), Allow)
        assert isinstance(authorize(self.owner, Action.STORE_DELETE, self.store), Allow)

    def test_other_owner_is_denied_as_not_owner(self):
        decision = authorize(self.other_owner, Action.STORE_UPDATE, self.store)
        assert decision == Deny(DenyReason.NOT_OWNER)
        assert decision.allowed is False

    def test_normal_user_cannot_create_store(self):
        assert authorize(self.normal, Action.STORE_CREATE) == Deny(DenyReason.INSUFFICIENT_ROLE)

    def test_store_owner_can_create_store(self):
        assert authorize(self.owner, Action.STORE_CREATE) == Allow()

    def test_anyone_can_read_stores(self):
        assert isinstance(authorize(self.normal, Action.STORE_READ, self.store), Allow)


class TestRatingRules:
    def setup_method(self):
        self.rater = _user(UserRole.NORMAL_USER)
        self.other = _user(UserRole.NORMAL_USER)
        self.rating = Rating(id=uuid4(), rater_id=self.rater.id, store_id=uuid4(), value=4)

    def test_rater_may_mutate_own_rating(self):
        assert isinstance(authorize(self.rater, Action.RATING_UPDATE, self.rating), Allow)
        assert isinstance(authorize(self.rater, Action.RATING_DELETE, self.rating), Allow)

    def test_other_user_is_denied(self):
        assert authorize(self.other, Action.RATING_DELETE, self.rating) == Deny(DenyReason.NOT_OWNER)

    def test_orphaned_rating_is_not_editable_by_regular_users(self):
        orphan = Rating(id=uuid4(), rater_id=None, store_id=uuid4(), value=2)
        assert authorize(self.rater, Action.RATING_UPDATE, orphan) == Deny(DenyReason.NOT_OWNER)

    def test_any_role_can_create_ratings(self):
        owner = _user(UserRole.STORE_OWNER)
        assert isinstance(authorize(owner, Action.RATING_CREATE), Allow)
        assert isinstance(authorize(self.rater, Action.RATING_CREATE), Allow)


class TestUserRules:
    def setup_method(self):
        self.user = _user(UserRole.NORMAL_USER)
        self.other = _user(UserRole.STORE_OWNER)

    def test_listing_and_deleting_users_is_admin_only(self):
        assert authorize(self.user, Action.USER_LIST) == Deny(DenyReason.INSUFFICIENT_ROLE)
        assert authorize(self.user, Action.USER_DELETE, self.user) == Deny(DenyReason.INSUFFICIENT_ROLE)

    def test_self_read_and_update_allowed(self):
        assert isinstance(authorize(self.user, Action.USER_READ, self.user), Allow)
        assert isinstance(authorize(self.user, Action.USER_UPDATE, self.user), Allow)

    def test_other_user_read_denied(self):
        assert authorize(self.user, Action.USER_READ, self.other) == Deny(DenyReason.INSUFFICIENT_ROLE)


class TestEnsureAllowed:
    def test_not_owner_raises_not_owner_error(self):
        owner = _user(UserRole.STORE_OWNER)
        intruder = _user(UserRole.STORE_OWNER)
        store = Store(id=uuid4(), name="S", owner_id=owner.id)
        with pytest.raises(NotOwnerError) as exc_info:
            ensure_allowed(intruder, Action.STORE_DELETE, store)
        assert exc_info.value.status_code == 403
        assert exc_info.value.context["action"] == "store:delete"

    def test_insufficient_role_raises_insufficient_role_error(self):
        with pytest.raises(InsufficientRoleError):
            ensure_allowed(_user(UserRole.NORMAL_USER), Action.STORE_CREATE)

    def test_allowed_returns_none(self):
        assert ensure_allowed(_user(UserRole.NORMAL_USER), Action.RATING_READ) is None


class TestStoreListingScope:
    def test_store_owner_is_scoped_to_own_stores(self):
        owner = _user(UserRole.STORE_OWNER)
        assert store_listing_scope(owner) is owner

    @pytest.mark.parametrize("role", [UserRole.NORMAL_USER, UserRole.SYSTEM_ADMINISTRATOR])
    def test_other_roles_see_everything(self, role):
        assert store_listing_scope(_user(role)) is None

    def test_anonymous_sees_everything(self):
        assert store_listing_scope(None) is None
