"""
Tests for authentication services.

Test Organization:
    - TestSignup: Account creation, duplicates, atomicity
    - TestSignin: Credential checks and presence
    - TestSignout: Refresh token blacklisting
    - TestProfileService: Own/public profiles and updates
    - TestUserDiscovery: Search and directory with is_contact
"""

import pytest
from django.db import IntegrityError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from authentication.models import Profile, User
from authentication.services import AuthService, ProfileService
from authentication.tests.factories import DEFAULT_PASSWORD, UserFactory
from contacts.tests.factories import ContactFactory
from core.exceptions import NotFoundError


@pytest.mark.django_db
class TestSignup:
    def test_creates_user_and_profile(self, signup_data):
        result = AuthService.signup(**signup_data)

        assert result.success
        user = result.data["user"]
        assert user.email == "new.user@example.com"
        assert user.check_password("SecurePass123!")
        profile = result.data["profile"]
        assert profile.username == "new_user"
        assert profile.full_name == "New User"
        assert profile.status == Profile.Status.ONLINE
        assert profile.last_seen is not None

    def test_issues_token_for_new_user(self, signup_data):
        result = AuthService.signup(**signup_data)

        token = AccessToken(result.data["token"])
        assert str(token["user_id"]) == str(result.data["user"].id)
        assert token["email"] == "new.user@example.com"
        assert result.data["refresh"]

    def test_duplicate_email_rejected(self, user, signup_data):
        signup_data["email"] = "ALICE@example.com"

        result = AuthService.signup(**signup_data)

        assert not result.success
        assert result.error_code == "EMAIL_EXISTS"
        assert User.objects.count() == 1

    def test_duplicate_username_rejected_case_insensitively(self, user, signup_data):
        signup_data["username"] = "Alice"

        result = AuthService.signup(**signup_data)

        assert not result.success
        assert result.error_code == "USERNAME_TAKEN"
        assert User.objects.count() == 1
        assert Profile.objects.count() == 1

    def test_integrity_error_leaves_nothing_behind(self, mocker, signup_data):
        """A constraint failure while filling the profile rolls the user back."""
        mocker.patch.object(Profile, "save", side_effect=IntegrityError("duplicate username"))

        result = AuthService.signup(**signup_data)

        assert not result.success
        assert result.error_code == "DUPLICATE_ACCOUNT"
        assert result.error == "Username or email already taken"
        assert not User.objects.filter(email="new.user@example.com").exists()


@pytest.mark.django_db
class TestSignin:
    def test_valid_credentials(self, user):
        result = AuthService.signin("alice@example.com", DEFAULT_PASSWORD)

        assert result.success
        assert result.data["user"] == user
        assert str(AccessToken(result.data["token"])["user_id"]) == str(user.id)

    def test_marks_profile_online(self, user):
        AuthService.signin("alice@example.com", DEFAULT_PASSWORD)

        user.profile.refresh_from_db()
        assert user.profile.status == Profile.Status.ONLINE

    def test_email_is_case_insensitive(self, user):
        assert AuthService.signin("  Alice@Example.COM ", DEFAULT_PASSWORD).success

    @pytest.mark.parametrize(
        ("email", "password"),
        [
            ("alice@example.com", "wrong-password"),
            ("nobody@example.com", DEFAULT_PASSWORD),
        ],
    )
    def test_bad_credentials_share_one_message(self, user, email, password):
        result = AuthService.signin(email, password)

        assert not result.success
        assert result.error == "Invalid credentials"
        assert result.error_code == "INVALID_CREDENTIALS"

    def test_inactive_user_rejected(self, deactivated_user):
        result = AuthService.signin("gone@example.com", DEFAULT_PASSWORD)

        assert result.error == "Invalid credentials"


@pytest.mark.django_db
class TestSignout:
    def test_blacklists_refresh_token(self, user):
        refresh = str(RefreshToken.for_user(user))

        result = AuthService.signout(user, refresh=refresh)

        assert result.success
        assert BlacklistedToken.objects.filter(token__user=user).count() == 1

    def test_marks_profile_offline(self, user):
        user.profile.status = Profile.Status.ONLINE
        user.profile.save()

        AuthService.signout(user)

        user.profile.refresh_from_db()
        assert user.profile.status == Profile.Status.OFFLINE

    def test_garbage_token_rejected(self, user):
        result = AuthService.signout(user, refresh="not-a-token")

        assert result.error_code == "INVALID_TOKEN"

    def test_someone_elses_token_rejected(self, user, other_user):
        refresh = str(RefreshToken.for_user(other_user))

        result = AuthService.signout(user, refresh=refresh)

        assert result.error_code == "INVALID_TOKEN"
        assert not BlacklistedToken.objects.exists()


@pytest.mark.django_db
class TestProfileService:
    def test_get_own_profile_recreates_missing(self, user):
        Profile.objects.filter(user=user).delete()
        fresh = User.objects.get(pk=user.pk)

        profile = ProfileService.get_own_profile(fresh)

        assert profile.user == fresh

    def test_update_profile_partial(self, user):
        result = ProfileService.update_profile(user, bio="Curious", status=Profile.Status.AWAY)

        assert result.success
        profile = Profile.objects.get(user=user)
        assert profile.bio == "Curious"
        assert profile.status == Profile.Status.AWAY
        assert profile.full_name == "Alice Liddell"

    def test_update_email(self, user):
        result = ProfileService.update_profile(user, email="Alice.New@Example.com")

        assert result.success
        user.refresh_from_db()
        assert user.email == "alice.new@example.com"

    def test_update_to_taken_username_fails(self, user, other_user):
        result = ProfileService.update_profile(user, username="BOB")

        assert result.error_code == "INVALID_USERNAME"
        assert Profile.objects.get(user=user).username == "alice"

    def test_update_to_taken_email_fails(self, user, other_user):
        result = ProfileService.update_profile(user, email="bob@example.com")

        assert result.error_code == "EMAIL_EXISTS"

    @pytest.mark.parametrize("username", ["x", "admin", "bad name"])
    def test_validate_username_rejects(self, username):
        is_valid, _ = ProfileService.validate_username(username)

        assert is_valid is False

    def test_get_public_profile(self, other_user):
        assert ProfileService.get_public_profile(other_user.id) == other_user.profile

    def test_get_public_profile_inactive_raises(self, deactivated_user):
        with pytest.raises(NotFoundError):
            ProfileService.get_public_profile(deactivated_user.id)

    def test_get_public_profile_unknown_raises(self, db):
        with pytest.raises(NotFoundError) as exc_info:
            ProfileService.get_public_profile(999999)

        assert exc_info.value.error_code == "USER_NOT_FOUND"


@pytest.mark.django_db
class TestUserDiscovery:
    def test_search_by_exact_email(self, user, other_user):
        results = list(ProfileService.search_users(user, email="BOB@example.com"))

        assert results == [other_user]

    def test_search_by_email_is_not_substring(self, user, other_user):
        assert list(ProfileService.search_users(user, email="bob@")) == []

    @pytest.mark.parametrize("q", ["bob", "BUILD", "bob@exa"])
    def test_search_free_text(self, user, other_user, q):
        assert list(ProfileService.search_users(user, q=q)) == [other_user]

    def test_search_excludes_caller_and_inactive(self, user, deactivated_user):
        assert list(ProfileService.search_users(user, q="example.com")) == []

    def test_search_without_query_is_empty(self, user, other_user):
        assert list(ProfileService.search_users(user)) == []

    def test_is_contact_flag(self, user, other_user):
        carol = UserFactory(profile__username="carol")
        ContactFactory(user=user, contact=other_user)

        flags = {u.id: u.is_contact for u in ProfileService.list_users(user)}

        assert flags == {other_user.id: True, carol.id: False}

    def test_list_users_ordered_by_username(self, user, other_user):
        UserFactory(profile__username="aaron")

        usernames = [u.profile.username for u in ProfileService.list_users(user)]

        assert usernames == ["aaron", "bob"]
