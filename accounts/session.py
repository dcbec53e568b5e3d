"""
Session / Identity Provider

Wraps Django's authentication backend and the user table, and exposes the
current identity plus a cached profile record to the rest of the system.

Session states:
1. anonymous - no identity
2. loading - identity resolved, profile not loaded yet
3. authenticated - identity resolved and profile lookup finished

Role-based decisions must treat ``loading`` as indeterminate, never as
"not signed in".
"""

from dataclasses import dataclass
from typing import Optional
import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.core.cache import cache
from django.db import models
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

logger = logging.getLogger(__name__)

PROFILE_CACHE_KEY = 'session_profile:{subject_id}'


class SessionStatus(models.TextChoices):
    ANONYMOUS = 'anonymous', 'Anonymous'
    LOADING = 'loading', 'Loading'
    AUTHENTICATED = 'authenticated', 'Authenticated'


@dataclass(frozen=True)
class Identity:
    subject_id: str
    email: str


@dataclass(frozen=True)
class Profile:
    subject_id: str
    email: str
    display_name: str
    role: str
    account_status: str

    @classmethod
    def from_user(cls, user):
        return cls(
            subject_id=str(user.pk),
            email=user.email,
            display_name=user.get_display_name(),
            role=user.role,
            account_status=user.account_status,
        )

    def as_dict(self):
        return {
            'subject_id': self.subject_id,
            'email': self.email,
            'display_name': self.display_name,
            'role': self.role,
            'account_status': self.account_status,
        }


@dataclass(frozen=True)
class SessionState:
    status: str
    identity: Optional[Identity] = None
    profile: Optional[Profile] = None

    @classmethod
    def anonymous(cls):
        return cls(status=SessionStatus.ANONYMOUS)

    @classmethod
    def loading(cls, identity):
        return cls(status=SessionStatus.LOADING, identity=identity)

    @classmethod
    def authenticated(cls, identity, profile=None):
        return cls(status=SessionStatus.AUTHENTICATED, identity=identity, profile=profile)

    @property
    def is_loading(self):
        return self.status == SessionStatus.LOADING

    @property
    def is_anonymous(self):
        return self.status == SessionStatus.ANONYMOUS

    @property
    def role(self):
        return self.profile.role if self.profile else None


class SessionProvider:
    """
    Current identity and profile for one request.

    Usage:
        session = SessionProvider.from_request(request)
        session.load_profile()
        decision = evaluate_access('farmer', session.state())
    """

    def __init__(self, user=None, request=None):
        self.request = request
        self._identity = None
        self._profile = None
        self._profile_loaded = False

        if user is not None and user.is_authenticated:
            self._identity = Identity(subject_id=str(user.pk), email=user.email)

    @classmethod
    def from_request(cls, request):
        return cls(user=getattr(request, 'user', None), request=request)

    def current_identity(self):
        return self._identity

    def current_profile(self):
        return self._profile

    def state(self):
        if self._identity is None:
            return SessionState.anonymous()
        if not self._profile_loaded:
            return SessionState.loading(self._identity)
        return SessionState.authenticated(self._identity, self._profile)

    def load_profile(self):
        """
        Resolve the profile record for the current identity.

        Returns the cached copy when present. A missing user record leaves the
        session authenticated without a profile.
        """
        if self._identity is None:
            return None

        cache_key = PROFILE_CACHE_KEY.format(subject_id=self._identity.subject_id)
        profile = cache.get(cache_key)

        if profile is None:
            User = get_user_model()
            user = User.objects.filter(pk=self._identity.subject_id).first()
            if user is not None:
                profile = Profile.from_user(user)
                cache.set(
                    cache_key,
                    profile,
                    getattr(settings, 'SESSION_PROFILE_CACHE_TIMEOUT', 300)
                )
            else:
                logger.warning(f"No user record for identity {self._identity.subject_id}")

        self._profile = profile
        self._profile_loaded = True
        return profile

    def sign_in(self, email, password):
        """
        Authenticate with email and password.

        Returns:
            True when signed in, False on wrong credentials or an inactive account
        """
        user = authenticate(self.request, username=email, password=password)

        if user is None:
            logger.info(f"Sign-in failed for {email}: invalid credentials")
            return False

        if not user.is_account_active:
            logger.info(f"Sign-in refused for {email}: account inactive")
            return False

        self._identity = Identity(subject_id=str(user.pk), email=user.email)
        self._profile = None
        self._profile_loaded = False
        self.load_profile()
        return True

    def signed_in_user(self):
        """Return the user record behind the current identity, if any."""
        if self._identity is None:
            return None
        User = get_user_model()
        return User.objects.filter(pk=self._identity.subject_id).first()

    def sign_out(self, refresh_token=None):
        """
        Clear identity and profile.

        The refresh token (if given) is blacklisted before this returns, so
        the session is fully torn down by the time the caller responds.
        Identity and profile are cleared even when blacklisting fails.

        Raises:
            TokenError: if the refresh token is invalid or already blacklisted
        """
        try:
            if refresh_token:
                RefreshToken(refresh_token).blacklist()
        except TokenError as e:
            logger.warning(f"Sign-out with unusable refresh token: {str(e)}")
            raise
        finally:
            if self._identity is not None:
                self.invalidate_profile(self._identity.subject_id)
                logger.info(f"Signed out {self._identity.email}")

            self._identity = None
            self._profile = None
            self._profile_loaded = False

    @staticmethod
    def invalidate_profile(subject_id):
        cache.delete(PROFILE_CACHE_KEY.format(subject_id=subject_id))
