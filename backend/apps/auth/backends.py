"""
Authentication backend accepting either the username or the email address.
"""

from django.contrib.auth.backends import ModelBackend

from apps.users.models import User


class UsernameOrEmailBackend(ModelBackend):
    """Resolve the login identifier against username first, then email."""

    def authenticate(self, request, username=None, password=None, **kwargs):
        if not username or password is None:
            return None

        identifier = username.strip()
        user = User.objects.filter(username=identifier).first()
        if user is None:
            user = User.objects.filter(email__iexact=identifier).first()
        if user is None:
            # Run the hasher once to keep timing comparable for unknown users.
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
