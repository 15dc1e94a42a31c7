"""
Service-layer functions for the Users app.

This module exists to keep models passive:
- No business logic in models
- No permission logic in models
- Persistence orchestration (create/save) lives here
"""

from __future__ import annotations

from typing import Any, Optional, Type


def create_user(
    *,
    user_model: Type[Any],
    username: str,
    password: Optional[str] = None,
    display_name: Optional[str] = None,
    role: str = "EMPLOYEE",
    using: Optional[str] = None,
    **extra_fields: Any,
):
    """Create and persist a user with a hashed password."""
    if not username:
        raise ValueError("The username field must be set")

    email = extra_fields.pop("email", "") or ""
    user = user_model(
        username=username,
        display_name=display_name or username,
        email=email.strip().lower(),
        role=role,
        **extra_fields,
    )
    user.set_password(password)
    if using is None:
        user.save()
    else:
        user.save(using=using)
    return user


def create_superuser(
    *,
    user_model: Type[Any],
    username: str,
    password: Optional[str] = None,
    using: Optional[str] = None,
    **extra_fields: Any,
):
    """Create an ADMIN user (used by `manage.py createsuperuser`)."""
    extra_fields["role"] = "ADMIN"
    return create_user(
        user_model=user_model,
        username=username,
        password=password,
        using=using,
        **extra_fields,
    )


def user_is_admin(*, user: Any) -> bool:
    return user.role == "ADMIN"


def profile_defaults(user: Any) -> dict:
    """
    Profile values used to fill blank fields of a submitted tire request.

    Anonymous or missing users contribute nothing.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return {}
    return {
        "email": getattr(user, "email", "") or "",
        "user_section": getattr(user, "section", "") or "",
        "officer_service_no": getattr(user, "service_number", "") or "",
    }
