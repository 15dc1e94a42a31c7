"""
User model for the Tire Replacement Workflow backend.

Fields: id (UUID), username, display_name, email, role, section,
service_number, password, created_at, updated_at.
Username unique. Role decides which approval stage a user acts for.
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.db import models
from django.core.validators import RegexValidator

from . import services


class Role(models.TextChoices):
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    TTO = "TTO"
    ENGINEER = "ENGINEER"
    SELLER = "SELLER"
    ADMIN = "ADMIN"


class UserManager(BaseUserManager):
    """Custom user manager."""

    def create_user(
        self,
        username,
        password=None,
        display_name=None,
        role=Role.EMPLOYEE,
        **extra_fields,
    ):
        return services.create_user(
            user_model=self.model,
            username=username,
            password=password,
            display_name=display_name,
            role=role,
            using=self._db,
            **extra_fields,
        )

    def create_superuser(self, username, password=None, **extra_fields):
        return services.create_superuser(
            user_model=self.model,
            username=username,
            password=password,
            using=self._db,
            **extra_fields,
        )


class User(AbstractBaseUser):
    """Custom User model with UUID primary key, role and employee profile."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(
        max_length=150,
        unique=True,
        validators=[
            RegexValidator(
                regex=r"^[\w.@+-]+$",
                message=(
                    "Username may contain only letters, numbers, and @/./+/-/_ "
                    "characters."
                ),
            )
        ],
    )
    display_name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, blank=True, default="")
    role = models.CharField(
        max_length=20, choices=Role.choices, default=Role.EMPLOYEE
    )
    section = models.CharField(max_length=100, blank=True, default="")
    service_number = models.CharField(max_length=50, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "username"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["display_name", "role"]

    objects = UserManager()

    class Meta:
        db_table = "users"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(role__in=Role.values),
                name="valid_role",
            )
        ]

    def __str__(self):
        return self.username

    @property
    def is_staff(self):
        return services.user_is_admin(user=self)

    @property
    def is_superuser(self):
        return services.user_is_admin(user=self)
