"""
PATH: users/models/user.py

CUSTOM USER MODEL

Identity:
- Email is the login identifier (USERNAME_FIELD).
- role drives capabilities (see permissions/roles.py).
- tenant_id scopes every document the user can see or mutate.
  It is passed explicitly into every lifecycle call; there is no
  process-wide "current tenant".
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def create_user(self, email=None, password=None, **extra_fields):
        """
        Rules:
        - email is required (canonical identity)
        - tenant_id defaults to "default" for single-tenant installs
        """
        email = (email or "").strip()
        if not email:
            raise ValueError("Users must have an email address")

        extra_fields["email"] = self.normalize_email(email)
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("tenant_id", "default")

        user = self.model(**extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", "admin")
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_CHOICES = [
        ("admin", "Admin"),
        ("manager", "Manager"),
        ("seller", "Seller"),
        ("buyer", "Buyer"),
        ("warehouse", "Warehouse"),
        ("driver", "Driver"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="seller")

    tenant_id = models.CharField(
        max_length=64,
        default="default",
        db_index=True,
        help_text="Business/tenant this user operates in",
    )

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        self.tenant_id = (self.tenant_id or "").strip()
        if not self.tenant_id:
            raise ValidationError({"tenant_id": "tenant_id is required"})

    def __str__(self):
        return f"{self.email} ({self.role})"
