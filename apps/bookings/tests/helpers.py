"""Fixture builders shared by the booking, finance and review tests."""

from __future__ import annotations

from datetime import date, timedelta
from itertools import count

from django.utils import timezone  # type: ignore

from apps.properties.models import Property, Site
from apps.users.models import User

_sequence = count(1)


def make_user(role: str = User.RoleChoices.GUEST, **extra) -> User:
    n = next(_sequence)
    return User.objects.create_user(
        email=f"{role}{n}@example.com",
        phone=f"+8490000{n:04d}",
        password="CampPass123",
        role=role,
        **extra,
    )


def make_host() -> User:
    return make_user(User.RoleChoices.HOST)


def make_site(host: User | None = None, property_kwargs: dict | None = None, **site_kwargs) -> Site:
    host = host or make_host()
    property_obj = Property.objects.create(
        host=host,
        name=f"Pine Valley Campground {next(_sequence)}",
        status=Property.Status.ACTIVE,
        **(property_kwargs or {}),
    )
    defaults = {
        "name": "Lakeside Pitch",
        "max_guests": 4,
        "max_pets": 1,
        "max_vehicles": 1,
        "base_price": 300_000,
        "cleaning_fee": 50_000,
        "pet_fee": 40_000,
        "min_nights": 1,
        "max_nights": 14,
    }
    defaults.update(site_kwargs)
    return Site.objects.create(property=property_obj, **defaults)


def future(days: int) -> date:
    return timezone.localdate() + timedelta(days=days)
