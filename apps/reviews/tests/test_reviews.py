"""Tests for reviews and rating rollups."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.application.command_handlers import (
    CompleteBookingCommand,
    CompleteBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
)
from apps.bookings.models import Booking
from apps.bookings.tests.helpers import future, make_site, make_user
from apps.reviews.models import Review
from apps.reviews.services import create_review
from apps.users.models import User
from shared.domain.exceptions import BadRequest, Conflict, Forbidden

HIGH = {
    "location_rating": 5,
    "communication_rating": 5,
    "value_rating": 5,
    "cleanliness_rating": 4,
    "accuracy_rating": 4,
    "amenities_rating": 4,
}
FLAT = {name: 4 for name in HIGH}


class ReviewTestMixin:
    def setUp(self) -> None:
        self.site = make_site()
        self.host = self.site.property.host
        self.guest = make_user()
        self._offset = 0

    def book(self, guest=None, complete: bool = True) -> Booking:
        self._offset += 3
        check_in, check_out = future(self._offset), future(self._offset + 2)
        booking = CreateBookingHandler().handle(
            CreateBookingCommand(
                site_id=self.site.pk,
                guest_id=(guest or self.guest).pk,
                check_in=check_in,
                check_out=check_out,
            )
        )
        if complete:
            ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))
            CompleteBookingHandler().handle(CompleteBookingCommand(booking_id=booking.pk, today=check_out))
        booking.refresh_from_db()
        return booking


class ReviewServiceTests(ReviewTestMixin, APITestCase):
    def test_review_marks_booking_and_updates_rollups(self) -> None:
        booking = self.book()

        review = create_review(booking.pk, self.guest.pk, HIGH, "Quiet spot by the lake")

        self.assertEqual(review.overall_rating, Decimal("4.5"))
        booking.refresh_from_db()
        self.assertTrue(booking.reviewed)
        self.assertEqual(booking.review_id, review.pk)
        self.site.refresh_from_db()
        self.assertEqual(self.site.rating_count, 1)
        self.assertEqual(self.site.rating_average, Decimal("4.5"))
        self.assertEqual(self.site.rating_cleanliness, Decimal("4.0"))
        self.site.property.refresh_from_db()
        self.assertEqual(self.site.property.rating_location, Decimal("5.0"))

    def test_rollup_rounds_half_up(self) -> None:
        create_review(self.book().pk, self.guest.pk, HIGH)
        create_review(self.book().pk, self.guest.pk, FLAT)

        self.site.refresh_from_db()
        self.assertEqual(self.site.rating_count, 2)
        self.assertEqual(self.site.rating_average, Decimal("4.3"))

    def test_only_completed_bookings(self) -> None:
        booking = self.book(complete=False)

        with self.assertRaises(BadRequest) as ctx:
            create_review(booking.pk, self.guest.pk, HIGH)
        self.assertEqual(ctx.exception.code, "BOOKING_NOT_COMPLETED")

    def test_only_the_guest(self) -> None:
        booking = self.book()

        with self.assertRaises(Forbidden):
            create_review(booking.pk, self.host.pk, HIGH)

    def test_one_review_per_booking(self) -> None:
        booking = self.book()
        create_review(booking.pk, self.guest.pk, HIGH)

        with self.assertRaises(Conflict):
            create_review(booking.pk, self.guest.pk, FLAT)
        self.assertEqual(Review.objects.filter(booking=booking).count(), 1)


class ReviewAPITests(ReviewTestMixin, APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = make_user(User.RoleChoices.ADMIN)

    def _create(self, booking: Booking):
        self.client.force_authenticate(self.guest)
        return self.client.post(reverse("review-list"), {"booking": booking.pk, **HIGH}, format="json")

    def test_guest_creates_review(self) -> None:
        response = self._create(self.book())

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(Decimal(response.data["overall_rating"]), Decimal("4.5"))

    def test_rating_out_of_range(self) -> None:
        self.client.force_authenticate(self.guest)
        payload = {"booking": self.book().pk, **HIGH, "value_rating": 6}

        response = self.client.post(reverse("review-list"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_second_review_is_conflict(self) -> None:
        booking = self.book()
        self._create(booking)

        response = self._create(booking)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "ALREADY_REVIEWED")

    def test_unpublish_resets_rollups(self) -> None:
        review_id = self._create(self.book()).data["id"]
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("review-unpublish", args=[review_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.site.refresh_from_db()
        self.assertEqual(self.site.rating_count, 0)
        self.assertEqual(self.site.rating_average, Decimal("0.0"))

        self.client.post(reverse("review-publish", args=[review_id]))
        self.site.refresh_from_db()
        self.assertEqual(self.site.rating_count, 1)

    def test_only_admins_moderate(self) -> None:
        review_id = self._create(self.book()).data["id"]
        self.client.force_authenticate(self.host)

        response = self.client.post(reverse("review-unpublish", args=[review_id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unpublished_reviews_are_hidden_from_public(self) -> None:
        review_id = self._create(self.book()).data["id"]
        Review.objects.filter(pk=review_id).update(is_published=False)
        self.client.force_authenticate(None)

        response = self.client.get(reverse("review-list"), {"site": self.site.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_host_responds_once(self) -> None:
        review_id = self._create(self.book()).data["id"]
        self.client.force_authenticate(self.host)
        url = reverse("review-respond", args=[review_id])

        first = self.client.post(url, {"response": "Thanks for staying!"}, format="json")
        second = self.client.post(url, {"response": "Again"}, format="json")

        self.assertEqual(first.status_code, status.HTTP_200_OK, first.data)
        self.assertEqual(first.data["host_response"], "Thanks for staying!")
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)

    def test_guest_cannot_respond(self) -> None:
        review_id = self._create(self.book()).data["id"]

        response = self.client.post(
            reverse("review-respond", args=[review_id]),
            {"response": "Self praise"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
