"""Review workflows and rating rollups.

Rollups are full recounts over published reviews, never running averages,
so a recompute always repairs drift. A site or property without published
reviews is reset to zero.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction  # type: ignore
from django.db.models import Avg, Count  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.application.command_handlers import MarkReviewedCommand, MarkReviewedHandler
from apps.bookings.models import Booking
from apps.properties.models import Property, Site
from shared.domain.exceptions import BadRequest, Conflict, Forbidden, NotFound

from .models import PROPERTY_RATING_FIELDS, SITE_RATING_FIELDS, Review, round_rating

logger = logging.getLogger(__name__)

ZERO = Decimal("0.0")


def _rollup(reviews, rating_fields: tuple[str, ...]) -> dict:
    aggregates = reviews.aggregate(
        count=Count("id"),
        overall=Avg("overall_rating"),
        **{name: Avg(name) for name in rating_fields},
    )
    count = aggregates["count"] or 0
    if count == 0:
        return {"count": 0, "overall": ZERO, **{name: ZERO for name in rating_fields}}
    return {
        "count": count,
        "overall": round_rating(aggregates["overall"]),
        **{name: round_rating(aggregates[name]) for name in rating_fields},
    }


def recompute_site_rating(site_id: int) -> None:
    stats = _rollup(
        Review.objects.filter(site_id=site_id, is_published=True),
        SITE_RATING_FIELDS,
    )
    Site.objects.filter(pk=site_id).update(
        rating_average=stats["overall"],
        rating_count=stats["count"],
        rating_cleanliness=stats["cleanliness_rating"],
        rating_accuracy=stats["accuracy_rating"],
        rating_amenities=stats["amenities_rating"],
    )
    logger.info(f"Site {site_id} rating recomputed: {stats['overall']} from {stats['count']} review(s)")


def recompute_property_rating(property_id: int) -> None:
    stats = _rollup(
        Review.objects.filter(property_id=property_id, is_published=True),
        PROPERTY_RATING_FIELDS,
    )
    Property.objects.filter(pk=property_id).update(
        rating_average=stats["overall"],
        rating_count=stats["count"],
        rating_location=stats["location_rating"],
        rating_communication=stats["communication_rating"],
        rating_value=stats["value_rating"],
    )
    logger.info(f"Property {property_id} rating recomputed: {stats['overall']} from {stats['count']} review(s)")


def recompute(site_id: int) -> None:
    """Recount the site rollup and the rollup of its property."""
    property_id = Site.objects.filter(pk=site_id).values_list("property_id", flat=True).first()
    if property_id is None:
        raise NotFound(f"Site {site_id} not found.", code="SITE_NOT_FOUND")
    recompute_site_rating(site_id)
    recompute_property_rating(property_id)


def create_review(booking_id: int, guest_id: int, ratings: dict, comment: str = "") -> Review:
    """
    Create the review of a completed booking.

    Raises:
        NotFound: booking missing
        Forbidden: caller is not the booking guest
        BadRequest: booking not completed
        Conflict: booking already reviewed
    """
    with transaction.atomic():
        booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found.", code="BOOKING_NOT_FOUND")
        if booking.guest_id != guest_id:
            raise Forbidden("Only the guest of this booking can review it.", code="NOT_BOOKING_GUEST")
        if booking.status != Booking.Status.COMPLETED:
            raise BadRequest("Only completed stays can be reviewed.", code="BOOKING_NOT_COMPLETED")
        if booking.reviewed or Review.objects.filter(booking_id=booking.pk).exists():
            raise Conflict("This booking has already been reviewed.", code="ALREADY_REVIEWED")

        review = Review.objects.create(
            booking=booking,
            property_id=booking.property_id,
            site_id=booking.site_id,
            guest_id=booking.guest_id,
            host_id=booking.host_id,
            comment=comment,
            **{name: ratings[name] for name in PROPERTY_RATING_FIELDS + SITE_RATING_FIELDS},
        )
        MarkReviewedHandler().handle(MarkReviewedCommand(booking_id=booking.pk, review_id=review.pk))
        recompute(review.site_id)

    logger.info(f"Review {review.pk} created for booking {booking.code}")
    return review


def set_published(review: Review, published: bool) -> Review:
    """Publish or unpublish a review; both trigger a recount."""
    with transaction.atomic():
        if review.is_published != published:
            review.is_published = published
            review.save(update_fields=["is_published", "overall_rating", "updated_at"])
        recompute(review.site_id)
    logger.info(f"Review {review.pk} {'published' if published else 'unpublished'}")
    return review


def respond(review: Review, host_id: int, response: str) -> Review:
    """The host answers a review once."""
    if review.host_id != host_id:
        raise Forbidden("Only the host can respond to this review.", code="NOT_REVIEW_HOST")
    if not response.strip():
        raise BadRequest("Response cannot be empty.", code="EMPTY_RESPONSE")

    updated = Review.objects.filter(pk=review.pk, host_response="").update(
        host_response=response,
        host_response_at=timezone.now(),
        updated_at=timezone.now(),
    )
    if not updated:
        raise Conflict("This review already has a response.", code="ALREADY_RESPONDED")

    review.refresh_from_db()
    logger.info(f"Host {host_id} responded to review {review.pk}")
    return review
