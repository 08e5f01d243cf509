"""API views for payment processing.

The provider webhook is unauthenticated and always answers 200; every
outcome, rejections included, is reported in the body and recorded as a
payment transaction.
"""

from __future__ import annotations

import logging

from django.utils.decorators import method_decorator  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from rest_framework import permissions, status  # type: ignore
from rest_framework.exceptions import ParseError, UnsupportedMediaType  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .services import apply_callback, reject_malformed_callback

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class PaymentWebhookView(APIView):
    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):  # type: ignore
        # Read the raw body first so it is still available if parsing fails
        raw_body = request.body
        try:
            payload = request.data
        except (ParseError, UnsupportedMediaType) as e:
            result = reject_malformed_callback(raw_body, str(e))
        else:
            result = apply_callback(payload)

        logger.info(f"Payment webhook processed: {result.code} (booking {result.booking_id})")
        return Response(result.to_dict(), status=status.HTTP_200_OK)
