"""Quote API view."""

from __future__ import annotations

from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .serializers import QuoteRequestSerializer
from .services import calculate_booking_price


class QuoteView(APIView):
    """Price a stay with its nightly breakdown, extras and commission."""

    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):  # type: ignore
        serializer = QuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = calculate_booking_price(**serializer.to_quote_kwargs())
        return Response(result.to_dict(), status=status.HTTP_200_OK)
