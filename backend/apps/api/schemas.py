from typing import Any, Dict

from drf_spectacular.utils import OpenApiResponse
from rest_framework import serializers


class ErrorDetailSerializer(serializers.Serializer):
    code = serializers.CharField()
    message = serializers.CharField()
    status = serializers.IntegerField()
    details = serializers.JSONField(required=False)
    hint = serializers.CharField(required=False, allow_blank=True)
    extra = serializers.JSONField(required=False)


class ErrorResponseSerializer(serializers.Serializer):
    error = ErrorDetailSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


def error_responses(*statuses: int) -> Dict[int, Any]:
    """``extend_schema(responses=...)`` entries documenting the error envelope."""
    return {code: OpenApiResponse(response=ErrorResponseSerializer) for code in statuses}
