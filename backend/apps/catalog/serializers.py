from rest_framework import serializers


class ProductReadSerializer(serializers.Serializer):
    # Matches ProductDTO shapes used for responses
    id = serializers.IntegerField()
    name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    price = serializers.CharField()
    category = serializers.CharField(allow_blank=True)


class ProductWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    category = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )

    def validate_name(self, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise serializers.ValidationError("Name cannot be blank.")
        return trimmed


class ProductUpdateResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    product = ProductReadSerializer()
