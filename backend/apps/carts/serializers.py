from rest_framework import serializers

from apps.api.utils import MAX_ROW_ID
from apps.catalog.serializers import ProductReadSerializer


class CartItemReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    cart_id = serializers.IntegerField()
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField()
    product = ProductReadSerializer(allow_null=True)
    line_total = serializers.CharField(allow_null=True)


class CartReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    user_id = serializers.IntegerField()
    status = serializers.CharField()
    created_at = serializers.CharField()
    items = CartItemReadSerializer(many=True)
    subtotal = serializers.CharField()


class CartItemWriteSerializer(serializers.Serializer):
    # camelCase matches the public request body; product_id is accepted as well.
    productId = serializers.IntegerField(required=False, min_value=1, max_value=MAX_ROW_ID)
    product_id = serializers.IntegerField(required=False, min_value=1, max_value=MAX_ROW_ID)
    quantity = serializers.IntegerField(min_value=1)

    def validate(self, attrs):
        product_id = attrs.get("productId") or attrs.get("product_id")
        if not product_id:
            raise serializers.ValidationError(
                {"productId": ["Product ID and quantity are required"]}
            )
        return {"product_id": product_id, "quantity": attrs["quantity"]}
