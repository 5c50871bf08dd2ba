from rest_framework import serializers


class OrderProductSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(allow_blank=True)
    description = serializers.CharField(allow_blank=True)
    category = serializers.CharField(allow_blank=True)
    price = serializers.CharField()


class OrderItemReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField()
    unit_price = serializers.CharField()
    line_total = serializers.CharField()
    product = OrderProductSerializer()


class OrderReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    user_id = serializers.IntegerField()
    cart_id = serializers.IntegerField(allow_null=True)
    status = serializers.CharField()
    total_cost = serializers.CharField()
    created_at = serializers.CharField()
    items = OrderItemReadSerializer(many=True)


class OrderPlacedSerializer(serializers.Serializer):
    message = serializers.CharField()
    orderId = serializers.IntegerField()
