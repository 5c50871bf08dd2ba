from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.api.permissions import is_privileged
from apps.api.schemas import error_responses
from apps.api.utils import message_response, path_id
from apps.common import get_logger
from .container import build_checkout_service, build_order_service
from .serializers import OrderPlacedSerializer, OrderReadSerializer

logger = get_logger(__name__).bind(component="orders", layer="view")


@extend_schema(tags=["Orders"])
class OrderListView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_order_service()
    log = logger.bind(view="OrderListView")

    @extend_schema(
        operation_id="orders_list",
        summary="List my orders",
        description="Orders placed by the authenticated user, newest first.",
        responses={200: OrderReadSerializer(many=True)},
    )
    def get(self, request):
        self.log.debug("Listing orders", user_id=request.user.id)
        data = self.service.list_orders(request.user.id)
        return Response(OrderReadSerializer(data, many=True).data)


@extend_schema(tags=["Orders"])
class OrderResourceView(APIView):
    """``/orders/{id}``: POST checks out the cart with that id, GET reads the order with that id."""

    permission_classes = [IsAuthenticated]
    checkout_service = build_checkout_service()
    order_service = build_order_service()
    log = logger.bind(view="OrderResourceView")

    @extend_schema(
        operation_id="orders_place",
        summary="Place order from cart",
        description=(
            "Checks out the cart identified by the path id. Retrying the same cart never "
            "creates a second order: an interrupted checkout is resumed and a completed "
            "one is answered with its existing order id."
        ),
        parameters=[OpenApiParameter("resource_id", int, OpenApiParameter.PATH, description="Cart id")],
        request=None,
        responses={
            201: OrderPlacedSerializer,
            200: OrderPlacedSerializer,
            **error_responses(400, 403, 404, 409, 500),
        },
    )
    def post(self, request, resource_id):
        cart_id = path_id(resource_id)
        self.log.info("Checkout via API", cart_id=cart_id, user_id=request.user.id)
        result, error = self.checkout_service.place_order(cart_id, request.user.id)
        if error:
            return error.to_response()
        if result.created:
            return message_response(
                "Order placed successfully",
                http_status=status.HTTP_201_CREATED,
                orderId=result.order_id,
            )
        return message_response("Order already placed", orderId=result.order_id)

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order",
        parameters=[OpenApiParameter("resource_id", int, OpenApiParameter.PATH, description="Order id")],
        responses={
            200: OrderReadSerializer,
            **error_responses(404),
        },
    )
    def get(self, request, resource_id):
        dto, error = self.order_service.get_order(
            path_id(resource_id), request.user.id, is_privileged(request.user)
        )
        if error:
            return error.to_response()
        return Response(OrderReadSerializer(dto).data)
