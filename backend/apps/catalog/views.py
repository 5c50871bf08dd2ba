from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.api.permissions import IsStaffOrReadOnly
from apps.api.schemas import MessageResponseSerializer, error_responses
from apps.api.utils import message_response, path_id
from apps.common import get_logger
from .container import build_product_service
from .serializers import (
    ProductReadSerializer,
    ProductWriteSerializer,
    ProductUpdateResponseSerializer,
)

logger = get_logger(__name__).bind(component="catalog", layer="view")

PRODUCT_ID = OpenApiParameter("product_id", int, OpenApiParameter.PATH)
CATEGORY = OpenApiParameter(
    "category", str, description="Case-insensitive category filter", required=False
)


def _validated(request):
    serializer = ProductWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class CatalogView(APIView):
    """Reads are public; writes need a staff account."""

    permission_classes = [IsStaffOrReadOnly]
    service = build_product_service()


@extend_schema(tags=["Catalog"])
class ProductListView(CatalogView):
    log = logger.bind(view="ProductListView")

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description="May be served from cache; catalog writes invalidate it.",
        parameters=[CATEGORY],
        responses={200: ProductReadSerializer(many=True)},
    )
    def get(self, request):
        category = request.query_params.get("category") or None
        products = self.service.list_products(category)
        return Response(ProductReadSerializer(products, many=True).data)

    @extend_schema(
        summary="Create product",
        request=ProductWriteSerializer,
        responses={201: ProductReadSerializer, **error_responses(400, 403)},
    )
    def post(self, request):
        dto = self.service.create_product(_validated(request))
        self.log.info("Product created via API", product_id=dto.id)
        return Response(ProductReadSerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Catalog"], parameters=[PRODUCT_ID])
class ProductDetailView(CatalogView):
    log = logger.bind(view="ProductDetailView")

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product",
        responses={200: ProductReadSerializer, **error_responses(404)},
    )
    def get(self, request, product_id):
        dto, error = self.service.get_product(path_id(product_id))
        if error:
            return error.to_response()
        return Response(ProductReadSerializer(dto).data)

    @extend_schema(
        summary="Replace product",
        request=ProductWriteSerializer,
        responses={200: ProductUpdateResponseSerializer, **error_responses(400, 403, 404)},
    )
    def put(self, request, product_id):
        dto, error = self.service.update_product(path_id(product_id), _validated(request))
        if error:
            return error.to_response()
        self.log.info("Product replaced via API", product_id=dto.id)
        return message_response(
            "Product updated successfully", product=ProductReadSerializer(dto).data
        )

    @extend_schema(
        summary="Delete product",
        responses={200: MessageResponseSerializer, **error_responses(403, 404)},
    )
    def delete(self, request, product_id):
        _deleted, error = self.service.delete_product(path_id(product_id))
        if error:
            return error.to_response()
        self.log.info("Product deleted via API", product_id=product_id)
        return message_response("Product deleted successfully")
