from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from drf_spectacular.utils import extend_schema

from apps.api.schemas import error_responses
from apps.api.utils import message_response
from apps.common import get_logger
from .container import build_registration_service
from .serializers import (
    EmailTokenObtainPairSerializer,
    LoginResponseSerializer,
    MeResponseSerializer,
    RegisterRequestSerializer,
    RegisterResponseSerializer,
)

logger = get_logger(__name__).bind(component="auth", layer="view")


@extend_schema(tags=["Auth"])
class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    service = build_registration_service()
    log = logger.bind(view="RegisterView")

    @extend_schema(
        summary="Register user",
        request=RegisterRequestSerializer,
        responses={
            201: RegisterResponseSerializer,
            **error_responses(400),
        },
    )
    def post(self, request):
        serializer = RegisterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result, error = self.service.register(serializer.validated_data)
        if error:
            self.log.warning("Registration failed", code=error.code, detail=error.message)
            return error.to_response()
        self.log.info("Registration completed", user_id=result["id"])
        return message_response(
            "User registered successfully",
            http_status=status.HTTP_201_CREATED,
            id=result["id"],
        )


@extend_schema(
    tags=["Auth"],
    summary="Login (JWT obtain pair)",
    responses={
        200: LoginResponseSerializer,
        **error_responses(401),
    },
)
class LoginView(TokenObtainPairView):
    permission_classes = [AllowAny]
    serializer_class = EmailTokenObtainPairSerializer


@extend_schema(tags=["Auth"], summary="Refresh JWT")
class RefreshView(TokenRefreshView):
    permission_classes = [AllowAny]


@extend_schema(
    tags=["Auth"], summary="Get current user", responses={200: MeResponseSerializer}
)
class MeView(APIView):
    permission_classes = [IsAuthenticated]
    log = logger.bind(view="MeView")

    def get(self, request):
        user = request.user
        self.log.debug("Returning current user profile", user_id=user.id)
        return Response(MeResponseSerializer(user).data)
