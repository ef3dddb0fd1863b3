"""
Authentication and user administration.

The access token travels in the response body and is sent back as a Bearer
header. The refresh token is kept in an HTTP-only cookie scoped to the auth
endpoints and rotated on every refresh.
"""
import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from django.db import transaction
from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes, authentication_classes, action
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from api.permissions import IsActiveUser, IsAdminRole
from audit.helpers import log_action
from audit.models import AuditLog
from common.responses import success_response, created_response
from core.constants import UserStatus
from core.exceptions import AuthenticationError, BusinessLogicError, NotFoundError, PermissionDeniedError
from .models import User
from .serializers import UserSerializer, UserCreateSerializer, UserUpdateSerializer, LoginSerializer

logger = logging.getLogger(__name__)

SESSION_EXPIRED = "Session expired. Please log in again."


def _set_refresh_cookie(response, refresh_token):
    response.set_cookie(
        settings.REFRESH_COOKIE_NAME,
        str(refresh_token),
        max_age=int(settings.SIMPLE_JWT['REFRESH_TOKEN_LIFETIME'].total_seconds()),
        httponly=True,
        secure=settings.REFRESH_COOKIE_SECURE,
        samesite=settings.REFRESH_COOKIE_SAMESITE,
        path=settings.REFRESH_COOKIE_PATH,
    )


def _clear_refresh_cookie(response):
    response.delete_cookie(settings.REFRESH_COOKIE_NAME, path=settings.REFRESH_COOKIE_PATH)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login_view(request):
    """POST /auth/login {username, password} -> {success, accessToken, user}"""
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    username = serializer.validated_data['username']

    user = authenticate(request, username=username, password=serializer.validated_data['password'])
    if user is None:
        logger.info(f"Failed login for {username}")
        suspended = User.objects.filter(username=username, status=UserStatus.SUSPENDED).first()
        # Suspension is only revealed to someone holding the right password
        if suspended and suspended.check_password(serializer.validated_data['password']):
            raise PermissionDeniedError(message="Your account has been suspended", code="SUSPENDED")
        raise AuthenticationError(message="Invalid username or password")

    refresh = RefreshToken.for_user(user)
    update_last_login(None, user)
    log_action(user, AuditLog.ACTION_LOGIN, AuditLog.RESOURCE_USER, user.id,
               f"User {user.username} logged in", request=request)

    response = success_response(
        message="Login successful",
        accessToken=str(refresh.access_token),
        user=UserSerializer(user).data,
    )
    _set_refresh_cookie(response, refresh)
    return response


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def refresh_view(request):
    """
    POST /auth/refresh
    Reads the refresh cookie, rotates it and returns a fresh access token.
    Any failure is a 401 "Session expired" so the client logs out.
    """
    token = request.COOKIES.get(settings.REFRESH_COOKIE_NAME)
    if not token:
        raise AuthenticationError(message=SESSION_EXPIRED, code="SESSION_EXPIRED")

    try:
        user_id = RefreshToken(token)[settings.SIMPLE_JWT.get('USER_ID_CLAIM', 'user_id')]
    except (TokenError, KeyError):
        raise AuthenticationError(message=SESSION_EXPIRED, code="SESSION_EXPIRED")

    user = User.objects.filter(pk=user_id, is_active=True).first()
    if user is None:
        raise AuthenticationError(message=SESSION_EXPIRED, code="SESSION_EXPIRED")

    serializer = TokenRefreshSerializer(data={'refresh': token})
    try:
        serializer.is_valid(raise_exception=True)
    except (TokenError, AuthenticationFailed):
        raise AuthenticationError(message=SESSION_EXPIRED, code="SESSION_EXPIRED")

    response = success_response(
        accessToken=serializer.validated_data['access'],
        user=UserSerializer(user).data,
    )
    _set_refresh_cookie(response, serializer.validated_data.get('refresh', token))
    return response


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def logout_view(request):
    """Blacklist the refresh token and drop the cookie"""
    token = request.COOKIES.get(settings.REFRESH_COOKIE_NAME)
    if token:
        try:
            refresh = RefreshToken(token)
            user_id = refresh.get('user_id')
            refresh.blacklist()
            log_action(User.objects.filter(pk=user_id).first(), AuditLog.ACTION_LOGOUT,
                       AuditLog.RESOURCE_USER, user_id, "User logged out", request=request)
        except TokenError as e:
            logger.info(f"Logout with unusable refresh token: {e}")

    response = success_response(message="Logged out")
    _clear_refresh_cookie(response)
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveUser])
def me_view(request):
    return success_response(UserSerializer(request.user).data)


class UserAdminViewSet(viewsets.ModelViewSet):
    """
    User administration, admin only.
    Routes follow the dashboard's paths (fetchAll / create / update / delete).
    """
    permission_classes = [IsAuthenticated, IsAdminRole]
    queryset = User.objects.all().order_by('username')

    def get_serializer_class(self):
        if self.action == 'create':
            return UserCreateSerializer
        if self.action in ('update', 'partial_update'):
            return UserUpdateSerializer
        return UserSerializer

    def list(self, request, *args, **kwargs):
        data = UserSerializer(self.get_queryset(), many=True).data
        return success_response(data, count=len(data))

    @transaction.atomic
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        log_action(request.user, AuditLog.ACTION_CREATE, AuditLog.RESOURCE_USER, user.id,
                   f"Created user {user.username} ({user.role})", request=request)
        return created_response(UserSerializer(user).data, "User created successfully")

    @transaction.atomic
    def update(self, request, *args, **kwargs):
        user = User.objects.select_for_update().filter(pk=kwargs.get('pk')).first()
        if not user:
            raise NotFoundError(resource_type='User', resource_id=kwargs.get('pk'))
        serializer = self.get_serializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        log_action(request.user, AuditLog.ACTION_UPDATE, AuditLog.RESOURCE_USER, user.id,
                   f"Updated user {user.username}", request=request)
        return success_response(UserSerializer(user).data, "User updated successfully")

    @transaction.atomic
    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.pk == request.user.pk:
            raise BusinessLogicError(message="You cannot delete your own account", code="SELF_DELETE")
        log_action(request.user, AuditLog.ACTION_DELETE, AuditLog.RESOURCE_USER, user.id,
                   f"Deleted user {user.username}", request=request)
        user.delete()
        return success_response(message="User deleted successfully")

    def _set_status(self, request, new_status):
        user = self.get_object()
        if user.pk == request.user.pk:
            raise BusinessLogicError(message="You cannot change your own status", code="SELF_STATUS")
        user.status = new_status
        user.save()
        log_action(request.user, AuditLog.ACTION_STATUS, AuditLog.RESOURCE_USER, user.id,
                   f"User {user.username} is now {new_status}", request=request)
        return success_response(UserSerializer(user).data, f"User {new_status}")

    @action(detail=True, methods=['put'])
    def suspend(self, request, pk=None):
        return self._set_status(request, UserStatus.SUSPENDED)

    @action(detail=True, methods=['put'])
    def unsuspend(self, request, pk=None):
        return self._set_status(request, UserStatus.ACTIVE)
