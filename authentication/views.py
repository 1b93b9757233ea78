import logging

from rest_framework import generics, status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView
from django.db import connection, DatabaseError
from django.db.models import Count
from django.utils import timezone
from django.utils.translation import gettext as _
from drf_spectacular.utils import extend_schema, OpenApiExample

from .exceptions import BusinessRuleViolation
from .models import User, Branch
from .permissions import IsAdmin, get_user_permissions
from .serializers import (
    UserSerializer, LoginSerializer, BranchSerializer, EmployeeSerializer, ProfileSerializer
)

logger = logging.getLogger(__name__)


# =============== AUTHENTICATION VIEWS ===============

class LoginView(TokenObtainPairView):
    """
    JWT authentication endpoint.

    Returns the token pair together with the user's role, branch and
    role capabilities so the client can build its navigation.
    """
    serializer_class = LoginSerializer

    @extend_schema(
        summary="User Login with JWT Token",
        request=LoginSerializer,
        responses={
            200: {
                'type': 'object',
                'properties': {
                    'refresh': {'type': 'string', 'description': 'JWT refresh token'},
                    'access': {'type': 'string', 'description': 'JWT access token'},
                    'user': {'type': 'object', 'description': 'User information'},
                    'role': {'type': 'string', 'description': 'admin or cashier'},
                    'permissions': {'type': 'object', 'description': 'Role capabilities'},
                }
            },
            422: {'description': 'Invalid credentials or validation errors'},
        },
        examples=[
            OpenApiExample(
                'Cashier Login',
                value={
                    "email": "cashier@cabang.id",
                    "password": "SecurePassword123!",
                }
            )
        ]
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']
        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])

        refresh = RefreshToken.for_user(user)
        refresh['role'] = user.role
        refresh['branch_id'] = user.branch_id

        logger.info("User logged in", extra={'user_id': user.id, 'role': user.role})

        return Response({
            'success': True,
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserSerializer(user).data,
            'role': user.role,
            'permissions': get_user_permissions(user),
        }, status=status.HTTP_200_OK)


# =============== USER PROFILE ===============

class MyProfileView(generics.RetrieveUpdateAPIView):
    """
    Current user's profile. Only the display name can be changed here.
    """
    serializer_class = ProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(summary="Get My Profile")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_object(self):
        return self.request.user


# =============== BRANCH MANAGEMENT ===============

class BranchListCreateView(generics.ListCreateAPIView):
    """
    List and create branches.
    """
    serializer_class = BranchSerializer
    permission_classes = [IsAdmin]
    pagination_class = None

    def get_queryset(self):
        return Branch.objects.annotate(users_count=Count('users')).order_by('-created_at')

    @extend_schema(
        summary="Create New Branch",
        request=BranchSerializer,
        responses={201: BranchSerializer, 403: {'description': 'Only admins can create branches'}},
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform_create(self, serializer):
        branch = serializer.save()
        logger.info("Branch created", extra={'branch_id': branch.id, 'user_id': self.request.user.id})


class BranchDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    Retrieve, update or delete a specific branch.
    """
    serializer_class = BranchSerializer
    permission_classes = [IsAdmin]
    lookup_url_kwarg = 'branch_id'

    def get_queryset(self):
        return Branch.objects.annotate(users_count=Count('users'))

    @extend_schema(
        summary="Delete Branch",
        description="Delete a branch. Branches that still have employees cannot be deleted.",
    )
    def delete(self, request, *args, **kwargs):
        return super().delete(request, *args, **kwargs)

    def perform_destroy(self, instance):
        if instance.users.exists():
            raise BusinessRuleViolation(_('Cannot delete a branch that still has employees.'))
        instance.delete()


# =============== EMPLOYEE MANAGEMENT ===============

class EmployeeListCreateView(generics.ListCreateAPIView):
    """
    List and create employee accounts.
    """
    serializer_class = EmployeeSerializer
    permission_classes = [IsAdmin]
    pagination_class = None

    def get_queryset(self):
        return User.objects.select_related('branch').order_by('-date_joined')

    @extend_schema(summary="Create Employee", request=EmployeeSerializer)
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


class EmployeeDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    Retrieve, update or delete an employee account.
    """
    serializer_class = EmployeeSerializer
    permission_classes = [IsAdmin]
    lookup_url_kwarg = 'user_id'

    def get_queryset(self):
        return User.objects.select_related('branch')

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise BusinessRuleViolation(_('You cannot delete your own account.'))
        instance.delete()


# =============== SYSTEM ===============

@extend_schema(
    summary="Health Check",
    responses={200: {'type': 'object'}, 503: {'type': 'object'}},
)
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def health_check(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return Response({
            'status': 'healthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'connected',
        })
    except DatabaseError:
        logger.exception("Health check failed")
        return Response({
            'status': 'unhealthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'disconnected',
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)
