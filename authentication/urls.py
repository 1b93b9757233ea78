from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

from . import views

urlpatterns = [
    # =============== API DOCUMENTATION ===============
    path('schema/', SpectacularAPIView.as_view(), name='schema'),
    path('docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),

    # =============== AUTHENTICATION ===============
    path('auth/login/', views.LoginView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # =============== USER PROFILE ===============
    path('profile/', views.MyProfileView.as_view(), name='my_profile'),

    # =============== BRANCH MANAGEMENT ===============
    path('branches/', views.BranchListCreateView.as_view(), name='branch_list_create'),
    path('branches/<int:branch_id>/', views.BranchDetailView.as_view(), name='branch_detail'),

    # =============== EMPLOYEE MANAGEMENT ===============
    path('employees/', views.EmployeeListCreateView.as_view(), name='employee_list_create'),
    path('employees/<int:user_id>/', views.EmployeeDetailView.as_view(), name='employee_detail'),

    # =============== SYSTEM ===============
    path('health/', views.health_check, name='health_check'),
]
