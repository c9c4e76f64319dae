"""
Accounts URLs - Authentication, profile and account management routes.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'accounts'

router = DefaultRouter()
router.register(r'users', views.PublicProfileViewSet, basename='user')

urlpatterns = [
    # Authentication
    path('register/', views.RegisterView.as_view(), name='register'),
    path('login/', views.LoginView.as_view(), name='login'),
    path('logout/', views.LogoutView.as_view(), name='logout'),

    # Current user and role profiles
    path('me/', views.CurrentUserView.as_view(), name='me'),
    path('me/volunteer-profile/', views.VolunteerProfileView.as_view(), name='volunteer-profile'),
    path('me/organization-profile/', views.OrganizationProfileView.as_view(), name='organization-profile'),
    path('me/profile-picture/', views.ProfilePictureView.as_view(), name='profile-picture'),

    # Account management
    path('me/email/', views.EmailUpdateView.as_view(), name='email-update'),
    path('me/password/', views.PasswordChangeView.as_view(), name='password-change'),
    path('me/delete/', views.AccountDeleteView.as_view(), name='account-delete'),

    # Password reset
    path('password-reset/', views.PasswordResetRequestView.as_view(), name='password-reset'),
    path('password-reset/confirm/', views.PasswordResetConfirmView.as_view(), name='password-reset-confirm'),

    path('', include(router.urls)),
]
