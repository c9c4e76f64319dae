"""
Opportunities URLs - Opportunities, applications, admin review and dashboards.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

app_name = 'opportunities'

router = SimpleRouter()
router.register(r'applications', views.ApplicationViewSet, basename='application')
router.register(r'admin-approvals', views.AdminApprovalViewSet, basename='admin-approval')
router.register(r'', views.OpportunityViewSet, basename='opportunity')

urlpatterns = [
    # Dashboards
    path('dashboard/volunteer/', views.VolunteerDashboardView.as_view(), name='volunteer-dashboard'),
    path('dashboard/organization/', views.OrganizationDashboardView.as_view(), name='organization-dashboard'),

    path('', include(router.urls)),
]
