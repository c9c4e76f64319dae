"""
Admin configuration for opportunities.
"""

from django.contrib import admin

from .models import AdminApproval, Application, Opportunity


class ApplicationInline(admin.TabularInline):
    model = Application
    extra = 0
    raw_id_fields = ['volunteer']
    readonly_fields = ['created_at']


@admin.register(Opportunity)
class OpportunityAdmin(admin.ModelAdmin):
    list_display = ['title', 'created_by', 'location', 'cause_type', 'status', 'created_at']
    list_filter = ['status', 'cause_type', 'created_at']
    search_fields = ['title', 'description', 'location', 'created_by__email']
    raw_id_fields = ['created_by']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [ApplicationInline]


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ['volunteer', 'opportunity', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['volunteer__email', 'opportunity__title']
    raw_id_fields = ['volunteer', 'opportunity']


@admin.register(AdminApproval)
class AdminApprovalAdmin(admin.ModelAdmin):
    list_display = ['opportunity', 'admin', 'status', 'updated_at']
    list_filter = ['status']
    search_fields = ['opportunity__title', 'admin__email', 'notes']
    raw_id_fields = ['opportunity', 'admin']
