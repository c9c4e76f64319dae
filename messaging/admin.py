"""
Admin configuration for messaging.
"""

from django.contrib import admin

from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['sender', 'receiver', 'short_content', 'read', 'created_at']
    list_filter = ['read', 'created_at']
    search_fields = ['sender__email', 'receiver__email', 'content']
    raw_id_fields = ['sender', 'receiver']
    readonly_fields = ['created_at']

    @admin.display(description='Content')
    def short_content(self, obj):
        return obj.content[:50]
