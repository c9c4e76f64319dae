"""
URL configuration for client storage.
"""

from django.urls import path

from . import views

app_name = 'client_storage'

urlpatterns = [
    path('<str:key>/', views.StorageKeyView.as_view(), name='key'),
]
