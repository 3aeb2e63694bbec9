# users/urls.py
"""
USER URLS - three groups mounted separately by config.urls:
school principals, account/auth endpoints and platform administration.
"""
from django.urls import path

from . import views

app_name = 'users'

# /tenants/<tenant_id>/users/
urlpatterns = [
    path('', views.principal_collection_view, name='principal_list'),
    path('statistics/', views.principal_statistics_view, name='principal_statistics'),
    path('<int:user_id>/', views.principal_detail_view, name='principal_detail'),
    path('<int:user_id>/reset-password/', views.principal_reset_password_view, name='principal_reset_password'),
]

# /auth/
account_urlpatterns = [
    path('csrf/', views.csrf_view, name='csrf'),
    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('me/', views.me_view, name='me'),
    path('change-password/', views.change_password_view, name='change_password'),
]

# /platform/
platform_urlpatterns = [
    path('super-admins/', views.super_admin_collection_view, name='super_admin_list'),
    path('users/<int:user_id>/', views.platform_principal_delete_view, name='platform_user_delete'),
]
