# admissions/urls.py
from django.urls import path

from . import views

app_name = 'admissions'

# /tenants/<tenant_id>/enrollments/
urlpatterns = [
    path('enrollments/', views.enrollment_collection_view, name='enrollment_list'),
    path('enrollments/<int:guardian_id>/', views.pre_registration_detail_view, name='pre_registration_detail'),
    path(
        'enrollments/<int:guardian_id>/validate/',
        views.pre_registration_validate_view,
        name='pre_registration_validate',
    ),
]
