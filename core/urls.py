# core/urls.py
"""
School-level routes, mounted under /tenants/<tenant_id>/.
"""
from django.urls import path

from . import views

app_name = 'core'

urlpatterns = [
    # ============ SCHOOL ============
    path('', views.school_detail_view, name='school_detail'),

    # ============ CLASSROOMS ============
    path('classrooms/', views.classroom_collection_view, name='classroom_list'),
    path('classrooms/statistics/', views.classroom_statistics_view, name='classroom_statistics'),
    path('classrooms/<int:classroom_id>/', views.classroom_detail_view, name='classroom_detail'),
]
