# students/urls.py
"""
STUDENT URLS - mounted under /tenants/<tenant_id>/.
"""
from django.urls import path

from . import views

app_name = 'students'

urlpatterns = [
    # ============ CHILDREN ============
    path('children/', views.child_collection_view, name='child_list'),
    path('children/statistics/', views.child_statistics_view, name='child_statistics'),
    path('children/<int:child_id>/', views.child_detail_view, name='child_detail'),

    # ============ LINKS ============
    path('parent-links/', views.parent_link_collection_view, name='parent_link_list'),
    path('parent-links/<int:link_id>/', views.parent_link_delete_view, name='parent_link_delete'),
    path('teacher-links/', views.teacher_link_collection_view, name='teacher_link_list'),
    path('teacher-links/<int:link_id>/', views.teacher_link_delete_view, name='teacher_link_delete'),
]
