# communications/urls.py
from django.urls import path

from . import views

app_name = 'communications'

urlpatterns = [
    # Liaison notebook
    path('liaison/', views.liaison_collection_view, name='liaison_list'),
    path('liaison/statistics/', views.liaison_statistics_view, name='liaison_statistics'),
    path('liaison/<int:message_id>/', views.liaison_detail_view, name='liaison_detail'),
    path('liaison/<int:message_id>/mark-read/', views.liaison_mark_read_view, name='liaison_mark_read'),
    path('liaison/<int:message_id>/reply/', views.liaison_reply_view, name='liaison_reply'),

    # Announcements
    path('announcements/', views.announcement_collection_view, name='announcement_list'),
    path('announcements/statistics/', views.announcement_statistics_view, name='announcement_statistics'),
    path('announcements/<int:announcement_id>/', views.announcement_detail_view, name='announcement_detail'),

    # Activities
    path('activities/', views.activity_collection_view, name='activity_list'),
    path('activities/upcoming/', views.activity_upcoming_view, name='activity_upcoming'),
    path('activities/calendar/', views.activity_calendar_view, name='activity_calendar'),
    path('activities/statistics/', views.activity_statistics_view, name='activity_statistics'),
    path('activities/<int:activity_id>/', views.activity_detail_view, name='activity_detail'),
]
