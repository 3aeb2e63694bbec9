# records/urls.py
from django.urls import path

from . import views

app_name = 'records'

urlpatterns = [
    # Report cards
    path('report-cards/', views.report_card_collection_view, name='report_card_list'),
    path('report-cards/<int:report_card_id>/', views.report_card_detail_view, name='report_card_detail'),
    path(
        'report-cards/<int:report_card_id>/download/',
        views.report_card_download_view,
        name='report_card_download',
    ),

    # Schedules
    path('schedules/', views.schedule_collection_view, name='schedule_list'),
    path('schedules/<int:schedule_id>/', views.schedule_detail_view, name='schedule_detail'),
    path('schedules/<int:schedule_id>/download/', views.schedule_download_view, name='schedule_download'),
]
