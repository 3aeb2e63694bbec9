# billing/urls.py
from django.urls import path

from . import views

app_name = 'billing'

urlpatterns = [
    path('payments/', views.payment_collection_view, name='payment_list'),
    path('payments/summary/', views.payment_summary_view, name='payment_summary'),
    path('payments/<int:payment_id>/', views.payment_detail_view, name='payment_detail'),
]
