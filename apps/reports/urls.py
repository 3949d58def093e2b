from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    # GET /api/reports/daily/?date=YYYY-MM-DD
    path('daily/', views.daily_summary, name='daily'),

    # GET /api/reports/range/?start_date=YYYY-MM-DD&end_date=YYYY-MM-DD
    path('range/', views.range_summary, name='range'),

    # GET /api/reports/dashboard/
    path('dashboard/', views.dashboard, name='dashboard'),
]
