from django.urls import path
from . import views

app_name = 'sequences'

urlpatterns = [
    # GET /api/sequences/          - All counters (admin)
    path('', views.counter_list, name='counter-list'),

    # GET /api/sequences/{name}/   - One counter's value, not advanced (admin)
    path('<str:name>/', views.counter_detail, name='counter-detail'),
]
