from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'sales'

router = DefaultRouter()
router.register(r'', views.SaleViewSet, basename='sale')

urlpatterns = [
    # Sale ViewSet routes
    # GET    /api/sales/              - List sales (filterable)
    # POST   /api/sales/              - Record sale
    # GET    /api/sales/{id}/         - Sale details
    # DELETE /api/sales/{id}/         - Delete sale (admin)
    # GET    /api/sales/summary/      - Totals for the filtered sales

    path('', include(router.urls)),
]
