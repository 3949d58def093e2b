from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'expenses'

router = DefaultRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # Expense ViewSet routes
    # GET    /api/expenses/               - List expenses (filterable)
    # POST   /api/expenses/               - Record expense
    # GET    /api/expenses/{id}/          - Expense details
    # PATCH  /api/expenses/{id}/          - Edit expense (admin or recorder)
    # DELETE /api/expenses/{id}/          - Delete expense (admin)
    # GET    /api/expenses/categories/    - Category suggestions
    # GET    /api/expenses/summary/       - Totals by category

    path('', include(router.urls)),
]
