from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'branches'

router = DefaultRouter()
router.register(r'', views.BranchViewSet, basename='branch')

urlpatterns = [
    path('', include(router.urls)),
]
