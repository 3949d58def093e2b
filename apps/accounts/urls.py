from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('login/', views.login, name='login'),

    # Current user profile
    path('user/', views.current_user, name='current-user'),

    # User management (admin)
    path('users/', views.users, name='user-list'),
    path('users/<uuid:pk>/', views.user_detail, name='user-detail'),
    path('users/<uuid:pk>/deactivate/', views.deactivate, name='user-deactivate'),
]
