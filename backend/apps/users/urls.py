from django.urls import path
from apps.users import views

app_name = "users"

urlpatterns = [
    path("me", views.current_user, name="me"),
    path("", views.users_collection, name="users"),
]
