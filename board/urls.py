from django.urls import path

from . import views

app_name = "board"

urlpatterns = [
    path("", views.home, name="home"),
    path("api/schedule/", views.api_schedule, name="api_schedule"),
    path("api/email/", views.api_email, name="api_email"),
]
