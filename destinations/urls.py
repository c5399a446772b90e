from __future__ import annotations

from django.urls import path

from . import views

app_name = "destinations"

urlpatterns = [
    path("", views.destination_index_view, name="index"),
    path("<str:slug>/", views.destination_detail_view, name="detail"),
]
