from __future__ import annotations

from django.urls import path

from . import views

app_name = "collections"

urlpatterns = [
    path("", views.collection_index_view, name="index"),
    path("<slug:slug>/", views.collection_detail_view, name="detail"),
]
