from typing import TYPE_CHECKING

from django.contrib import admin

from .models import FlightPackage

if TYPE_CHECKING:
    _BaseFlightPackageAdmin = admin.ModelAdmin[FlightPackage]
else:
    _BaseFlightPackageAdmin = admin.ModelAdmin


@admin.register(FlightPackage)
class FlightPackageAdmin(_BaseFlightPackageAdmin):
    list_display = (
        "id",
        "title",
        "category",
        "price",
        "duration",
        "display_order",
        "is_published",
        "updated_at",
    )
    list_filter = ("is_published", "category")
    search_fields = ("title", "slug", "category", "description")
    prepopulated_fields = {"slug": ("title",)}
    readonly_fields = ("created_at", "updated_at")
    ordering = ("display_order", "id")
