from django.contrib import admin

from .models import Activity


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ("type", "actor", "description", "ip_address", "created_at")
    list_filter = ("type",)
    search_fields = ("description", "actor__email")
    readonly_fields = ("type", "actor", "description", "details", "ip_address", "user_agent", "created_at")
