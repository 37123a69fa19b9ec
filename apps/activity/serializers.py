from rest_framework import serializers  # type: ignore

from .models import Activity


class ActivitySerializer(serializers.ModelSerializer):
    actor_email = serializers.EmailField(source="actor.email", read_only=True, default=None)

    class Meta:
        model = Activity
        fields = ["id", "type", "description", "actor_id", "actor_email", "details", "created_at"]
        read_only_fields = fields
