import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("MEMBER_CREATED", "Member created"),
                            ("MEMBER_UPDATED", "Member updated"),
                            ("MEMBER_DELETED", "Member deleted"),
                            ("AGENCY_CREATED", "Agency created"),
                            ("AGENCY_UPDATED", "Agency updated"),
                            ("AGENCY_DELETED", "Agency deleted"),
                            ("ROLE_ASSIGNED", "Role assigned"),
                        ],
                        max_length=32,
                    ),
                ),
                ("description", models.TextField()),
                ("details", models.JSONField(blank=True, default=dict)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Activities",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["actor", "created_at"], name="activity_actor_created_idx"),
                    models.Index(fields=["type", "created_at"], name="activity_type_created_idx"),
                ],
            },
        ),
    ]
