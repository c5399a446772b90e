from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies: list[tuple[str, str]] = []

    operations = [
        migrations.CreateModel(
            name="FlightPackage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=240)),
                ("slug", models.SlugField(max_length=240, unique=True)),
                (
                    "category",
                    models.CharField(blank=True, help_text="Primary destination, e.g. India.", max_length=120),
                ),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "price",
                    models.FloatField(
                        blank=True,
                        help_text="Per-person twin-share price; empty means on request.",
                        null=True,
                    ),
                ),
                ("currency", models.CharField(default="GBP", max_length=3)),
                ("description", models.TextField(blank=True)),
                ("excerpt", models.CharField(blank=True, max_length=500)),
                ("whats_included", models.JSONField(blank=True, default=list)),
                ("highlights", models.JSONField(blank=True, default=list)),
                ("accommodations", models.JSONField(blank=True, default=list)),
                (
                    "duration",
                    models.CharField(blank=True, help_text='Free text such as "10 Nights / 11 Days".', max_length=80),
                ),
                ("featured_image", models.CharField(blank=True, max_length=500)),
                ("display_order", models.IntegerField(blank=True, db_index=True, null=True)),
                ("is_published", models.BooleanField(db_index=True, default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("display_order", "id"),
                "indexes": [
                    models.Index(fields=["is_published", "category"], name="package_pub_category_idx"),
                ],
            },
        ),
    ]
