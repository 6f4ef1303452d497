from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CvNode",
            fields=[
                ("id", models.CharField(max_length=50, primary_key=True, serialize=False)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("PROFILE", "Profile"),
                            ("CATEGORY", "Category"),
                            ("ITEM", "Item"),
                            ("SKILL_GROUP", "Skill group"),
                            ("SKILL", "Skill"),
                        ],
                        editable=False,
                        max_length=20,
                    ),
                ),
                ("label", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                ("attributes", models.JSONField(blank=True, null=True)),
                ("position_x", models.IntegerField(blank=True, null=True)),
                ("position_y", models.IntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="cvnodes.cvnode",
                    ),
                ),
            ],
            options={
                "db_table": "cv_node",
                "ordering": ["created_at"],
            },
        ),
    ]
