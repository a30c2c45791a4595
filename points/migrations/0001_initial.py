from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AccountBalance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("balance", models.BigIntegerField(default=0)),
                ("total_earned", models.BigIntegerField(default=0)),
                ("total_spent", models.BigIntegerField(default=0)),
                ("last_updated", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="points_balance",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "points_balances",
                "constraints": [
                    models.CheckConstraint(condition=models.Q(balance__gte=0), name="points_balance_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(balance=models.F("total_earned") - models.F("total_spent")),
                        name="points_balance_matches_totals",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.BigIntegerField()),
                (
                    "kind",
                    models.CharField(
                        choices=[("EARNED", "Earned"), ("SPENT", "Spent"), ("ADJUSTED", "Adjusted")],
                        max_length=16,
                    ),
                ),
                ("description", models.CharField(blank=True, max_length=500)),
                ("reference_id", models.CharField(blank=True, max_length=255, null=True)),
                ("balance_after", models.BigIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="points_history",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "points_history",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["user", "created_at"], name="points_hist_user_created_idx"),
                    models.Index(fields=["reference_id"], name="points_hist_reference_idx"),
                ],
            },
        ),
    ]
