from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="GuestCredentialRecord",
            fields=[
                (
                    "credential_id",
                    models.CharField(max_length=64, primary_key=True, serialize=False),
                ),
                ("owner_id", models.CharField(db_index=True, max_length=255)),
                ("guest_name", models.CharField(max_length=255)),
                (
                    "code_type",
                    models.CharField(
                        choices=[("PIN", "PIN"), ("QR", "QR")],
                        max_length=8,
                    ),
                ),
                ("code", models.CharField(db_index=True, max_length=128)),
                ("valid_from", models.DateTimeField()),
                ("valid_until", models.DateTimeField()),
                ("max_usage", models.PositiveIntegerField()),
                ("usage_count", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("used", "Used"),
                            ("revoked", "Revoked"),
                        ],
                        default="active",
                        max_length=16,
                    ),
                ),
                ("purpose", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                ("revoked_at", models.DateTimeField(blank=True, null=True)),
                ("revoked_by", models.CharField(blank=True, max_length=255, null=True)),
                ("last_used_at", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
            ],
            options={
                "db_table": "gate_guest_credentials",
                "ordering": ["-created_at", "-credential_id"],
                "indexes": [
                    models.Index(
                        fields=["code", "created_at"],
                        name="idx_credential_code_created",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DeliveryRecord",
            fields=[
                (
                    "delivery_id",
                    models.CharField(max_length=64, primary_key=True, serialize=False),
                ),
                ("resident_id", models.CharField(db_index=True, max_length=255)),
                ("unit_number", models.CharField(db_index=True, max_length=32)),
                ("delivery_company", models.CharField(max_length=255)),
                ("tracking_number", models.CharField(blank=True, max_length=255, null=True)),
                ("expected_date", models.DateTimeField()),
                ("notes", models.TextField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("authorized", "Authorized"),
                            ("delivered", "Delivered"),
                            ("failed", "Failed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="authorized",
                        max_length=16,
                    ),
                ),
                ("authorized_at", models.DateTimeField()),
                ("authorized_by", models.CharField(max_length=255)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("resolved_by", models.CharField(blank=True, max_length=255, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
            ],
            options={
                "db_table": "gate_deliveries",
                "ordering": ["-authorized_at", "-delivery_id"],
            },
        ),
    ]
