from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("access_store", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CodeReservation",
            fields=[
                (
                    "code",
                    models.CharField(max_length=128, primary_key=True, serialize=False),
                ),
            ],
            options={
                "db_table": "gate_code_reservations",
            },
        ),
    ]
