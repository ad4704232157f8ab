from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("accounts", "0001_initial"),
        ("destinations", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="user",
            name="favorite_destinations",
            field=models.ManyToManyField(
                blank=True,
                related_name="favorited_by",
                to="destinations.destination",
            ),
        ),
    ]
