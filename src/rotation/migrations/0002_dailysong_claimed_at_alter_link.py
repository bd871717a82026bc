from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("rotation", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="dailysong",
            name="claimed_at",
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.AlterField(
            model_name="dailysong",
            name="link",
            field=models.TextField(),
        ),
    ]
