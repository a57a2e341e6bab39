from django.db import migrations, models


class Migration(migrations.Migration):

	initial = True

	dependencies = []

	operations = [
		migrations.CreateModel(
			name="StorageItem",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("namespace", models.CharField(default="demo", max_length=64)),
				("key", models.CharField(max_length=128)),
				("value", models.TextField(blank=True, default="")),
				("updated_at", models.DateTimeField(auto_now=True)),
			],
			options={
				"unique_together": {("namespace", "key")},
				"indexes": [models.Index(fields=["namespace", "key"], name="storage_stu_namespa_3c1f0e_idx")],
			},
		),
	]
