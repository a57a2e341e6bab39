"""In-process stand-in for browser local storage.

Each row is one key/value pair of a namespace (one simulated browser profile).
Values are opaque strings; callers store JSON blobs under fixed keys.
"""

from django.db import models


class StorageItem(models.Model):
	"""
	A single localStorage entry: (namespace, key) -> raw string value
	"""
	id = models.BigAutoField(primary_key=True)
	namespace = models.CharField(max_length=64, default="demo")
	key = models.CharField(max_length=128)
	value = models.TextField(blank=True, default="")
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		unique_together = (("namespace", "key"),)
		indexes = [
			models.Index(fields=["namespace", "key"], name="storage_stu_namespa_3c1f0e_idx"),
		]
