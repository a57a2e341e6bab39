from django.urls import path
from .views import keys, item


urlpatterns = [
	path("keys", keys),
	path("item/<str:key>", item),
]
