from django.urls import path
from . import views

app_name = 'weather'

urlpatterns = [
    path('api/preview/', views.preview, name='preview'),
]
