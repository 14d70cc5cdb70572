from django.urls import path
from .views import register, slug_available, business_me

urlpatterns = [
    path('auth/register/', register, name='register'),
    path('businesses/slug-available/', slug_available, name='business-slug-available'),
    path('businesses/me/', business_me, name='business-me'),
]
