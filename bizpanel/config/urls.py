"""
URL configuration for the bizpanel project.

Every tenant API lives under /api/v1/ and answers with the
{"success": ..., "data" | "error": ...} envelope.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "bizpanel Administration"
admin.site.site_title = "bizpanel Admin Portal"
admin.site.index_title = "Business panel administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('bizpanel.core.urls')),
    path('api/v1/', include('bizpanel.businesses.urls')),
    path('api/v1/', include('bizpanel.catalog.urls')),
    path('api/v1/', include('bizpanel.coupons.urls')),
    path('api/v1/', include('bizpanel.hotel.urls')),
    path('api/v1/', include('bizpanel.realestate.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
