from django.urls import path
from .views import (
    room_type_list_create, room_type_detail, room_type_reorder,
    room_list_create, room_detail, room_status, room_reorder,
)

urlpatterns = [
    path('hotel/room-types/', room_type_list_create, name='room-type-list-create'),
    path('hotel/room-types/reorder/', room_type_reorder, name='room-type-reorder'),
    path('hotel/room-types/<int:pk>/', room_type_detail, name='room-type-detail'),
    path('hotel/rooms/', room_list_create, name='room-list-create'),
    path('hotel/rooms/reorder/', room_reorder, name='room-reorder'),
    path('hotel/rooms/<int:pk>/', room_detail, name='room-detail'),
    path('hotel/rooms/<int:pk>/status/', room_status, name='room-status'),
]
