import logging

from django.db.models import Count
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from bizpanel.core.crud import create_from_request, update_from_request, delete_instance
from bizpanel.core.envelope import success_response
from bizpanel.core.errors import AppError
from bizpanel.core.ordering import parse_reorder_items, apply_bulk_reorder
from bizpanel.core.tenancy import get_request_business, get_owned_object
from .models import RoomType, Room
from .serializers import RoomTypeSerializer, RoomSerializer, RoomStatusSerializer

logger = logging.getLogger('bizpanel.hotel')


# Room type views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def room_type_list_create(request):
    """List room types with their room counts or create a new room type"""
    business = get_request_business(request)
    if request.method == 'GET':
        room_types = RoomType.objects.filter(business=business).annotate(room_count=Count('rooms')).order_by('sort_order', 'id')
        return success_response(RoomTypeSerializer(room_types, many=True).data)
    return create_from_request(request, business, RoomTypeSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def room_type_detail(request, pk):
    """Retrieve, update or delete a room type"""
    business = get_request_business(request)
    room_type = get_owned_object(RoomType, business, pk, 'Room type')

    if request.method == 'GET':
        return success_response(RoomTypeSerializer(room_type).data)
    if request.method in ('PUT', 'PATCH'):
        return update_from_request(request, business, RoomTypeSerializer, room_type, partial=request.method == 'PATCH')

    room_count = room_type.rooms.count()
    if room_count:
        raise AppError.conflict(
            f'{room_count} rooms use this room type. Reassign or delete them first.',
            [f'rooms_count: {room_count}'],
        )
    return delete_instance(request, business, room_type)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def room_type_reorder(request):
    business = get_request_business(request)
    room_types = apply_bulk_reorder(request, RoomType, business, parse_reorder_items(request.data))
    return success_response(RoomTypeSerializer(room_types, many=True).data)


# Room views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def room_list_create(request):
    """List rooms (optionally ?status= / ?room_type=) or create a new room"""
    business = get_request_business(request)
    if request.method == 'GET':
        rooms = Room.objects.filter(business=business).select_related('room_type')
        status_filter = request.query_params.get('status')
        if status_filter:
            rooms = rooms.filter(status=status_filter)
        room_type_filter = request.query_params.get('room_type')
        if room_type_filter:
            if not room_type_filter.isdigit():
                raise AppError.bad_request('room_type must be an id')
            rooms = rooms.filter(room_type_id=int(room_type_filter))
        return success_response(RoomSerializer(rooms.order_by('sort_order', 'id'), many=True).data)
    return create_from_request(request, business, RoomSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def room_detail(request, pk):
    """Retrieve, update or delete a room"""
    business = get_request_business(request)
    room = get_owned_object(Room, business, pk, 'Room')

    if request.method == 'GET':
        return success_response(RoomSerializer(room).data)
    if request.method in ('PUT', 'PATCH'):
        return update_from_request(request, business, RoomSerializer, room, partial=request.method == 'PATCH')
    return delete_instance(request, business, room)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def room_status(request, pk):
    """Change only the housekeeping status of a room"""
    business = get_request_business(request)
    room = get_owned_object(Room, business, pk, 'Room')
    response = update_from_request(request, business, RoomStatusSerializer, room, action='status_change', partial=False)
    return success_response(RoomSerializer(room).data, status_code=response.status_code)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def room_reorder(request):
    business = get_request_business(request)
    rooms = apply_bulk_reorder(request, Room, business, parse_reorder_items(request.data))
    return success_response(RoomSerializer(rooms, many=True).data)
