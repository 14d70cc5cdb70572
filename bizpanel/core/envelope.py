"""Success envelope shared by every panel endpoint"""
from rest_framework import status
from rest_framework.response import Response


def success_response(data=None, status_code=status.HTTP_200_OK, **extra):
    """Wrap a payload as {"success": true, "data": ...}"""
    body = {'success': True, 'data': data}
    body.update(extra)
    return Response(body, status=status_code)
