"""
Descriptions of the remote collections and how each one is addressed.

Query-style collections carry the item id in the query string (GET/DELETE)
or the body (PUT/PATCH); path-style collections use <base>/<id>/.
"""
from typing import Any, Dict, List, Optional

QUERY = 'query'
PATH = 'path'


class Resource:
    def __init__(self, name: str, path: str, label: str, id_style: str = QUERY, batch_reorder: bool = True):
        if id_style not in (QUERY, PATH):
            raise ValueError(f"id_style must be {QUERY!r} or {PATH!r}")
        self.name = name
        self.path = path.strip('/') + '/'
        self.label = label
        self.id_style = id_style
        self.batch_reorder = batch_reorder

    def __repr__(self):
        return f"Resource({self.name!r}, {self.path!r})"

    def _item_path(self, item_id) -> str:
        return f"{self.path}{item_id}/"

    def fetch_all(self, api, params: Optional[Dict] = None) -> List[Dict]:
        data = api.get(self.path, params=params)
        return list(data or [])

    def create(self, api, fields: Dict, params: Optional[Dict] = None) -> Dict[str, Any]:
        return api.post(self.path, json=fields, params=params)

    def update(self, api, item_id, fields: Dict, params: Optional[Dict] = None) -> Dict[str, Any]:
        if self.id_style == QUERY:
            return api.patch(self.path, json=dict(fields, id=item_id), params=params)
        return api.patch(self._item_path(item_id), json=fields, params=params)

    def delete(self, api, item_id, params: Optional[Dict] = None):
        if self.id_style == QUERY:
            return api.delete(self.path, params=dict(params or {}, id=item_id))
        return api.delete(self._item_path(item_id), params=params)

    def reorder(self, api, pairs, params: Optional[Dict] = None):
        items = [{'id': item_id, 'sort_order': position} for item_id, position in pairs]
        return api.post(f"{self.path}reorder/", json={'items': items}, params=params)


CATEGORIES = Resource('categories', 'fastfood/categories', 'Category')
PRODUCTS = Resource('products', 'fastfood/products', 'Product')
COUPONS = Resource('coupons', 'fastfood/coupons', 'Coupon')
ROOM_TYPES = Resource('room_types', 'hotel/room-types', 'Room type', id_style=PATH)
ROOMS = Resource('rooms', 'hotel/rooms', 'Room', id_style=PATH)
LISTINGS = Resource('listings', 'emlak/listings', 'Listing')
