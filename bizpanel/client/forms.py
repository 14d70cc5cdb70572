"""
Form/Modal Controller.

One draft at a time, keyed by None (create) or the id being edited.
Drafts are validated against a fixed rule list per entity before anything
is sent; the first broken rule blocks the submit.
"""
import copy
import enum
import logging
from typing import Dict, List, Optional

from .errors import ClientError, ValidationFailed
from .mutator import TxState

logger = logging.getLogger('bizpanel.client.forms')

READ_ONLY_FIELDS = ('id', 'created_at', 'updated_at')


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class Rule:
    """Check one field of a draft; may coerce the value it accepts"""
    message = 'Invalid value'

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        if message:
            self.message = message

    def apply(self, draft: Dict):
        """Return the (possibly coerced) value or raise ValidationFailed"""
        return draft.get(self.field)

    def fail(self):
        raise ValidationFailed(self.field, self.message)


class Required(Rule):
    message = 'This field is required'

    def apply(self, draft):
        value = draft.get(self.field)
        if _is_empty(value):
            self.fail()
        return value.strip() if isinstance(value, str) else value


class RequiredUnless(Rule):
    """Required unless another field holds one of the given values"""
    message = 'This field is required'

    def __init__(self, field, other: str, values, message=None):
        super().__init__(field, message)
        self.other = other
        self.values = tuple(values)

    def apply(self, draft):
        value = draft.get(self.field)
        if draft.get(self.other) not in self.values and _is_empty(value):
            self.fail()
        return value


class Numeric(Rule):
    message = 'Must be a number'

    def _number(self, value):
        if isinstance(value, bool):
            self.fail()
        try:
            return float(value)
        except (TypeError, ValueError):
            self.fail()

    def apply(self, draft):
        value = draft.get(self.field)
        if _is_empty(value):
            return value
        return self._number(value)


class Integer(Numeric):
    message = 'Must be a whole number'

    def apply(self, draft):
        value = draft.get(self.field)
        if _is_empty(value):
            return value
        number = self._number(value)
        if not number.is_integer():
            self.fail()
        return int(number)


class NonNegative(Numeric):
    message = 'Must be zero or greater'

    def apply(self, draft):
        number = super().apply(draft)
        if not _is_empty(number) and number < 0:
            self.fail()
        return number


class Positive(Numeric):
    message = 'Must be greater than zero'

    def __init__(self, field, message=None, unless: Optional[Dict] = None):
        super().__init__(field, message)
        self.unless = unless or {}

    def apply(self, draft):
        if any(draft.get(other) in values for other, values in self.unless.items()):
            return draft.get(self.field)
        number = super().apply(draft)
        if not _is_empty(number) and number <= 0:
            self.fail()
        return number


class PositiveInteger(Integer):
    message = 'Must be a whole number greater than zero'

    def apply(self, draft):
        number = super().apply(draft)
        if not _is_empty(number) and number <= 0:
            self.fail()
        return number


class OneOf(Rule):
    def __init__(self, field, choices, message=None):
        super().__init__(field, message or f"Must be one of: {', '.join(choices)}")
        self.choices = tuple(choices)

    def apply(self, draft):
        value = draft.get(self.field)
        if _is_empty(value):
            return value
        if value not in self.choices:
            self.fail()
        return value


DISCOUNT_TYPES = ('fixed', 'percentage', 'free_delivery', 'bogo')
LISTING_TYPES = ('sale', 'rent')
PROPERTY_TYPES = ('apartment', 'villa', 'land', 'office', 'shop', 'other')
ROOM_STATUSES = ('available', 'occupied', 'cleaning', 'maintenance')

SCHEMAS: Dict[str, List[Rule]] = {
    'categories': [
        Required('name', 'Category name is required'),
    ],
    'products': [
        Required('name', 'Product name is required'),
        Required('price', 'Price is required'),
        NonNegative('price', 'Price must be zero or greater'),
    ],
    'coupons': [
        Required('code', 'Coupon code is required'),
        Required('title', 'Coupon title is required'),
        OneOf('discount_type', DISCOUNT_TYPES),
        RequiredUnless('discount_value', 'discount_type', ('free_delivery',), 'Discount value is required'),
        Positive('discount_value', 'Discount value must be greater than zero', unless={'discount_type': ('free_delivery',)}),
    ],
    'room_types': [
        Required('name', 'Room type name is required'),
        Required('price', 'Price is required'),
        NonNegative('price', 'Price must be zero or greater'),
        Required('capacity', 'Capacity is required'),
        PositiveInteger('capacity', 'Capacity must be a whole number greater than zero'),
    ],
    'rooms': [
        Required('room_number', 'Room number is required'),
        Required('room_type', 'Room type is required'),
        Integer('floor', 'Floor must be a whole number'),
        OneOf('status', ROOM_STATUSES),
    ],
    'listings': [
        Required('title', 'Listing title is required'),
        OneOf('listing_type', LISTING_TYPES),
        OneOf('property_type', PROPERTY_TYPES),
        Required('price', 'Price is required'),
        Positive('price', 'Price must be greater than zero'),
    ],
}


def validate_draft(rules: List[Rule], draft: Dict) -> Dict:
    """Run rules in order and return the coerced payload"""
    payload = {key: value for key, value in draft.items() if key not in READ_ONLY_FIELDS}
    for rule in rules:
        value = rule.apply(payload)
        if rule.field in payload or not _is_empty(value):
            payload[rule.field] = value
    if isinstance(payload.get('code'), str):
        payload['code'] = payload['code'].upper()
    return payload


class FormState(enum.Enum):
    CLOSED = 'closed'
    OPEN_FOR_CREATE = 'open_for_create'
    OPEN_FOR_EDIT = 'open_for_edit'
    VALIDATING = 'validating'
    SUBMITTING = 'submitting'


class FormController:
    def __init__(self, mutator, rules: Optional[List[Rule]] = None):
        self.mutator = mutator
        self.rules = rules if rules is not None else SCHEMAS.get(mutator.resource.name, [])
        self.state = FormState.CLOSED
        self.draft: Dict = {}
        self.editing_id = None
        self.saving = False
        self._original: Dict = {}

    @property
    def store(self):
        return self.mutator.store

    @property
    def is_open(self) -> bool:
        return self.state is not FormState.CLOSED

    def open_for_create(self, defaults: Optional[Dict] = None):
        self._require_idle()
        self.state = FormState.OPEN_FOR_CREATE
        self.editing_id = None
        self._original = {}
        self.draft = copy.deepcopy(defaults or {})

    def open_for_edit(self, item_id):
        self._require_idle()
        item = self.store.get(item_id)
        if item is None:
            raise KeyError(item_id)
        self.state = FormState.OPEN_FOR_EDIT
        self.editing_id = item_id
        self._original = item
        self.draft = copy.deepcopy(item)

    def set(self, field: str, value):
        if not self.is_open:
            raise ClientError('The form is not open')
        self.draft[field] = value

    def update(self, **fields):
        for field, value in fields.items():
            self.set(field, value)

    def cancel(self):
        """Close the form and discard the draft; a submit in flight still settles"""
        self.state = FormState.CLOSED
        self.draft = {}
        self.editing_id = None
        self._original = {}

    def _require_idle(self):
        if self.saving:
            raise ClientError('A save is in progress')

    def submit(self):
        """
        Validate the draft and hand the payload to the mutator.

        Returns the Transaction (None when an edit changed nothing or a save
        is already in flight). Raises ValidationFailed when a rule is broken.
        """
        if self.saving:
            logger.warning("Submit ignored: a save is already in progress")
            return None
        if self.state not in (FormState.OPEN_FOR_CREATE, FormState.OPEN_FOR_EDIT):
            raise ClientError('The form is not open')

        origin = self.state
        self.state = FormState.VALIDATING
        try:
            payload = validate_draft(self.rules, self.draft)
        except ValidationFailed as e:
            self.state = origin
            self.store.notifications.error(e.message, code='VALIDATION_ERROR', details=[f"{e.field}: {e.message}"])
            raise

        if origin is FormState.OPEN_FOR_EDIT:
            payload = {key: value for key, value in payload.items() if self._original.get(key) != value}
            if not payload:
                self.cancel()
                return None

        self.state = FormState.SUBMITTING
        self.saving = True
        try:
            if origin is FormState.OPEN_FOR_CREATE:
                tx = self.mutator.create(payload)
            else:
                tx = self.mutator.update(self.editing_id, payload)
        except Exception:
            self.state = origin
            raise
        finally:
            self.saving = False

        if tx.state is TxState.COMMITTED:
            self.cancel()
        elif self.state is FormState.SUBMITTING:
            self.state = origin
        return tx

    def attach_upload(self, field: str, fileobj, filename: str, content_type: str, append: bool = False) -> str:
        """Upload a file and set (or, with append=True, add) its URL on the draft"""
        if not self.is_open:
            raise ClientError('The form is not open')
        try:
            url = self.store.api.upload(fileobj, filename, content_type)
        except ClientError as e:
            self.store.notifications.from_error('Upload failed', e)
            raise
        if append:
            urls = list(self.draft.get(field) or [])
            urls.append(url)
            self.draft[field] = urls
        else:
            self.draft[field] = url
        return url
