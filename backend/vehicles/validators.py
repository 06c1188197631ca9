import re
from typing import Iterable, Optional

from django.core.exceptions import ValidationError

VEHICLE_NO_RE = re.compile(r'^[A-Za-z0-9/\-\s]+$')
MOBILE_RE = re.compile(r'^\+?\d{7,15}$')
EMAIL_RE = re.compile(r'^[\w.%+-]+@[\w.-]+\.[a-zA-Z]{2,}$')

FIELD_LABELS = {
    'emp_id': 'Person ID',
    'vehicle_no': 'Vehicle Number',
    'owner': 'Owner Name',
    'mobile': 'Mobile No',
    'email': 'Email',
    'vehicle_type_id': 'Vehicle Type',
    'certificate': 'Registration Certificate',
}


def normalize_vehicle_no(value: Optional[str]) -> str:
    return (value or '').strip().upper()


def validate_vehicle_data(data: dict, required: Iterable[str] = ('emp_id', 'vehicle_no')):
    """Raise ``ValidationError`` with a per-field message dict; return cleaned values otherwise.

    Optional fields are only checked when present.
    """
    cleaned = dict(data)
    for key in ('emp_id', 'owner', 'mobile', 'email'):
        if isinstance(cleaned.get(key), str):
            cleaned[key] = cleaned[key].strip()
    cleaned['vehicle_no'] = normalize_vehicle_no(cleaned.get('vehicle_no'))

    errors = {}
    for key in required:
        value = cleaned.get(key)
        if value is None or value == '':
            errors[key] = f'{FIELD_LABELS.get(key, key)} is required.'

    if cleaned['vehicle_no'] and 'vehicle_no' not in errors and not VEHICLE_NO_RE.match(cleaned['vehicle_no']):
        errors['vehicle_no'] = 'Invalid vehicle number format.'
    if cleaned.get('mobile') and not MOBILE_RE.match(cleaned['mobile']):
        errors['mobile'] = 'Invalid mobile number format.'
    if cleaned.get('email') and not EMAIL_RE.match(cleaned['email']):
        errors['email'] = 'Invalid email address.'

    if errors:
        raise ValidationError(errors)
    return cleaned
