from django import forms

CATEGORY_CHOICES = [
    ('student', 'Student'),
    ('permanent', 'Permanent'),
    ('temporary', 'Temporary'),
    ('casual', 'Casual'),
    ('contract', 'Contract'),
    ('institute', 'Institute'),
    ('visitor', 'Visitor'),
]


class VehicleEntryForm(forms.Form):
    """Operator entry form; format rules live in ``vehicles.validators``."""

    category = forms.ChoiceField(choices=CATEGORY_CHOICES)
    id = forms.CharField(max_length=50)
    vehicle_no = forms.CharField(max_length=50)
    owner = forms.CharField(max_length=255, required=False)
    vehicle_type_id = forms.IntegerField(required=False)
    mobile = forms.CharField(max_length=16, required=False)
    email = forms.CharField(max_length=254, required=False)
    status = forms.CharField(required=False)
    certificate = forms.FileField(required=False)


class VehicleUpdateForm(VehicleEntryForm):
    old_vehicle_no = forms.CharField(max_length=50)
    approval_status = forms.CharField(required=False)


class SelfServiceVehicleForm(forms.Form):
    vehicle_no = forms.CharField(max_length=50)
    owner = forms.CharField(max_length=255)
    vehicle_type_id = forms.IntegerField()
    mobile = forms.CharField(max_length=16)
    email = forms.CharField(max_length=254)
    certificate = forms.FileField()

    REQUIRED_MESSAGE = (
        'Please fill all details: Vehicle Number, Owner Name, Mobile No, Email, '
        'Registration Certificate and Vehicle Type'
    )
