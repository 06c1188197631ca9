from django.db import models
from django.utils import timezone


class VehicleType(models.Model):
    type_name = models.CharField(max_length=50)
    icon = models.CharField(max_length=10, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'vehicle_types'
        ordering = ['type_name']

    def __str__(self):
        return self.display_name

    @property
    def display_name(self) -> str:
        return f'{self.icon} {self.type_name}'.strip()


class Vehicle(models.Model):
    """A vehicle registered against a person id (employee no, reg no or visitor id)."""

    class Status(models.TextChoices):
        PENDING = 'Pending', 'Pending'
        APPROVED = 'Approved', 'Approved'
        REJECTED = 'Rejected', 'Rejected'

    PERSON_TYPES = ('Student', 'Permanent', 'Temporary', 'Casual', 'Contract', 'Institute', 'Visitor')

    emp_id = models.CharField(max_length=50, db_column='EmpID', db_index=True)
    vehicle_no = models.CharField(max_length=50, db_column='Vehino')
    owner = models.CharField(max_length=255, db_column='VehiOwner', blank=True, default='')
    type = models.CharField(max_length=20, db_column='Type', blank=True, default='')
    vehicle_type = models.ForeignKey(
        VehicleType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vehicles',
        db_column='vehicle_type_id',
    )
    mobile = models.CharField(max_length=16, db_column='Mobile', blank=True, default='')
    email = models.TextField(db_column='Email', blank=True, default='')
    approval_status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_column='ApprovalStatus',
        db_index=True,
    )
    create_date = models.DateTimeField(default=timezone.now, db_column='createDate')
    created_by = models.CharField(max_length=150, db_column='CreatedBy', blank=True, default='')
    approval_by = models.CharField(max_length=150, db_column='ApprovalBy', blank=True, default='')
    approval_date = models.DateTimeField(null=True, blank=True, db_column='ApprovalDate')
    email_sent = models.BooleanField(default=False)
    last_notified_status = models.CharField(max_length=20, blank=True, default='')

    class Meta:
        db_table = 'vehidb'
        ordering = ['-create_date']
        constraints = [
            models.UniqueConstraint(fields=['emp_id', 'vehicle_no'], name='vehidb_emp_vehicle_uniq'),
        ]

    def __str__(self):
        return f'{self.vehicle_no} ({self.emp_id})'

    @property
    def is_pending(self) -> bool:
        return self.approval_status == self.Status.PENDING

    def to_dict(self) -> dict:
        return {
            'empId': self.emp_id,
            'vehicleNo': self.vehicle_no,
            'owner': self.owner,
            'type': self.type,
            'vehicleType': self.vehicle_type.display_name if self.vehicle_type_id else '',
            'mobile': self.mobile,
            'email': self.email,
            'approvalStatus': self.approval_status,
            'createDate': self.create_date.isoformat() if self.create_date else None,
            'createdBy': self.created_by,
            'approvalBy': self.approval_by,
            'approvalDate': self.approval_date.isoformat() if self.approval_date else None,
        }
