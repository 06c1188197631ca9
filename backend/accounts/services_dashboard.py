from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from .roles import Role, role_of


@dataclass(frozen=True)
class DashboardTask:
    title: str
    url: str
    description: str = ''

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


INSERT_VEHICLE = DashboardTask('Insert Vehicle', '/vehicle/insert', 'Register a vehicle for a person')
PENDING_APPROVALS = DashboardTask('Pending Approvals', '/vehicle/pending', 'Approve or reject new registrations')
VEHICLE_SEARCH = DashboardTask('Vehicle Search', '/vehicle/search', 'Look up a vehicle or its owner')
IMAGE_MANAGEMENT = DashboardTask('Image Management', '/view/images', 'Upload profile photos and print ID cards')
QR_GENERATION = DashboardTask('QR Codes', '/qr/generate', 'Generate gate-pass QR codes')
BACKUP = DashboardTask('Database Backup', '/admin/backup', 'Create and download database dumps')
BULK_EMAIL = DashboardTask('Bulk Email', '/admin/email', 'Send a notice to staff contacts')
MY_VEHICLES = DashboardTask('My Vehicles', '/my/vehicle', 'Register and track your own vehicles')

_ROLE_TASKS: Dict[Role, List[DashboardTask]] = {
    Role.ADMIN: [
        INSERT_VEHICLE,
        PENDING_APPROVALS,
        VEHICLE_SEARCH,
        IMAGE_MANAGEMENT,
        QR_GENERATION,
        BACKUP,
        BULK_EMAIL,
    ],
    Role.ENTRY: [INSERT_VEHICLE],
    Role.VIEWER: [IMAGE_MANAGEMENT],
    Role.SEARCHER: [VEHICLE_SEARCH],
    Role.SELF_SERVICE: [MY_VEHICLES],
}


def tasks_for(role: Role) -> List[DashboardTask]:
    return list(_ROLE_TASKS[role])


def resolve_dashboard(user) -> Dict:
    """Dashboard payload for *user*: role, tasks and the admin's pending count."""
    if user is None:
        raise ValueError('user is required')

    role: Optional[Role] = role_of(user)
    if role is None:
        return {'role': None, 'role_label': '', 'tasks': [], 'pending_count': None}

    pending_count = None
    if role is Role.ADMIN:
        from vehicles.services import pending_vehicles

        pending_count = pending_vehicles().count()

    return {
        'role': role.value,
        'role_label': role.label,
        'tasks': [task.to_dict() for task in tasks_for(role)],
        'pending_count': pending_count,
    }
