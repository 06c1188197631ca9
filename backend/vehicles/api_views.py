from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services


class VehicleCheckView(APIView):
    """GET /api/vehicle/check?empId=&vehicleNo=

    With ``empId`` the answer is whether that person already registered the
    plate; with the plate alone it says who owns it, for the scanner page.
    """

    def get(self, request):
        params = request.query_params
        vehicle_no = (params.get('vehicleNo') or params.get('vehicleno') or '').strip()
        emp_id = (params.get('empId') or params.get('empid') or '').strip()
        if not vehicle_no:
            return Response({'error': 'no_veh'}, status=status.HTTP_400_BAD_REQUEST)

        if emp_id:
            return Response({'exists': services.vehicle_exists(emp_id, vehicle_no)})

        vehicle = services.find_by_number(vehicle_no)
        if vehicle is None:
            return Response({'found': False})
        return Response({'found': True, 'category': vehicle.type, 'id': vehicle.emp_id})


class VehicleTypesView(APIView):
    """GET /api/vehicle/types"""

    def get(self, request):
        return Response([
            {'id': vehicle_type.pk, 'name': vehicle_type.type_name, 'icon': vehicle_type.icon}
            for vehicle_type in services.active_vehicle_types()
        ])
