from django.contrib import admin

from .models import Vehicle, VehicleType


class VehicleTypeAdmin(admin.ModelAdmin):
    list_display = ('type_name', 'icon', 'is_active', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('type_name',)


class VehicleAdmin(admin.ModelAdmin):
    list_display = ('vehicle_no', 'emp_id', 'owner', 'type', 'approval_status', 'create_date', 'approval_by')
    list_filter = ('approval_status', 'type', 'vehicle_type')
    search_fields = ('vehicle_no', 'emp_id', 'owner', 'email')
    date_hierarchy = 'create_date'
    readonly_fields = ('create_date', 'approval_date', 'email_sent', 'last_notified_status')


admin.site.register(VehicleType, VehicleTypeAdmin)
admin.site.register(Vehicle, VehicleAdmin)
