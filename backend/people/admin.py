from django.contrib import admin

from .models import Visitor

# The payroll snapshot tables use composite primary keys, which the admin
# cannot edit; they are browsed through /staff/search instead.


class VisitorAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'reason', 'date_from', 'date_to')
    search_fields = ('name', 'reason')
    date_hierarchy = 'date_from'


admin.site.register(Visitor, VisitorAdmin)
