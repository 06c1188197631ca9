from django.contrib import admin

from .models import EmailContact


class EmailContactAdmin(admin.ModelAdmin):
    list_display = ('nic', 'emp_no', 'email')
    search_fields = ('nic', 'emp_no', 'email')


admin.site.register(EmailContact, EmailContactAdmin)
