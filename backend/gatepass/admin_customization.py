from django.contrib import admin

# Branding for the Django admin mounted at /admin/site/

admin.site.site_title = 'Vehicle Gate Pass Admin'
admin.site.site_header = 'University of Peradeniya - Vehicle Gate Pass'
admin.site.index_title = 'Records'
admin.site.site_url = '/dashboard'
