import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='VehicleType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type_name', models.CharField(max_length=50)),
                ('icon', models.CharField(blank=True, default='', max_length=10)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'db_table': 'vehicle_types',
                'ordering': ['type_name'],
            },
        ),
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('emp_id', models.CharField(db_column='EmpID', db_index=True, max_length=50)),
                ('vehicle_no', models.CharField(db_column='Vehino', max_length=50)),
                ('owner', models.CharField(blank=True, db_column='VehiOwner', default='', max_length=255)),
                ('type', models.CharField(blank=True, db_column='Type', default='', max_length=20)),
                ('mobile', models.CharField(blank=True, db_column='Mobile', default='', max_length=16)),
                ('email', models.TextField(blank=True, db_column='Email', default='')),
                (
                    'approval_status',
                    models.CharField(
                        choices=[('Pending', 'Pending'), ('Approved', 'Approved'), ('Rejected', 'Rejected')],
                        db_column='ApprovalStatus',
                        db_index=True,
                        default='Pending',
                        max_length=10,
                    ),
                ),
                ('create_date', models.DateTimeField(db_column='createDate', default=django.utils.timezone.now)),
                ('created_by', models.CharField(blank=True, db_column='CreatedBy', default='', max_length=150)),
                ('approval_by', models.CharField(blank=True, db_column='ApprovalBy', default='', max_length=150)),
                ('approval_date', models.DateTimeField(blank=True, db_column='ApprovalDate', null=True)),
                ('email_sent', models.BooleanField(default=False)),
                ('last_notified_status', models.CharField(blank=True, default='', max_length=20)),
                (
                    'vehicle_type',
                    models.ForeignKey(
                        blank=True,
                        db_column='vehicle_type_id',
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='vehicles',
                        to='vehicles.vehicletype',
                    ),
                ),
            ],
            options={
                'db_table': 'vehidb',
                'ordering': ['-create_date'],
                'constraints': [
                    models.UniqueConstraint(fields=('emp_id', 'vehicle_no'), name='vehidb_emp_vehicle_uniq'),
                ],
            },
        ),
    ]
