from django.db import migrations, models


def _snapshot_fields():
    return [
        ('salary_date', models.DateField(db_column='SalDt')),
        ('emp_no', models.CharField(db_column='EmpNo', db_index=True, max_length=20)),
        ('emp_name', models.CharField(blank=True, db_column='EmpNm', max_length=255, null=True)),
        ('designation', models.CharField(blank=True, db_column='DesgNm', max_length=255, null=True)),
        ('nic', models.CharField(blank=True, db_column='NIC', max_length=20, null=True)),
        ('sex', models.CharField(blank=True, db_column='Sex', max_length=10, null=True)),
        ('department', models.CharField(blank=True, db_column='BuNm', max_length=255, null=True)),
        ('department_code', models.CharField(blank=True, db_column='BuCd', max_length=20, null=True)),
        ('employee_type', models.CharField(blank=True, db_column='EmpTypCd', max_length=50, null=True)),
        ('date_of_birth', models.CharField(blank=True, db_column='DtBirth', max_length=20, null=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Staff',
            fields=[
                (
                    'pk',
                    models.CompositePrimaryKey(
                        'salary_date', 'emp_no', blank=True, editable=False, primary_key=True, serialize=False
                    ),
                ),
                *_snapshot_fields(),
                ('category', models.CharField(blank=True, db_column='EmpCat1Nm', max_length=100, null=True)),
                ('branch_name', models.CharField(blank=True, db_column='BrnNm', max_length=255, null=True)),
            ],
            options={
                'verbose_name': 'permanent staff snapshot',
                'db_table': 'slipspaymentsdetailall',
            },
        ),
        migrations.CreateModel(
            name='TemporaryStaff',
            fields=[
                (
                    'pk',
                    models.CompositePrimaryKey(
                        'salary_date', 'emp_no', 'category',
                        blank=True, editable=False, primary_key=True, serialize=False,
                    ),
                ),
                *_snapshot_fields(),
                ('category', models.CharField(db_column='EmpCat1Nm', max_length=100)),
            ],
            options={
                'verbose_name': 'temporary staff snapshot',
                'verbose_name_plural': 'temporary staff snapshots',
                'db_table': 'temporarystaff',
            },
        ),
        migrations.CreateModel(
            name='Visitor',
            fields=[
                ('id', models.BigAutoField(db_column='ID', primary_key=True, serialize=False)),
                ('name', models.CharField(db_column='Name', max_length=255)),
                ('reason', models.CharField(blank=True, db_column='Reason', default='', max_length=255)),
                ('date_from', models.DateField(blank=True, db_column='DateFrom', null=True)),
                ('date_to', models.DateField(blank=True, db_column='DateTo', null=True)),
            ],
            options={
                'db_table': 'visitor',
                'ordering': ['-id'],
            },
        ),
    ]
