# Generated manually for tickets app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('branches', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Ticket',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('ticket_no', models.CharField(editable=False, max_length=20, unique=True)),
                ('name', models.CharField(max_length=100)),
                ('contact_number', models.CharField(blank=True, db_index=True, max_length=30)),
                ('player_names', models.JSONField(blank=True, default=list)),
                ('number_of_people', models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])),
                ('ticket_type', models.CharField(choices=[('Adult', 'Adult'), ('Child', 'Child'), ('Group', 'Group'), ('Custom', 'Custom')], default='Adult', max_length=10)),
                ('per_person_fee', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.01'))])),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('currency', models.CharField(default='NPR', max_length=3)),
                ('group_name', models.CharField(blank=True, max_length=100)),
                ('group_number', models.CharField(blank=True, max_length=50)),
                ('group_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('remarks', models.TextField(blank=True)),
                ('started_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('status', models.CharField(choices=[('booked', 'Booked'), ('playing', 'Playing'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('deactivated', 'Deactivated')], default='booked', max_length=12)),
                ('printed', models.BooleanField(default=False)),
                ('total_extra_minutes', models.PositiveIntegerField(default=0)),
                ('total_players', models.PositiveIntegerField(default=1)),
                ('played_players', models.PositiveIntegerField(default=0)),
                ('waiting_players', models.PositiveIntegerField(default=0)),
                ('refunded_players_count', models.PositiveIntegerField(default=0)),
                ('is_refunded', models.BooleanField(default=False)),
                ('refund_reason', models.CharField(blank=True, max_length=255)),
                ('refund_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('refunded_players', models.JSONField(blank=True, default=list)),
                ('refund_name', models.CharField(blank=True, max_length=100)),
                ('refund_method', models.CharField(blank=True, choices=[('cash', 'Cash'), ('online', 'Online'), ('bank', 'Bank'), ('wallet', 'Wallet'), ('other', 'Other')], max_length=10)),
                ('payment_reference', models.CharField(blank=True, max_length=100)),
                ('refunded_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='tickets', to='branches.branch')),
                ('refunded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='tickets_refunded', to=settings.AUTH_USER_MODEL)),
                ('staff', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='tickets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'tickets',
                'ordering': ['-started_at'],
                'indexes': [
                    models.Index(fields=['branch', 'started_at'], name='tickets_branch_started_idx'),
                    models.Index(fields=['branch', 'status'], name='tickets_branch_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ExtraTimeEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('minutes', models.PositiveIntegerField(validators=[MinValueValidator(1)])),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('label', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('added_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('added_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='extra_time_entries', to=settings.AUTH_USER_MODEL)),
                ('ticket', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='extra_time_entries', to='tickets.ticket')),
            ],
            options={
                'db_table': 'ticket_extra_time',
                'ordering': ['added_at'],
            },
        ),
        migrations.CreateModel(
            name='TicketScan',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('scanned_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('remaining_minutes', models.IntegerField(blank=True, null=True)),
                ('branch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='ticket_scans', to='branches.branch')),
                ('scanned_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ticket_scans', to=settings.AUTH_USER_MODEL)),
                ('ticket', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='scans', to='tickets.ticket')),
            ],
            options={
                'db_table': 'ticket_scans',
                'ordering': ['-scanned_at'],
            },
        ),
    ]
