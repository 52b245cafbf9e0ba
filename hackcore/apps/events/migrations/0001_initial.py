from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import hackcore.apps.events.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=160)),
                ('slug', models.SlugField(unique=True)),
                ('description', models.TextField(blank=True)),
                ('committee_name', models.CharField(blank=True, max_length=160)),
                ('registration_deadline', models.DateField()),
                ('proposal_deadline', models.DateField(blank=True, help_text='Opcional. Si está vacío, se pasa directo a preselección.', null=True)),
                ('execution_start', models.DateField()),
                ('execution_end', models.DateField()),
                ('phase', models.CharField(choices=[('draft', 'Borrador'), ('registration_open', 'Inscripción abierta'), ('proposal_submission', 'Entrega de propuestas'), ('shortlisting', 'Preselección'), ('execution_active', 'Hackathon en curso'), ('judging', 'Evaluación'), ('completed', 'Finalizado')], db_index=True, default='draft', max_length=24)),
                ('shortlist_target_count', models.PositiveIntegerField(default=hackcore.apps.events.models.default_shortlist_count, help_text='Cantidad de equipos a preseleccionar (top N).', validators=[django.core.validators.MinValueValidator(1)])),
                ('min_team_size', models.PositiveIntegerField(default=1)),
                ('max_team_size', models.PositiveIntegerField(default=4)),
                ('meals', models.JSONField(blank=True, default=list, help_text='Comidas con QR propio, en orden. Ej.: ["breakfast", "lunch", "dinner"]')),
                ('problem_statement_url', models.URLField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ('-execution_start', 'title'),
                'constraints': [models.CheckConstraint(condition=models.Q(('shortlist_target_count__gte', 1)), name='event_shortlist_target_positive')],
            },
        ),
    ]
